"""Business document service.

Creates quotations, sales, purchase orders and stock transfers with a freshly
allocated document number, and looks documents up by that number.
"""

import time
from collections.abc import Callable
from random import Random
from typing import Any

import structlog
from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel, select

from backoffice.models.documents import (
    NUMBERED_DOCUMENTS,
    NumberedDocument,
    PurchaseOrder,
    PurchaseOrderCreate,
    Quotation,
    QuotationCreate,
    Sale,
    SaleCreate,
    StockTransfer,
    StockTransferCreate,
    document_for_prefix,
)
from backoffice.models.enums import DocumentType
from backoffice.services.documents.exceptions import DocumentNotFound
from backoffice.services.numbering.allocator import DocumentNumberAllocator
from backoffice.services.numbering.config import NumberingConfig
from backoffice.services.numbering.formatting import DocumentNumber
from backoffice.services.numbering.on_conflict import UniqueNumberOnConflict
from backoffice.services.numbering.oracle import SqlUniquenessOracle, UniquenessOracle
from backoffice.utils.datetime_utils import current_year

logger = structlog.get_logger(__name__)


class DocumentService:
    """Service for numbered business documents.

    The service owns the session transaction while creating a document: a
    number conflict rolls the session back before the next attempt.
    """

    def __init__(
        self,
        session: AsyncSession,
        config: NumberingConfig | None = None,
        *,
        rng: Random | None = None,
        clock: Callable[[], int] = time.time_ns,
        oracle_factory: Callable[[NumberedDocument], UniquenessOracle] | None = None,
    ):
        self.session = session
        self.config = config or NumberingConfig.from_settings()
        self.rng = rng
        self.clock = clock
        self.oracle_factory = oracle_factory

    def allocator_for(self, document: NumberedDocument) -> DocumentNumberAllocator:
        """Build an allocator that checks candidates against the document's table."""
        if self.oracle_factory is not None:
            oracle = self.oracle_factory(document)
        else:
            oracle = SqlUniquenessOracle(self.session, document.number_column)
        return DocumentNumberAllocator(oracle, self.config, rng=self.rng, clock=self.clock)

    async def allocate(self, document: NumberedDocument, scope_key: int | None = None) -> str:
        """Allocate a number without inserting anything (best-effort unique)."""
        if scope_key is None:
            scope_key = current_year()
        return await self.allocator_for(document).allocate(document.prefix, scope_key)

    async def create_with_number(
        self,
        document: NumberedDocument,
        prefix: str,
        scope_key: int,
        record_data: SQLModel,
    ) -> Any:
        """Insert a document row carrying a newly allocated number.

        Allocation and insert are repeated while the insert fails on the
        document number unique constraint, up to ``insert_max_attempts``.
        Each attempt commits or rolls back the whole session, so the session
        must hold no other uncommitted work; unflushed changes are rejected.

        Raises:
            OracleUnavailable: The existence check could not be performed
            AllocationExhausted: Every insert attempt conflicted
            IntegrityError: Any other constraint violation, unchanged
            ValueError: The session has pending changes
        """
        allocator = self.allocator_for(document)
        record: Any = None

        async for attempt in UniqueNumberOnConflict(
            session=self.session,
            allocator=allocator,
            prefix=prefix,
            scope_key=scope_key,
            constraint=document.constraint,
            max_attempts=self.config.insert_max_attempts,
        ):
            async with attempt:
                record = document.build(attempt.value, record_data)
                self.session.add(record)
                await self.session.flush()

        # UniqueNumberOnConflict guarantees success or raises
        assert record is not None
        logger.info(
            "Created document",
            document_type=document.document_type.value,
            document_id=record.id,
            number=getattr(record, document.number_field),
        )
        return record

    async def _create(self, document_type: DocumentType, data: SQLModel, scope_key: int | None) -> Any:
        document = NUMBERED_DOCUMENTS[document_type]
        if scope_key is None:
            scope_key = current_year()
        return await self.create_with_number(document, document.prefix, scope_key, data)

    async def create_quotation(self, data: QuotationCreate, *, scope_key: int | None = None) -> Quotation:
        quotation: Quotation = await self._create(DocumentType.QUOTATION, data, scope_key)
        return quotation

    async def create_sale(self, data: SaleCreate, *, scope_key: int | None = None) -> Sale:
        sale: Sale = await self._create(DocumentType.SALE, data, scope_key)
        return sale

    async def create_purchase_order(
        self, data: PurchaseOrderCreate, *, scope_key: int | None = None
    ) -> PurchaseOrder:
        purchase_order: PurchaseOrder = await self._create(DocumentType.PURCHASE_ORDER, data, scope_key)
        return purchase_order

    async def create_stock_transfer(
        self, data: StockTransferCreate, *, scope_key: int | None = None
    ) -> StockTransfer:
        transfer: StockTransfer = await self._create(DocumentType.STOCK_TRANSFER, data, scope_key)
        return transfer

    async def get_by_number(self, number: str) -> tuple[NumberedDocument, Any]:
        """Find a document by its rendered number.

        Raises:
            InvalidDocumentNumber: The value is not a document number
            DocumentNotFound: No table issues this prefix or no row has the number
        """
        parsed = DocumentNumber.parse(number)
        document = document_for_prefix(parsed.prefix)
        if document is None:
            raise DocumentNotFound()

        statement = select(document.model).where(document.number_column == parsed.value)
        result = await self.session.execute(statement)
        record = result.scalars().first()
        if record is None:
            raise DocumentNotFound()
        return document, record

    async def list_documents(
        self,
        document_type: DocumentType,
        *,
        skip: int = 0,
        limit: int = 50,
    ) -> tuple[list[Any], int]:
        """List documents of one type, newest first. Returns (documents, total_count)."""
        document = NUMBERED_DOCUMENTS[document_type]
        model: Any = document.model

        statement = select(model).offset(skip).limit(limit).order_by(model.created_at.desc())
        result = await self.session.execute(statement)
        records = list(result.scalars().all())

        count_statement = select(func.count()).select_from(model)
        count_result = await self.session.execute(count_statement)
        total = count_result.scalar() or 0

        return records, total
