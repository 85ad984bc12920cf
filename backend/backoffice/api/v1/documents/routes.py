"""Numbered document API endpoints."""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Annotated

import structlog
from fastapi import APIRouter, HTTPException, Query, status
from sqlalchemy.exc import IntegrityError

from backoffice.api.v1.documents.dependencies import DocumentServiceDep
from backoffice.api.v1.documents.schemas import DocumentListResponse, DocumentResponse
from backoffice.models.documents import (
    NUMBERED_DOCUMENTS,
    PurchaseOrderCreate,
    QuotationCreate,
    SaleCreate,
    StockTransferCreate,
)
from backoffice.models.enums import DocumentType
from backoffice.services.documents.exceptions import DocumentNotFound
from backoffice.services.numbering.exceptions import (
    AllocationExhausted,
    InvalidDocumentNumber,
    OracleUnavailable,
)

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["documents"])

RETRY_LATER = "Could not complete, please retry"


@contextmanager
def _creation_errors() -> Iterator[None]:
    """Translate numbering failures into 503 and other constraint violations into 409."""
    try:
        yield
    except AllocationExhausted as e:
        logger.error("Document creation failed, number allocation exhausted", error=str(e))
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=RETRY_LATER)
    except OracleUnavailable as e:
        logger.error("Document creation failed, numbering unavailable", error=str(e))
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=RETRY_LATER)
    except IntegrityError as e:
        logger.warning("Document creation rejected by database constraint", error=str(e.orig))
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Document conflicts with existing data",
        )

@router.post(
    "/quotations",
    response_model=DocumentResponse,
    status_code=status.HTTP_201_CREATED,
    operation_id="createQuotation",
)
async def create_quotation(data: QuotationCreate, service: DocumentServiceDep) -> DocumentResponse:
    """Create a quotation with a new Q-YYYY-NNNN number."""
    with _creation_errors():
        quotation = await service.create_quotation(data)
    return DocumentResponse.from_record(NUMBERED_DOCUMENTS[DocumentType.QUOTATION], quotation)


@router.post(
    "/sales",
    response_model=DocumentResponse,
    status_code=status.HTTP_201_CREATED,
    operation_id="createSale",
)
async def create_sale(data: SaleCreate, service: DocumentServiceDep) -> DocumentResponse:
    """Record a sale with a new S-YYYY-NNNN number."""
    with _creation_errors():
        sale = await service.create_sale(data)
    return DocumentResponse.from_record(NUMBERED_DOCUMENTS[DocumentType.SALE], sale)


@router.post(
    "/purchase-orders",
    response_model=DocumentResponse,
    status_code=status.HTTP_201_CREATED,
    operation_id="createPurchaseOrder",
)
async def create_purchase_order(data: PurchaseOrderCreate, service: DocumentServiceDep) -> DocumentResponse:
    """Raise a purchase order with a new PO-YYYY-NNNN number."""
    with _creation_errors():
        purchase_order = await service.create_purchase_order(data)
    return DocumentResponse.from_record(NUMBERED_DOCUMENTS[DocumentType.PURCHASE_ORDER], purchase_order)


@router.post(
    "/stock-transfers",
    response_model=DocumentResponse,
    status_code=status.HTTP_201_CREATED,
    operation_id="createStockTransfer",
)
async def create_stock_transfer(data: StockTransferCreate, service: DocumentServiceDep) -> DocumentResponse:
    """Create a stock transfer with a new TR-YYYY-NNNN number."""
    with _creation_errors():
        transfer = await service.create_stock_transfer(data)
    return DocumentResponse.from_record(NUMBERED_DOCUMENTS[DocumentType.STOCK_TRANSFER], transfer)


@router.get("/documents", response_model=DocumentListResponse, operation_id="listDocuments")
async def list_documents(
    service: DocumentServiceDep,
    document_type: Annotated[DocumentType, Query(alias="type")],
    skip: int = 0,
    limit: int = 50,
) -> DocumentListResponse:
    """List documents of one type with pagination."""
    records, total = await service.list_documents(document_type, skip=skip, limit=limit)
    document = NUMBERED_DOCUMENTS[document_type]
    return DocumentListResponse(
        documents=[DocumentResponse.from_record(document, record) for record in records],
        total=total,
    )


@router.get("/documents/{number}", response_model=DocumentResponse, operation_id="getDocument")
async def get_document(number: str, service: DocumentServiceDep) -> DocumentResponse:
    """Get a single document by its number, e.g. Q-2025-0042."""
    try:
        document, record = await service.get_by_number(number)
        return DocumentResponse.from_record(document, record)
    except InvalidDocumentNumber:
        raise HTTPException(status_code=422, detail="Invalid document number")
    except DocumentNotFound:
        raise HTTPException(status_code=404, detail="Document not found")
