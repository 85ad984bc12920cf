"""Numbered business document models.

Every table here owns a human-readable number column (e.g. ``Q-2025-0042``)
protected by a named UNIQUE constraint. The constraint is the final arbiter of
uniqueness; the allocator's existence check only makes conflicts unlikely.
"""

from dataclasses import dataclass
from datetime import UTC, date, datetime
from decimal import Decimal
from enum import StrEnum
from typing import Any

from pydantic import field_validator
from sqlalchemy import CheckConstraint, Column, DateTime, Enum, ForeignKey, UniqueConstraint
from sqlmodel import Field, SQLModel
from ulid import ULID

from backoffice.models.enums import (
    DocumentType,
    PaymentStatus,
    PurchaseOrderStatus,
    QuotationStatus,
    StockTransferStatus,
)
from backoffice.models.types import ULIDType


def _utc_now() -> datetime:
    """Return current UTC datetime (timezone-aware)."""
    return datetime.now(UTC)


def _ulid() -> str:
    """Generate a new ULID string."""
    return str(ULID())


def _status_column(enum_cls: type[StrEnum], name: str) -> Column[Any]:
    return Column(
        Enum(enum_cls, values_callable=lambda e: [x.value for x in e], name=name),
        nullable=False,
    )


def _timestamp_column() -> Column[Any]:
    return Column(DateTime(timezone=True), nullable=False)


# =============================================================================
# Quotations
# =============================================================================

QUOTATION_NUMBER_CONSTRAINT = UniqueConstraint("quotation_number", name="uq_quotations_quotation_number")


class QuotationBase(SQLModel):
    """Fields supplied by the caller when creating a quotation."""

    customer_name: str = Field(max_length=100)
    customer_email: str | None = Field(default=None, max_length=255)
    subtotal: Decimal = Field(default=Decimal("0"), ge=0, max_digits=12, decimal_places=2)
    tax_amount: Decimal = Field(default=Decimal("0"), ge=0, max_digits=12, decimal_places=2)
    discount_amount: Decimal = Field(default=Decimal("0"), ge=0, max_digits=12, decimal_places=2)
    total: Decimal = Field(ge=0, max_digits=12, decimal_places=2)
    valid_until: date | None = None
    notes: str | None = None
    terms: str | None = None


class QuotationCreate(QuotationBase):
    pass


class Quotation(QuotationBase, table=True):
    """Customer quotation."""

    __tablename__ = "quotations"
    __table_args__ = (
        QUOTATION_NUMBER_CONSTRAINT,
        CheckConstraint("total >= 0", name="ck_quotations_total_non_negative"),
    )

    id: str = Field(default_factory=_ulid, max_length=26, sa_column=Column(ULIDType, primary_key=True))
    quotation_number: str = Field(max_length=50)
    status: QuotationStatus = Field(
        default=QuotationStatus.PENDING,
        sa_column=_status_column(QuotationStatus, "quotationstatus"),
    )
    created_at: datetime = Field(default_factory=_utc_now, sa_column=_timestamp_column())
    updated_at: datetime = Field(default_factory=_utc_now, sa_column=_timestamp_column())


# =============================================================================
# Sales
# =============================================================================

SALE_NUMBER_CONSTRAINT = UniqueConstraint("sale_number", name="uq_sales_sale_number")


class SaleBase(SQLModel):
    """Fields supplied by the caller when recording a sale."""

    customer_name: str | None = Field(default=None, max_length=100)
    quotation_id: str | None = Field(default=None, max_length=26)  # Sale converted from a quotation
    subtotal: Decimal = Field(default=Decimal("0"), ge=0, max_digits=12, decimal_places=2)
    tax_amount: Decimal = Field(default=Decimal("0"), ge=0, max_digits=12, decimal_places=2)
    discount_amount: Decimal = Field(default=Decimal("0"), ge=0, max_digits=12, decimal_places=2)
    total: Decimal = Field(ge=0, max_digits=12, decimal_places=2)
    payment_method: str | None = Field(default=None, max_length=50)
    notes: str | None = None

    @field_validator("quotation_id")
    @classmethod
    def validate_quotation_id(cls, v: str | None) -> str | None:
        if v is None:
            return None
        try:
            return str(ULID.from_str(v))
        except ValueError as e:
            raise ValueError("quotation_id must be a ULID") from e


class SaleCreate(SaleBase):
    pass


class Sale(SaleBase, table=True):
    """Completed sale."""

    __tablename__ = "sales"
    __table_args__ = (
        SALE_NUMBER_CONSTRAINT,
        CheckConstraint("total >= 0", name="ck_sales_total_non_negative"),
    )

    id: str = Field(default_factory=_ulid, max_length=26, sa_column=Column(ULIDType, primary_key=True))
    sale_number: str = Field(max_length=50)
    quotation_id: str | None = Field(
        default=None,
        sa_column=Column(ULIDType, ForeignKey("quotations.id"), index=True, nullable=True),
    )
    payment_status: PaymentStatus = Field(
        default=PaymentStatus.PENDING,
        sa_column=_status_column(PaymentStatus, "paymentstatus"),
    )
    created_at: datetime = Field(default_factory=_utc_now, sa_column=_timestamp_column())
    updated_at: datetime = Field(default_factory=_utc_now, sa_column=_timestamp_column())


# =============================================================================
# Purchase orders
# =============================================================================

PURCHASE_ORDER_NUMBER_CONSTRAINT = UniqueConstraint("po_number", name="uq_purchase_orders_po_number")


class PurchaseOrderBase(SQLModel):
    """Fields supplied by the caller when raising a purchase order."""

    supplier_name: str = Field(max_length=100)
    subtotal: Decimal = Field(default=Decimal("0"), ge=0, max_digits=12, decimal_places=2)
    tax_amount: Decimal = Field(default=Decimal("0"), ge=0, max_digits=12, decimal_places=2)
    total: Decimal = Field(ge=0, max_digits=12, decimal_places=2)
    expected_delivery_date: date | None = None
    notes: str | None = None


class PurchaseOrderCreate(PurchaseOrderBase):
    pass


class PurchaseOrder(PurchaseOrderBase, table=True):
    """Purchase order sent to a supplier."""

    __tablename__ = "purchase_orders"
    __table_args__ = (
        PURCHASE_ORDER_NUMBER_CONSTRAINT,
        CheckConstraint("total >= 0", name="ck_purchase_orders_total_non_negative"),
    )

    id: str = Field(default_factory=_ulid, max_length=26, sa_column=Column(ULIDType, primary_key=True))
    po_number: str = Field(max_length=50)
    status: PurchaseOrderStatus = Field(
        default=PurchaseOrderStatus.PENDING,
        sa_column=_status_column(PurchaseOrderStatus, "purchaseorderstatus"),
    )
    created_at: datetime = Field(default_factory=_utc_now, sa_column=_timestamp_column())
    updated_at: datetime = Field(default_factory=_utc_now, sa_column=_timestamp_column())


# =============================================================================
# Stock transfers
# =============================================================================

STOCK_TRANSFER_NUMBER_CONSTRAINT = UniqueConstraint("transfer_number", name="uq_stock_transfers_transfer_number")


class StockTransferBase(SQLModel):
    """Fields supplied by the caller when moving stock between locations."""

    from_location: str = Field(max_length=100)
    to_location: str = Field(max_length=100)
    notes: str | None = None


class StockTransferCreate(StockTransferBase):
    pass


class StockTransfer(StockTransferBase, table=True):
    """Stock movement between two locations."""

    __tablename__ = "stock_transfers"
    __table_args__ = (STOCK_TRANSFER_NUMBER_CONSTRAINT,)

    id: str = Field(default_factory=_ulid, max_length=26, sa_column=Column(ULIDType, primary_key=True))
    transfer_number: str = Field(max_length=50)
    status: StockTransferStatus = Field(
        default=StockTransferStatus.PENDING,
        sa_column=_status_column(StockTransferStatus, "stocktransferstatus"),
    )
    created_at: datetime = Field(default_factory=_utc_now, sa_column=_timestamp_column())
    updated_at: datetime = Field(default_factory=_utc_now, sa_column=_timestamp_column())


# =============================================================================
# Registry
# =============================================================================


@dataclass(frozen=True)
class NumberedDocument:
    """A document table whose rows carry a unique human-readable number."""

    document_type: DocumentType
    prefix: str
    model: type[SQLModel]
    number_field: str
    constraint: UniqueConstraint

    @property
    def number_column(self) -> Any:  # InstrumentedAttribute at runtime
        return getattr(self.model, self.number_field)

    def build(self, number: str, record_data: SQLModel) -> Any:
        """Create an unsaved row from the caller's payload and an allocated number."""
        return self.model(**record_data.model_dump(), **{self.number_field: number})


NUMBERED_DOCUMENTS: dict[DocumentType, NumberedDocument] = {
    DocumentType.QUOTATION: NumberedDocument(
        DocumentType.QUOTATION, "Q", Quotation, "quotation_number", QUOTATION_NUMBER_CONSTRAINT
    ),
    DocumentType.SALE: NumberedDocument(DocumentType.SALE, "S", Sale, "sale_number", SALE_NUMBER_CONSTRAINT),
    DocumentType.PURCHASE_ORDER: NumberedDocument(
        DocumentType.PURCHASE_ORDER, "PO", PurchaseOrder, "po_number", PURCHASE_ORDER_NUMBER_CONSTRAINT
    ),
    DocumentType.STOCK_TRANSFER: NumberedDocument(
        DocumentType.STOCK_TRANSFER, "TR", StockTransfer, "transfer_number", STOCK_TRANSFER_NUMBER_CONSTRAINT
    ),
}


def document_for_prefix(prefix: str) -> NumberedDocument | None:
    """Find the document table that issues numbers with the given prefix."""
    for document in NUMBERED_DOCUMENTS.values():
        if document.prefix == prefix:
            return document
    return None
