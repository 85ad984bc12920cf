"""Database models."""

from sqlmodel import SQLModel

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
from backoffice.models.enums import (
    DocumentType,
    PaymentStatus,
    PurchaseOrderStatus,
    QuotationStatus,
    StockTransferStatus,
)

__all__ = [
    "SQLModel",
    "NUMBERED_DOCUMENTS",
    "NumberedDocument",
    "document_for_prefix",
    "DocumentType",
    "Quotation",
    "QuotationCreate",
    "QuotationStatus",
    "Sale",
    "SaleCreate",
    "PaymentStatus",
    "PurchaseOrder",
    "PurchaseOrderCreate",
    "PurchaseOrderStatus",
    "StockTransfer",
    "StockTransferCreate",
    "StockTransferStatus",
]
