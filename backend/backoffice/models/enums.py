"""Enum definitions for database models."""

from enum import StrEnum


class DocumentType(StrEnum):
    """Business documents that receive a human-readable number on creation."""

    QUOTATION = "quotation"
    SALE = "sale"
    PURCHASE_ORDER = "purchase_order"
    STOCK_TRANSFER = "stock_transfer"


class QuotationStatus(StrEnum):
    """Lifecycle of a customer quotation."""

    DRAFT = "draft"
    PENDING = "pending"
    ACTIVE = "active"
    APPROVED = "approved"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    DELIVERED = "delivered"
    COMPLETED = "completed"
    CANCELLATION_REQUESTED = "cancellation_requested"
    CANCELLED = "cancelled"


class PaymentStatus(StrEnum):
    """Payment state of a sale."""

    PENDING = "pending"
    PARTIAL = "partial"
    PAID = "paid"
    OVERDUE = "overdue"


class PurchaseOrderStatus(StrEnum):
    """Status of a purchase order sent to a supplier."""

    PENDING = "pending"
    APPROVED = "approved"
    ORDERED = "ordered"
    RECEIVED = "received"
    CANCELLED = "cancelled"


class StockTransferStatus(StrEnum):
    """Status of a stock movement between locations."""

    PENDING = "pending"
    IN_TRANSIT = "in_transit"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
