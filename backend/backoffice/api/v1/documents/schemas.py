"""API schemas for document endpoints."""

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, field_serializer

from backoffice.models.documents import NumberedDocument
from backoffice.models.enums import DocumentType
from backoffice.utils.datetime_utils import to_api_timezone


class DocumentResponse(BaseModel):
    """Numbered document response schema."""

    id: str
    document_type: DocumentType
    number: str
    status: str
    total: Decimal | None
    created_at: datetime

    @field_serializer("created_at")
    def serialize_created_at(self, dt: datetime) -> str:
        """Serialize datetime to API timezone."""
        localized_dt = to_api_timezone(dt)
        assert localized_dt is not None
        return localized_dt.isoformat()

    @classmethod
    def from_record(cls, document: NumberedDocument, record: Any) -> "DocumentResponse":
        """Create response from any numbered document row."""
        # Sales track payment, every other document has a workflow status
        status = getattr(record, "status", None) or record.payment_status
        return cls(
            id=record.id,
            document_type=document.document_type,
            number=getattr(record, document.number_field),
            status=status.value,
            total=getattr(record, "total", None),
            created_at=record.created_at,
        )


class DocumentListResponse(BaseModel):
    """Paginated document list response."""

    documents: list[DocumentResponse]
    total: int
