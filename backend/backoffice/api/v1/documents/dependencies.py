"""FastAPI dependencies for service injection."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.db import get_session
from backoffice.services.documents.document_service import DocumentService


async def get_document_service(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DocumentService:
    """Get a DocumentService instance with the current session."""
    return DocumentService(session)


DocumentServiceDep = Annotated[DocumentService, Depends(get_document_service)]
