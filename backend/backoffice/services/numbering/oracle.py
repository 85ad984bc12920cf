"""Uniqueness oracle: answers "is this document number already taken"."""

from typing import Any, Protocol

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.services.numbering.exceptions import OracleUnavailable

logger = structlog.get_logger(__name__)


class UniquenessOracle(Protocol):
    """Async existence check for a candidate number.

    Returns True when the value is already taken. Implementations raise
    OracleUnavailable when the check itself cannot be performed.
    """

    async def __call__(self, value: str) -> bool: ...


class SqlUniquenessOracle:
    """Existence check against a number column of a document table."""

    def __init__(self, session: AsyncSession, column: Any):  # InstrumentedAttribute at runtime
        self.session = session
        self.column = column

    async def __call__(self, value: str) -> bool:
        stmt = select(self.column).where(self.column == value).limit(1)
        try:
            result = await self.session.execute(stmt)
        except (SQLAlchemyError, OSError) as e:
            logger.error("Document number existence check failed", column=str(self.column), error=str(e))
            raise OracleUnavailable(f"Could not check whether {value} exists") from e
        return result.first() is not None
