"""Insert retry on document number unique constraint conflict."""

from collections.abc import AsyncIterator
from typing import Any

import structlog
from sqlalchemy import UniqueConstraint
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.services.numbering.allocator import DocumentNumberAllocator
from backoffice.services.numbering.exceptions import AllocationExhausted, OracleUnavailable

logger = structlog.get_logger(__name__)


def is_unique_violation(error: BaseException | None, constraint: UniqueConstraint) -> bool:
    """Check whether an IntegrityError was raised by the given unique constraint.

    PostgreSQL names the constraint in the message
    (``duplicate key value violates unique constraint "uq_..."``), SQLite names
    the columns (``UNIQUE constraint failed: table.column``).
    """
    if not isinstance(error, IntegrityError) or not constraint.name:
        return False
    error_str = str(error).lower()
    if f'"{constraint.name}"'.lower() in error_str:
        return True
    if constraint.table is None:
        return False
    columns = ", ".join(f"{constraint.table.name}.{column.name}" for column in constraint.columns)
    return f"unique constraint failed: {columns}".lower() in error_str


class UniqueNumberOnConflict:
    """Async iterator that re-allocates a document number on unique constraint conflict.

    Each iteration allocates a fresh number. The ``async with attempt`` block
    commits on success; a conflict on ``constraint`` rolls back and moves to the
    next iteration, any other error rolls back and propagates unchanged.
    The session must not carry other pending changes.

    Usage:
        async for attempt in UniqueNumberOnConflict(
            session=self.session,
            allocator=allocator,
            prefix="Q",
            scope_key=2025,
            constraint=QUOTATION_NUMBER_CONSTRAINT,
        ):
            async with attempt:
                quotation = Quotation(quotation_number=attempt.value, ...)
                session.add(quotation)
                await session.flush()
    """

    def __init__(
        self,
        session: AsyncSession,
        allocator: DocumentNumberAllocator,
        prefix: str,
        scope_key: int,
        constraint: UniqueConstraint,
        max_attempts: int = 3,
    ):
        self.session = session
        self.allocator = allocator
        self.prefix = prefix
        self.scope_key = scope_key
        self.constraint = constraint
        self.max_attempts = max_attempts
        self.current_attempt = 0
        self._value: str | None = None
        self._success = False

        if not self.constraint.name:
            raise ValueError("UniqueConstraint must have a name for conflict detection.")
        if session.new or session.dirty or session.deleted:
            # A conflict rolls back the whole session, taking these changes with it
            raise ValueError("Session has pending changes; commit them before allocating a document number.")

    async def __aiter__(self) -> AsyncIterator["UniqueNumberOnConflict"]:
        while self.current_attempt < self.max_attempts and not self._success:
            self.current_attempt += 1
            try:
                self._value = await self.allocator.allocate(self.prefix, self.scope_key)
            except OracleUnavailable:
                await self.session.rollback()
                raise
            yield self
        if not self._success:
            logger.error(
                "Document number allocation exhausted",
                prefix=self.prefix,
                scope_key=self.scope_key,
                attempts=self.current_attempt,
                constraint=self.constraint.name,
            )
            raise AllocationExhausted(self.prefix, self.scope_key, self.current_attempt)

    @property
    def value(self) -> str:
        if self._value is None:
            raise RuntimeError("Value not yet allocated for this attempt.")
        return self._value

    async def __aenter__(self) -> "UniqueNumberOnConflict":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> bool:
        if exc_type is None:
            await self.session.commit()
            self._success = True
            return False

        await self.session.rollback()
        if is_unique_violation(exc_val, self.constraint):
            logger.warning(
                "Document number conflict on insert, retrying",
                number=self._value,
                attempt=self.current_attempt,
                max_attempts=self.max_attempts,
                constraint=self.constraint.name,
            )
            return True  # Suppress, allocate again
        return False  # Re-raise everything else
