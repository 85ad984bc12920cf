"""Tests for unique constraint conflict detection and the insert retry wrapper."""

from decimal import Decimal
from random import Random

import pytest
from sqlalchemy import UniqueConstraint
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.models.documents import (
    PURCHASE_ORDER_NUMBER_CONSTRAINT,
    QUOTATION_NUMBER_CONSTRAINT,
    Quotation,
)
from backoffice.services.numbering.allocator import DocumentNumberAllocator
from backoffice.services.numbering.on_conflict import UniqueNumberOnConflict, is_unique_violation
from tests.fakes import FakeOracle


def _integrity_error(message: str) -> IntegrityError:
    return IntegrityError("INSERT INTO quotations (quotation_number) VALUES (?)", {}, Exception(message))


class TestIsUniqueViolation:
    def test_postgres_constraint_name(self) -> None:
        error = _integrity_error(
            'duplicate key value violates unique constraint "uq_quotations_quotation_number"\n'
            "DETAIL:  Key (quotation_number)=(Q-2025-0042) already exists."
        )
        assert is_unique_violation(error, QUOTATION_NUMBER_CONSTRAINT)

    def test_sqlite_table_and_column(self) -> None:
        error = _integrity_error("UNIQUE constraint failed: quotations.quotation_number")
        assert is_unique_violation(error, QUOTATION_NUMBER_CONSTRAINT)

    def test_other_unique_constraint(self) -> None:
        error = _integrity_error('duplicate key value violates unique constraint "uq_quotations_quotation_number"')
        assert not is_unique_violation(error, PURCHASE_ORDER_NUMBER_CONSTRAINT)

    @pytest.mark.parametrize(
        "message",
        [
            "CHECK constraint failed: ck_quotations_total_non_negative",
            "FOREIGN KEY constraint failed",
            'insert or update on table "sales" violates foreign key constraint "sales_quotation_id_fkey"',
            "NOT NULL constraint failed: quotations.customer_name",
        ],
    )
    def test_other_integrity_errors(self, message: str) -> None:
        assert not is_unique_violation(_integrity_error(message), QUOTATION_NUMBER_CONSTRAINT)

    def test_non_integrity_errors(self) -> None:
        error = OperationalError("INSERT", {}, Exception('unique constraint "uq_quotations_quotation_number"'))
        assert not is_unique_violation(error, QUOTATION_NUMBER_CONSTRAINT)
        assert not is_unique_violation(None, QUOTATION_NUMBER_CONSTRAINT)


async def test_requires_named_constraint(session: AsyncSession) -> None:
    allocator = DocumentNumberAllocator(FakeOracle(), rng=Random(1))

    with pytest.raises(ValueError):
        UniqueNumberOnConflict(
            session=session,
            allocator=allocator,
            prefix="Q",
            scope_key=2025,
            constraint=UniqueConstraint("quotation_number"),
        )


async def test_value_requires_allocation(session: AsyncSession) -> None:
    wrapper = UniqueNumberOnConflict(
        session=session,
        allocator=DocumentNumberAllocator(FakeOracle(), rng=Random(1)),
        prefix="Q",
        scope_key=2025,
        constraint=QUOTATION_NUMBER_CONSTRAINT,
    )

    with pytest.raises(RuntimeError):
        _ = wrapper.value


async def test_rejects_session_with_pending_changes(session: AsyncSession) -> None:
    pending = Quotation(customer_name="Acme", total=Decimal("1.00"), quotation_number="Q-2025-0001")
    session.add(pending)

    with pytest.raises(ValueError, match="pending changes"):
        UniqueNumberOnConflict(
            session=session,
            allocator=DocumentNumberAllocator(FakeOracle(), rng=Random(1)),
            prefix="Q",
            scope_key=2025,
            constraint=QUOTATION_NUMBER_CONSTRAINT,
        )

    assert pending in session.new
