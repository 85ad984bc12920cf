"""Tests for the SQL uniqueness oracle."""

from decimal import Decimal
from typing import Any

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.models.documents import PurchaseOrder, Quotation
from backoffice.services.numbering.exceptions import OracleUnavailable
from backoffice.services.numbering.oracle import SqlUniquenessOracle


async def test_reports_existing_numbers(session: AsyncSession) -> None:
    session.add(Quotation(quotation_number="Q-2025-0042", customer_name="Acme", total=Decimal("10.00")))
    await session.commit()

    oracle = SqlUniquenessOracle(session, Quotation.quotation_number)

    assert await oracle("Q-2025-0042") is True
    assert await oracle("Q-2025-0043") is False


async def test_only_checks_its_own_table(session: AsyncSession) -> None:
    session.add(Quotation(quotation_number="Q-2025-0042", customer_name="Acme", total=Decimal("10.00")))
    await session.commit()

    oracle = SqlUniquenessOracle(session, PurchaseOrder.po_number)

    assert await oracle("Q-2025-0042") is False


async def test_storage_error_becomes_oracle_unavailable() -> None:
    error = OperationalError("SELECT quotations.quotation_number", {}, ConnectionRefusedError("refused"))

    class UnreachableSession:
        async def execute(self, statement: Any) -> Any:
            raise error

    oracle = SqlUniquenessOracle(UnreachableSession(), Quotation.quotation_number)  # type: ignore[arg-type]

    with pytest.raises(OracleUnavailable) as exc_info:
        await oracle("Q-2025-0001")

    assert exc_info.value.__cause__ is error
