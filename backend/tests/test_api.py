"""Tests for the document API endpoints."""

from collections.abc import AsyncGenerator
from decimal import Decimal
from pathlib import Path

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from ulid import ULID

from backoffice.api.v1.documents.dependencies import get_document_service
from backoffice.db import get_session
from backoffice.main import app
from backoffice.models.documents import QuotationCreate
from backoffice.services.documents.document_service import DocumentService
from backoffice.services.numbering.config import NumberingConfig
from backoffice.services.numbering.exceptions import OracleUnavailable
from backoffice.services.numbering.formatting import number_pattern
from backoffice.utils.datetime_utils import current_year
from tests.fakes import FakeOracle, ScriptedRandom


@pytest_asyncio.fixture
async def client(session_maker: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncClient]:
    async def override_get_session() -> AsyncGenerator[AsyncSession]:
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


async def test_health(client: AsyncClient) -> None:
    response = await client.get("/api/v1/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "database": "ok"}


async def test_health_reports_unreachable_database(client: AsyncClient, tmp_path: Path) -> None:
    broken = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'backoffice.db'}")

    async def override_get_session() -> AsyncGenerator[AsyncSession]:
        async with async_sessionmaker(broken)() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session

    response = await client.get("/api/v1/health")

    assert response.status_code == 503
    await broken.dispose()


async def test_create_quotation(client: AsyncClient) -> None:
    response = await client.post("/api/v1/quotations", json={"customer_name": "Acme s.r.o.", "total": "120.50"})

    assert response.status_code == 201
    body = response.json()
    assert body["document_type"] == "quotation"
    assert body["status"] == "pending"
    assert body["number"].startswith(f"Q-{current_year()}-")
    assert number_pattern("Q", 4).match(body["number"])


async def test_create_each_document_type(client: AsyncClient) -> None:
    requests = [
        ("/api/v1/sales", {"total": "10.00", "payment_method": "cash"}, "S", "pending"),
        ("/api/v1/purchase-orders", {"supplier_name": "Wholesale Ltd", "total": "99.90"}, "PO", "pending"),
        ("/api/v1/stock-transfers", {"from_location": "Main store", "to_location": "Branch 2"}, "TR", "pending"),
    ]

    for path, payload, prefix, status in requests:
        response = await client.post(path, json=payload)

        assert response.status_code == 201, response.text
        assert number_pattern(prefix, 4).match(response.json()["number"])
        assert response.json()["status"] == status


async def test_create_rejects_invalid_payload(client: AsyncClient) -> None:
    response = await client.post("/api/v1/quotations", json={"customer_name": "Acme s.r.o.", "total": "-1"})

    assert response.status_code == 422


async def test_create_sale_rejects_malformed_quotation_id(client: AsyncClient) -> None:
    response = await client.post("/api/v1/sales", json={"total": "10.00", "quotation_id": "abc"})

    assert response.status_code == 422


async def test_create_sale_for_unknown_quotation_conflicts(client: AsyncClient) -> None:
    response = await client.post("/api/v1/sales", json={"total": "10.00", "quotation_id": str(ULID())})

    assert response.status_code == 409


async def test_create_sale_from_quotation(client: AsyncClient) -> None:
    quotation = (await client.post("/api/v1/quotations", json={"customer_name": "Acme", "total": "5"})).json()

    response = await client.post("/api/v1/sales", json={"total": "5.00", "quotation_id": quotation["id"]})

    assert response.status_code == 201


async def test_get_document_by_number(client: AsyncClient) -> None:
    created = (await client.post("/api/v1/quotations", json={"customer_name": "Acme", "total": "5"})).json()

    response = await client.get(f"/api/v1/documents/{created['number']}")

    assert response.status_code == 200
    assert response.json()["id"] == created["id"]


async def test_get_document_errors(client: AsyncClient) -> None:
    assert (await client.get("/api/v1/documents/Q-2025-9999")).status_code == 404
    assert (await client.get("/api/v1/documents/nonsense")).status_code == 422


async def test_list_documents(client: AsyncClient) -> None:
    for _ in range(2):
        await client.post("/api/v1/quotations", json={"customer_name": "Acme", "total": "5"})
    await client.post("/api/v1/purchase-orders", json={"supplier_name": "Wholesale Ltd", "total": "1"})

    response = await client.get("/api/v1/documents", params={"type": "quotation"})

    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 2
    assert {d["document_type"] for d in body["documents"]} == {"quotation"}


async def test_exhausted_allocation_returns_retry_message(
    client: AsyncClient, session_maker: async_sessionmaker[AsyncSession]
) -> None:
    async with session_maker() as session:
        service = DocumentService(session, NumberingConfig(), rng=ScriptedRandom(42))
        await service.create_quotation(QuotationCreate(customer_name="Acme", total=Decimal("5")))

    # Existence check keeps missing the competing insert of the same number
    async def racing_service() -> AsyncGenerator[DocumentService]:
        async with session_maker() as session:
            yield DocumentService(
                session,
                NumberingConfig(insert_max_attempts=2),
                rng=ScriptedRandom(42, 42),
                oracle_factory=lambda document: FakeOracle(),
            )

    app.dependency_overrides[get_document_service] = racing_service

    response = await client.post("/api/v1/quotations", json={"customer_name": "Acme", "total": "5"})

    assert response.status_code == 503
    assert response.json() == {"detail": "Could not complete, please retry"}


async def test_unavailable_oracle_returns_503(
    client: AsyncClient, session_maker: async_sessionmaker[AsyncSession]
) -> None:
    async def unavailable_service() -> AsyncGenerator[DocumentService]:
        async with session_maker() as session:
            yield DocumentService(
                session,
                oracle_factory=lambda document: FakeOracle(error=OracleUnavailable("database unreachable")),
            )

    app.dependency_overrides[get_document_service] = unavailable_service

    response = await client.post("/api/v1/purchase-orders", json={"supplier_name": "Wholesale Ltd", "total": "1"})

    assert response.status_code == 503
