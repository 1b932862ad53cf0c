"""HTTP tests for the API routers."""

from datetime import date
from decimal import Decimal

import httpx
import pytest
import pytest_asyncio
from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from components.core import init_db
from components.core.database import DatabaseManager
from components.core.init_db import get_db
from restapi.router import create_app


@pytest_asyncio.fixture
async def client(session_factory):
    """Client against the app with the test database plugged in."""
    app = create_app()

    async def override_get_db():
        async with session_factory() as db:
            yield db

    app.dependency_overrides[get_db] = override_get_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


async def test_lifespan_creates_tables(monkeypatch):
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    monkeypatch.setattr(init_db, "db_manager", DatabaseManager(engine))
    app = create_app()

    async with app.router.lifespan_context(app):
        async with engine.connect() as conn:
            tables = await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())

    assert {"credits", "payments", "outgoing_letters", "letter_sequences"} <= set(tables)


async def test_health_check(client):
    response = await client.get("/health_check/")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


class TestCreditEndpoints:
    """Tests for /credits."""

    async def test_read_credit(self, client, make_credit):
        credit = await make_credit()

        response = await client.get(f"/credits/{credit.id}")

        assert response.status_code == 200
        assert response.json()["contract_number"] == "PK-001"

    async def test_read_missing_credit(self, client):
        response = await client.get("/credits/999")
        assert response.status_code == 404

    async def test_bulk_status(self, client, make_credit):
        first = await make_credit("PK-001")
        second = await make_credit("PK-002")

        response = await client.patch(
            "/credits/bulk-status", json={"ids": [first.id, second.id], "status": "Lunas"}
        )

        assert response.status_code == 200
        assert response.json() == {"updated": 2, "requested": 2}
        listed = (await client.get("/credits/", params={"status": "Lunas"})).json()
        assert {Decimal(item["outstanding"]) for item in listed} == {Decimal("0")}

    async def test_bulk_status_rejects_unknown_status(self, client, make_credit):
        credit = await make_credit()

        response = await client.patch("/credits/bulk-status", json={"ids": [credit.id], "status": "Sehat"})

        assert response.status_code == 400
        assert response.json()["error"]["field"] == "status"

    async def test_delete_requires_paid_off(self, client, make_credit):
        credit = await make_credit()

        response = await client.delete(f"/credits/{credit.id}")

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "validation_error"

    async def test_bulk_delete(self, client, make_credit):
        paid = await make_credit("PK-001", outstanding="0", status="Lunas")
        other = await make_credit("PK-002")

        response = await client.post("/credits/bulk-delete", json={"ids": [paid.id, other.id]})

        assert response.json() == {"requested": 2, "deleted": 1, "skipped": 1}

    async def test_import_bank_export(self, client):
        content = (
            "REKENING,CIF,NAMA,JENIS PINJAMAN,PLAFOND,BUNGA,JANGKA WAKTU,TGLMULAI,TGL_JT,SALDO AKHIR\n"
            "001,CIF9,Dewi,KUR,5000000,6,12,01/01/2024,01/01/2025,4000000\n"
            "002,CIF9,Dewi Lestari,KUR,5000000,6,12,01/01/2024,01/01/2025,4000000\n"
        ).encode()

        response = await client.post(
            "/credits/import", files={"file": ("credits.csv", content, "text/csv")}
        )

        body = response.json()
        assert response.status_code == 200
        assert body["message"] == "Import completed: 1 succeeded, 1 failed"
        assert body["data"]["errors"][0]["row"] == 3

    async def test_import_rejects_pdf(self, client):
        response = await client.post(
            "/credits/import", files={"file": ("credits.pdf", b"%PDF", "application/pdf")}
        )
        assert response.status_code == 400
        assert response.json()["error"]["field"] == "file"


class TestPaymentEndpoints:
    """Tests for /payments."""

    async def test_create_and_delete_payment(self, client, make_credit):
        credit = await make_credit(outstanding="1000000")

        response = await client.post("/payments/", json={
            "credit_id": credit.id,
            "amount": "400000",
            "payment_date": "2024-06-01",
        })

        assert response.status_code == 201
        body = response.json()
        assert Decimal(body["credit"]["outstanding"]) == Decimal("600000")
        assert body["credit"]["status"] == "Lancar"

        listed = (await client.get("/payments/", params={"credit_id": credit.id})).json()
        assert [item["id"] for item in listed] == [body["payment"]["id"]]

        response = await client.delete(f"/payments/{body['payment']['id']}")
        assert response.status_code == 200
        assert Decimal(response.json()["credit"]["outstanding"]) == Decimal("1000000")
        assert (await client.get("/payments/")).json() == []
        assert (await client.get(f"/payments/{body['payment']['id']}")).status_code == 404

    @pytest.mark.parametrize("payload,code,field", [
        ({"amount": "0"}, "invalid_amount", "amount"),
        ({"amount": "100", "penalty_amount": "-1"}, "negative_component", "penalty_amount"),
        ({"amount": "2000000"}, "principal_exceeds_outstanding", "principal_amount"),
        ({"amount": "100", "principal_amount": "90", "interest_amount": "20"}, "breakdown_exceeds_amount", "amount"),
    ])
    async def test_rejected_payments(self, client, make_credit, payload, code, field):
        credit = await make_credit(outstanding="1000000")

        response = await client.post(
            "/payments/", json=dict(payload, credit_id=credit.id, payment_date="2024-06-01")
        )

        assert response.status_code == 400
        error = response.json()["error"]
        assert (error["code"], error["field"]) == (code, field)

    async def test_payment_for_unknown_credit(self, client):
        response = await client.post(
            "/payments/", json={"credit_id": 42, "amount": "1", "payment_date": "2024-06-01"}
        )
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "not_found"

    async def test_import_for_credit(self, client, make_credit):
        credit = await make_credit(outstanding="500")
        content = b"Tanggal,Nominal\n2024-06-01,200\n2024-07-01,300\n"

        response = await client.post(
            f"/payments/import/{credit.id}", files={"file": ("p.csv", content, "text/csv")}
        )

        assert response.json()["data"]["success"] == 2
        credit_json = (await client.get(f"/credits/{credit.id}")).json()
        assert credit_json["status"] == "Lunas"


class TestLetterEndpoints:
    """Tests for /outgoing-letters."""

    async def test_numbering_flow(self, client):
        year = date.today().year
        letter = {
            "letter_type": "eksternal",
            "subject": "Surat Peringatan 1",
            "recipient": "Budi Santoso",
            "letter_date": "2026-03-02",
        }

        preview = (await client.get("/outgoing-letters/next-number/eksternal")).json()
        assert preview["letter_number"] == f"001/S.Eks/AOPK/C.2/{year}"

        created = await client.post("/outgoing-letters/", json=letter)
        assert created.status_code == 201
        assert created.json()["letter_number"] == preview["letter_number"]

        second = (await client.post("/outgoing-letters/", json=letter)).json()
        assert second["sequence_number"] == 2

        response = await client.delete(f"/outgoing-letters/{created.json()['id']}")
        assert response.status_code == 200
        listed = (await client.get("/outgoing-letters/", params={"year": year})).json()
        assert [item["sequence_number"] for item in listed] == [2]

    async def test_preview_with_unit_code(self, client):
        response = await client.get("/outgoing-letters/next-number/internal", params={"unit_code": "KC/01"})
        assert response.json()["letter_number"] == f"001/S.Int/KC/01/{date.today().year}"

    async def test_unknown_letter_type(self, client):
        response = await client.get("/outgoing-letters/next-number/memo")
        assert response.status_code == 400
        assert response.json()["error"]["field"] == "letter_type"
