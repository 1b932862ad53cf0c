"""Tests for the command line import script."""

from sqlalchemy import select

from components.core.database import DatabaseManager
from components.credit.models import Credit
from scripts import import_file


def test_parse_args():
    args = import_file.parse_args(["payments", "p.csv", "--credit-id", "7"])
    assert (args.kind, args.path.name, args.credit_id) == ("payments", "p.csv", 7)


async def test_import_credit_file(engine, session, debtor, tmp_path, monkeypatch, capsys):
    path = tmp_path / "credits.csv"
    path.write_text(
        "No. Kontrak,Kode Debitur,Jenis Kredit,Plafond,Suku Bunga (%),Tenor (Bulan),"
        "Tanggal Mulai,Tanggal Jatuh Tempo,Outstanding\n"
        "PK-77,CIF001,KUR Mikro,3000000,6,12,2024-01-01,2025-01-01,2500000\n"
        "PK-78,CIF404,KUR Mikro,3000000,6,12,2024-01-01,2025-01-01,2500000\n"
    )
    monkeypatch.setattr(import_file, "db_manager", DatabaseManager(engine))

    result = await import_file.import_file("credits", path)

    assert (result.success, result.failed) == (1, 1)
    assert "row 3: Debtor with code CIF404 not found" in capsys.readouterr().out
    contracts = (await session.execute(select(Credit.contract_number))).scalars().all()
    assert contracts == ["PK-77"]
