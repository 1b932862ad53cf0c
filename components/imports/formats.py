"""
Row layouts accepted by the spreadsheet imports.

Credit files come in two layouts. The legacy template of this application
uses descriptive headers ("No. Kontrak", "Kode Debitur", ...), the core
banking export uses upper-case column codes ("REKENING", "CIF", ...). The
layout is decided once per file from its header and every row of the file is
read with the same mapper.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Dict, Iterable, Mapping, Optional

from components.core.exceptions import ValidationError
from components.credit.models import BEST_COLLECTIBILITY, STATUS_CURRENT
from components.imports.parsers import (
    is_blank,
    parse_collectibility,
    parse_date,
    parse_int,
    parse_number,
    parse_status,
)

Row = Mapping[str, Any]


class ImportFormat(str, Enum):
    LEGACY = "legacy"
    BANK_EXPORT = "bank_export"


BANK_EXPORT_MARKERS = ("REKENING", "CIF", "NO PERJANJIAN")


def detect_format(columns: Iterable[str]) -> ImportFormat:
    """Pick the credit layout from a file's header."""
    names = {str(column).strip() for column in columns}
    if names.intersection(BANK_EXPORT_MARKERS):
        return ImportFormat.BANK_EXPORT
    return ImportFormat.LEGACY


@dataclass
class CreditRecord:
    """Credit row normalized from either layout."""
    contract_number: str
    debtor_code: str
    debtor_name: Optional[str]
    credit_type: str
    plafond: Decimal
    outstanding: Decimal
    interest_rate: Decimal
    tenor_months: int
    start_date: date
    maturity_date: date
    status: str
    collectibility: str
    account_number: Optional[str] = None
    purpose: Optional[str] = None

    def credit_fields(self) -> Dict[str, Any]:
        """Column values for the Credit model."""
        return {
            "contract_number": self.contract_number,
            "account_number": self.account_number,
            "credit_type": self.credit_type,
            "plafond": self.plafond,
            "outstanding": self.outstanding,
            "interest_rate": self.interest_rate,
            "tenor_months": self.tenor_months,
            "start_date": self.start_date,
            "maturity_date": self.maturity_date,
            "purpose": self.purpose,
            "status": self.status,
            "collectibility": self.collectibility,
        }


@dataclass
class PaymentRecord:
    """Payment row of a payment import file."""
    payment_date: date
    amount: Decimal
    principal: Optional[Decimal]
    interest: Optional[Decimal]
    penalty: Optional[Decimal]
    notes: Optional[str]
    contract_number: Optional[str] = None


def text(row: Row, column: str) -> str:
    value = row.get(column)
    if is_blank(value):
        return ""
    return str(value).strip()


def _number(row: Row, column: str) -> Optional[Decimal]:
    try:
        return parse_number(row.get(column))
    except ValueError as e:
        raise ValidationError(f"{column} is not a number: {row.get(column)!r}", field=column) from e


def _required(row: Row, column: str) -> str:
    value = text(row, column)
    if not value:
        raise ValidationError(f"{column} is required", field=column)
    return value


def _plafond(row: Row, column: str) -> Decimal:
    plafond = _number(row, column)
    if plafond is None:
        plafond = Decimal("0")
    if plafond < 0:
        raise ValidationError(f"{column} is invalid", field=column)
    return plafond


def _outstanding(row: Row, column: str, plafond: Decimal) -> Decimal:
    # Empty cell: nothing repaid yet
    outstanding = _number(row, column)
    if outstanding is None:
        return plafond
    if outstanding < 0:
        raise ValidationError(f"{column} must not be negative", field=column)
    return outstanding


def _interest_rate(row: Row, column: str) -> Decimal:
    rate = _number(row, column)
    if rate is None or rate < 0 or rate > 100:
        raise ValidationError(f"{column} must be between 0 and 100", field=column)
    return rate


def _tenor(row: Row, column: str) -> int:
    try:
        tenor = parse_int(row.get(column))
    except ValueError:
        tenor = None
    if not tenor or tenor < 1:
        raise ValidationError(f"{column} is invalid", field=column)
    return tenor


def _period(row: Row, start_column: str, maturity_column: str):
    start_date = parse_date(row.get(start_column))
    maturity_date = parse_date(row.get(maturity_column))
    if not start_date or not maturity_date:
        raise ValidationError(
            f"{start_column}/{maturity_column} is not a valid date", field=start_column
        )
    return start_date, maturity_date


def parse_legacy_row(row: Row) -> CreditRecord:
    """Read a row of the application's own credit template."""
    contract_number = _required(row, "No. Kontrak")
    debtor_code = _required(row, "Kode Debitur")
    credit_type = _required(row, "Jenis Kredit")
    plafond = _plafond(row, "Plafond")
    interest_rate = _interest_rate(row, "Suku Bunga (%)")
    tenor_months = _tenor(row, "Tenor (Bulan)")
    start_date, maturity_date = _period(row, "Tanggal Mulai", "Tanggal Jatuh Tempo")
    outstanding = _outstanding(row, "Outstanding", plafond)

    return CreditRecord(
        contract_number=contract_number,
        debtor_code=debtor_code,
        debtor_name=text(row, "Nama Debitur") or None,
        credit_type=credit_type,
        plafond=plafond,
        outstanding=outstanding,
        interest_rate=interest_rate,
        tenor_months=tenor_months,
        start_date=start_date,
        maturity_date=maturity_date,
        status=parse_status(row.get("Status")) or STATUS_CURRENT,
        collectibility=parse_collectibility(row.get("Kolektibilitas")) or BEST_COLLECTIBILITY,
        purpose=text(row, "Tujuan") or None,
    )


def parse_bank_row(row: Row) -> CreditRecord:
    """Read a row of the core banking export."""
    contract_number = text(row, "NO PERJANJIAN") or text(row, "REKENING")
    if not contract_number:
        raise ValidationError("NO PERJANJIAN/REKENING is required", field="NO PERJANJIAN")
    debtor_code = _required(row, "CIF")
    credit_type = _required(row, "JENIS PINJAMAN")
    plafond = _plafond(row, "PLAFOND")
    interest_rate = _interest_rate(row, "BUNGA")
    tenor_months = _tenor(row, "JANGKA WAKTU")
    start_date, maturity_date = _period(row, "TGLMULAI", "TGL_JT")
    outstanding = _outstanding(row, "SALDO AKHIR", plafond)

    return CreditRecord(
        contract_number=contract_number,
        account_number=text(row, "REKENING") or None,
        debtor_code=debtor_code,
        debtor_name=text(row, "NAMA") or None,
        credit_type=credit_type,
        plafond=plafond,
        outstanding=outstanding,
        interest_rate=interest_rate,
        tenor_months=tenor_months,
        start_date=start_date,
        maturity_date=maturity_date,
        status=STATUS_CURRENT,
        collectibility=parse_collectibility(row.get("KOLEKTIBILITAS")) or BEST_COLLECTIBILITY,
    )


CREDIT_ROW_PARSERS: Dict[ImportFormat, Callable[[Row], CreditRecord]] = {
    ImportFormat.LEGACY: parse_legacy_row,
    ImportFormat.BANK_EXPORT: parse_bank_row,
}


def parse_payment_row(row: Row, with_contract: bool = True) -> PaymentRecord:
    """
    Read a row of the payment template.

    Pokok, Bunga and Denda are optional; an empty Pokok means the whole
    Nominal goes to principal.
    """
    contract_number = _required(row, "No. Kontrak") if with_contract else None

    payment_date = parse_date(row.get("Tanggal"))
    if not payment_date:
        raise ValidationError("Tanggal is not a valid date", field="Tanggal")

    amount = _number(row, "Nominal")
    if amount is None or amount <= 0:
        raise ValidationError("Nominal is invalid", field="Nominal")

    return PaymentRecord(
        contract_number=contract_number,
        payment_date=payment_date,
        amount=amount,
        principal=_number(row, "Pokok"),
        interest=_number(row, "Bunga"),
        penalty=_number(row, "Denda"),
        notes=text(row, "Catatan") or None,
    )
