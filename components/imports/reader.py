"""Reading uploaded spreadsheets into row dictionaries."""

import csv
import io
from pathlib import Path
from typing import BinaryIO, Dict, List

import pandas as pd
from fastapi import UploadFile

from components.core.exceptions import ValidationError

SUPPORTED_EXTENSIONS = (".xlsx", ".xls", ".csv")


def check_extension(filename: str) -> str:
    suffix = Path(filename or "").suffix.lower()
    if suffix not in SUPPORTED_EXTENSIONS:
        raise ValidationError(
            "Invalid file format. Only Excel (.xlsx, .xls) or CSV files are supported.",
            field="file",
        )
    return suffix


def read_rows(file_content: BinaryIO, filename: str) -> List[Dict[str, str]]:
    """
    Read the first sheet of an upload as a list of rows.

    Every cell is read as text so the import parsers decide how numbers
    and dates are interpreted. Fully empty rows are dropped.
    """
    suffix = check_extension(filename)
    try:
        if suffix == ".csv":
            # sep=None sniffs comma, semicolon or tab separated files
            frame = pd.read_csv(file_content, dtype=str, keep_default_na=False, sep=None, engine="python")
        else:
            frame = pd.read_excel(file_content, sheet_name=0, dtype=str, keep_default_na=False)
    except (ValueError, csv.Error, pd.errors.ParserError) as e:
        raise ValidationError(f"Error reading file: {e}", field="file") from e

    frame.columns = [str(column).strip() for column in frame.columns]
    rows = [
        row for row in frame.to_dict(orient="records")
        if any(str(value).strip() for value in row.values())
    ]
    if not rows:
        raise ValidationError("File is empty or invalid format", field="file")
    return rows


async def read_upload(file: UploadFile, max_size: int) -> List[Dict[str, str]]:
    """Validate an uploaded file and read its rows."""
    check_extension(file.filename)
    content = await file.read()
    if len(content) > max_size:
        raise ValidationError(f"File is larger than {max_size} bytes", field="file")
    return read_rows(io.BytesIO(content), file.filename)
