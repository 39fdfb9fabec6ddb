"""
app/parsers/spreadsheet_parser.py

Turns an uploaded CSV or XLSX payload into a grid of rows.

Row 0 of the grid is always the header row. Blank CSV lines are dropped, but
every kept row remembers the 1-based line it came from so reported row
numbers match the file. CSV handling is intentionally simple: lines are split
on every comma, so quoted fields containing commas are not supported.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from typing import Any
from zipfile import BadZipFile

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from app.domain.errors import EmptyInputError, FileTooLargeError, UnsupportedFormatError

logger = logging.getLogger(__name__)

CSV_CONTENT_TYPES = {
    "text/csv",
    "application/csv",
}

Grid = list[list[Any]]


@dataclass(frozen=True)
class ParsedSheet:
    """
    Parsed rows plus the source line (1-based) of each row.
    """

    rows: Grid
    line_numbers: list[int]


class SpreadsheetParser:
    """
    Parses CSV text or the first worksheet of an XLSX workbook.
    """

    def __init__(self, *, max_file_size_bytes: int = 5 * 1024 * 1024) -> None:
        self._max_file_size_bytes = max(1, max_file_size_bytes)

    def parse(
        self,
        content: bytes,
        *,
        file_name: str,
        content_type: str | None = None,
    ) -> Grid:
        """Parse one uploaded file into rows of cell values."""

        return self.parse_sheet(content, file_name=file_name, content_type=content_type).rows

    def parse_sheet(
        self,
        content: bytes,
        *,
        file_name: str,
        content_type: str | None = None,
    ) -> ParsedSheet:
        """
        Parse one uploaded file, keeping the source line of each row.

        Raises:
            FileTooLargeError:      payload exceeds the configured ceiling.
            UnsupportedFormatError: payload is not CSV and not a readable workbook.
            EmptyInputError:        parsing produced zero rows.
        """

        if len(content) > self._max_file_size_bytes:
            raise FileTooLargeError(
                size_bytes=len(content),
                max_bytes=self._max_file_size_bytes,
            )

        if self.is_csv(file_name=file_name, content_type=content_type):
            logger.info("Parsing %r as CSV (%d bytes)", file_name, len(content))
            sheet = self._parse_csv(content)
        else:
            logger.info("Parsing %r as workbook (%d bytes)", file_name, len(content))
            sheet = self._parse_workbook(content)

        if not sheet.rows:
            raise EmptyInputError("Planilha está vazia ou não foi possível ler os dados")

        logger.info("Parsed %d row(s) from %r", len(sheet.rows), file_name)
        return sheet

    @staticmethod
    def is_csv(*, file_name: str, content_type: str | None) -> bool:
        normalized_type = (content_type or "").split(";", 1)[0].strip().lower()
        return normalized_type in CSV_CONTENT_TYPES or file_name.strip().lower().endswith(".csv")

    def _parse_csv(self, content: bytes) -> ParsedSheet:
        text = self._decode(content)
        normalized = text.replace("\r\n", "\n").replace("\r", "\n")
        rows: Grid = []
        line_numbers: list[int] = []
        for line_number, line in enumerate(normalized.split("\n"), start=1):
            if line.strip() == "":
                continue
            rows.append([self._clean_csv_cell(value) for value in line.split(",")])
            line_numbers.append(line_number)
        return ParsedSheet(rows=rows, line_numbers=line_numbers)

    def _parse_workbook(self, content: bytes) -> ParsedSheet:
        try:
            workbook = load_workbook(io.BytesIO(content), read_only=True, data_only=True)
        except (BadZipFile, InvalidFileException, KeyError, OSError, ValueError) as exc:
            raise UnsupportedFormatError(
                "Tipo de arquivo não suportado. Use CSV ou Excel."
            ) from exc

        try:
            if not workbook.worksheets:
                return ParsedSheet(rows=[], line_numbers=[])
            sheet = workbook.worksheets[0]
            grid = [
                [self._clean_workbook_cell(value) for value in row]
                for row in sheet.iter_rows(values_only=True)
            ]
        finally:
            workbook.close()

        while grid and all(self._is_blank(value) for value in grid[-1]):
            grid.pop()
        return ParsedSheet(rows=grid, line_numbers=list(range(1, len(grid) + 1)))

    @staticmethod
    def _decode(content: bytes) -> str:
        try:
            return content.decode("utf-8-sig")
        except UnicodeDecodeError:
            # Spreadsheets exported by Excel on Windows are commonly Latin-1.
            return content.decode("latin-1")

    @staticmethod
    def _clean_csv_cell(value: str) -> str:
        cell = value.strip()
        if cell[:1] in {'"', "'"}:
            cell = cell[1:]
        if cell[-1:] in {'"', "'"}:
            cell = cell[:-1]
        return cell

    @staticmethod
    def _clean_workbook_cell(value: Any) -> Any:
        # Numeric CPF cells come back as floats; 12345678901.0 must stay 11 digits.
        if isinstance(value, float) and value.is_integer():
            return int(value)
        return value

    @staticmethod
    def _is_blank(value: Any) -> bool:
        return value is None or str(value).strip() == ""
