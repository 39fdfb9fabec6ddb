"""
app/parsers package marker.
"""

from app.parsers.spreadsheet_parser import ParsedSheet, SpreadsheetParser

__all__ = ["ParsedSheet", "SpreadsheetParser"]
