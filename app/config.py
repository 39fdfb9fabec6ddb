"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files

DEFAULT_DOCUMENT_SYNONYMS: tuple[str, ...] = ("cpf", "documento")
DEFAULT_POINTS_SYNONYMS: tuple[str, ...] = ("ponto", "credito", "valor")
DEFAULT_NAME_SYNONYMS: tuple[str, ...] = ("nome",)
DEFAULT_EMAIL_SYNONYMS: tuple[str, ...] = ("email", "e-mail")


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_list_env(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    """
    Read a comma-separated list, lower-cased, falling back when empty.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    items = tuple(item.strip().lower() for item in raw_value.split(",") if item.strip())
    return items or default


@dataclass(frozen=True)
class PointsImportSettings:
    """
    Runtime settings for spreadsheet points imports.

    batch_size, max_records and max_file_size_bytes bound the work done in a
    single request so it fits inside the hosting execution deadline.
    """

    batch_size: int = 10
    max_records: int = 1000
    max_file_size_bytes: int = 5 * 1024 * 1024
    document_synonyms: tuple[str, ...] = DEFAULT_DOCUMENT_SYNONYMS
    points_synonyms: tuple[str, ...] = DEFAULT_POINTS_SYNONYMS
    name_synonyms: tuple[str, ...] = DEFAULT_NAME_SYNONYMS
    email_synonyms: tuple[str, ...] = DEFAULT_EMAIL_SYNONYMS
    verify_check_digits: bool = False
    reject_duplicate_uploads: bool = False
    log_row_errors: bool = True


@lru_cache(maxsize=1)
def get_points_import_settings() -> PointsImportSettings:
    """
    Return cached points import settings from environment variables.
    """

    return PointsImportSettings(
        batch_size=max(1, _get_int_env("POINTS_IMPORT_BATCH_SIZE", 10)),
        max_records=max(1, _get_int_env("POINTS_IMPORT_MAX_RECORDS", 1000)),
        max_file_size_bytes=max(1, _get_int_env("POINTS_IMPORT_MAX_FILE_SIZE_BYTES", 5 * 1024 * 1024)),
        document_synonyms=_get_list_env("POINTS_IMPORT_DOCUMENT_SYNONYMS", DEFAULT_DOCUMENT_SYNONYMS),
        points_synonyms=_get_list_env("POINTS_IMPORT_POINTS_SYNONYMS", DEFAULT_POINTS_SYNONYMS),
        name_synonyms=_get_list_env("POINTS_IMPORT_NAME_SYNONYMS", DEFAULT_NAME_SYNONYMS),
        email_synonyms=_get_list_env("POINTS_IMPORT_EMAIL_SYNONYMS", DEFAULT_EMAIL_SYNONYMS),
        verify_check_digits=_get_bool_env("POINTS_IMPORT_VERIFY_CHECK_DIGITS", False),
        reject_duplicate_uploads=_get_bool_env("POINTS_IMPORT_REJECT_DUPLICATE_UPLOADS", False),
        log_row_errors=_get_bool_env("POINTS_IMPORT_LOG_ROW_ERRORS", True),
    )
