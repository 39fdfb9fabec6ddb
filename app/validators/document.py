"""
app/validators/document.py

CPF (Brazilian individual taxpayer id) helpers.
"""

from __future__ import annotations

import re

CPF_LENGTH = 11

_NON_DIGITS = re.compile(r"\D")
_REPEATED_DIGITS = re.compile(r"^(\d)\1{10}$")


def digits_only(value: object) -> str:
    """
    Strip every non-digit character: ``"123.456.789-00"`` -> ``"12345678900"``.
    """

    if value is None:
        return ""
    return _NON_DIGITS.sub("", str(value))


def format_cpf(value: str) -> str:
    """
    Render 11 digits in the stored ``000.000.000-00`` form.
    """

    digits = digits_only(value)
    if len(digits) != CPF_LENGTH:
        raise ValueError(f"CPF must have {CPF_LENGTH} digits, got {len(digits)}.")
    return f"{digits[:3]}.{digits[3:6]}.{digits[6:9]}-{digits[9:]}"


def is_valid_cpf(value: str, *, verify_check_digits: bool = False) -> bool:
    """
    Return True when the value looks like a usable CPF.

    The base rule only rejects wrong lengths and runs of one repeated digit.
    With verify_check_digits the two trailing verification digits are
    recomputed as well.
    """

    digits = digits_only(value)
    if len(digits) != CPF_LENGTH:
        return False
    if _REPEATED_DIGITS.match(digits):
        return False
    if not verify_check_digits:
        return True
    return digits[9] == _check_digit(digits[:9]) and digits[10] == _check_digit(digits[:10])


def _check_digit(prefix: str) -> str:
    weight = len(prefix) + 1
    total = sum(int(digit) * (weight - index) for index, digit in enumerate(prefix))
    remainder = total % 11
    return "0" if remainder < 2 else str(11 - remainder)
