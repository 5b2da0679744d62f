"""Barcode normalization: raw scanner input to canonical item identifiers."""
from __future__ import annotations

import re

from .models import KIND_IGNORED, KIND_ISBN, KIND_NORMAL, NormalizedResult, Scope

IDENTIFIER_LENGTH = 12
ISBN_PREFIXES = ("978", "979")
PREFIX_OFFSET = 1000

_NON_DIGITS = re.compile(r"[^0-9]")


def strip_non_digits(value: str | None) -> str:
    if not value:
        return ""
    return _NON_DIGITS.sub("", str(value))


def library_prefix(library_code: str) -> str:
    """Barcode prefix for a library: its numeric code offset by 1000."""
    return str(int(str(library_code).strip()) + PREFIX_OFFSET)


def is_isbn13(digits: str) -> bool:
    """Validate an ISBN-13 (978/979 bookland prefix plus checksum)."""
    if len(digits) != 13 or not digits.isdigit():
        return False
    if not digits.startswith(ISBN_PREFIXES):
        return False
    total = 0
    for position, char in enumerate(digits[:12]):
        weight = 1 if position % 2 == 0 else 3
        total += int(char) * weight
    check = (10 - total % 10) % 10
    return check == int(digits[12])


def normalize(raw_input: str | None, scope: Scope) -> NormalizedResult:
    """Normalize a scanned or typed string against the session scope.

    Inputs of 13 or more digits are truncated to 12. Shorter inputs are
    auto-completed with the library prefix; the zero padding is applied to
    the original digits, so inputs longer than eight digits yield identifiers
    longer than 12 characters.
    """
    raw = "" if raw_input is None else str(raw_input)
    trimmed = raw.strip()
    if not trimmed or not scope.is_set:
        return NormalizedResult(kind=KIND_IGNORED, raw_input=raw)

    digits = strip_non_digits(trimmed)
    expected_prefix = library_prefix(scope.library_code)

    if is_isbn13(digits):
        return NormalizedResult(
            kind=KIND_ISBN,
            raw_input=raw,
            identifier=digits,
            original_digits=digits,
            expected_prefix=expected_prefix,
        )

    identifier = digits
    was_auto_completed = False
    if len(digits) >= IDENTIFIER_LENGTH + 1:
        identifier = digits[:IDENTIFIER_LENGTH]
    elif 0 < len(digits) < IDENTIFIER_LENGTH:
        was_auto_completed = True
        identifier = expected_prefix + digits.rjust(
            IDENTIFIER_LENGTH - len(expected_prefix), "0"
        )

    return NormalizedResult(
        kind=KIND_NORMAL,
        raw_input=raw,
        identifier=identifier,
        original_digits=digits,
        was_auto_completed=was_auto_completed,
        expected_prefix=expected_prefix,
    )
