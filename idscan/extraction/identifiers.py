"""Identifier cleanup and validation.

Recognition engines routinely confuse letters and digits that look alike
and leave stray symbols around numbers. Each document number format is
described by a template of ``A`` (letter) and ``9`` (digit) positions so
that confusions can be repaired position by position before validation.
"""

import re

from .rules import TextViews

_TO_DIGIT = str.maketrans(
    {"O": "0", "I": "1", "L": "1", "S": "5", "B": "8", "Z": "2"}
)
_TO_LETTER = str.maketrans({"0": "O", "1": "I", "5": "S", "8": "B", "2": "Z"})

_ARTIFACTS = re.compile(r"[$=:#|]")
_STRAY_LEADING_LETTER = re.compile(r"^[A-Za-z]\s+(?=\d)")
_SEPARATORS = re.compile(r"[\s\-./]")

PAN_TEMPLATE = "AAAAA9999A"
EPIC_TEMPLATE = "AAA9999999"
DL_TEMPLATE = "AA99" + "9" * 11

PAN_PATTERN = re.compile(r"^[A-Z]{5}\d{4}[A-Z]$")
EPIC_PATTERN = re.compile(r"^[A-Z]{3}\d{7}$")
DL_PATTERN = re.compile(r"^[A-Z]{2}\d{13}$")
AADHAAR_PATTERN = re.compile(r"^\d{4} \d{4} \d{4}$")
PASSPORT_PATTERN = re.compile(r"^\d{7,9}$")


def strip_artifacts(value: str) -> str:
    """Remove recognition artifacts around an identifier.

    Drops ``$ = : # |`` and a single stray letter that precedes the
    digits, as in ``J 3879331``.
    """
    value = _ARTIFACTS.sub(" ", value).strip()
    return _STRAY_LEADING_LETTER.sub("", value)


def compact(value: str) -> str:
    """Strip artifacts and all separators, upper-case."""
    return _SEPARATORS.sub("", strip_artifacts(value)).upper()


def repair_by_position(value: str, template: str) -> str:
    """Fix letter/digit confusions against a format template.

    Args:
        value: Compact upper-case identifier.
        template: ``A`` for letter positions, ``9`` for digit positions.

    Returns:
        The repaired value; unchanged if the lengths differ.
    """
    if len(value) != len(template):
        return value
    repaired = []
    for char, kind in zip(value, template):
        if kind == "9":
            repaired.append(char.translate(_TO_DIGIT))
        else:
            repaired.append(char.translate(_TO_LETTER))
    return "".join(repaired)


def normalize_pan(value: str, views: TextViews | None = None) -> str | None:
    return repair_by_position(compact(value), PAN_TEMPLATE)


def normalize_epic(value: str, views: TextViews | None = None) -> str | None:
    return repair_by_position(compact(value), EPIC_TEMPLATE)


def normalize_driving_licence(
    value: str, views: TextViews | None = None
) -> str | None:
    return repair_by_position(compact(value), DL_TEMPLATE)


def normalize_aadhaar(value: str, views: TextViews | None = None) -> str | None:
    """Render twelve digits as ``XXXX XXXX XXXX``."""
    digits = re.sub(r"\D", "", value)
    if len(digits) != 12:
        return None
    return f"{digits[:4]} {digits[4:8]} {digits[8:]}"


def normalize_passport(value: str, views: TextViews | None = None) -> str | None:
    """Keep the digits of a passport number, dropping any series letter."""
    digits = re.sub(r"\D", "", strip_artifacts(value))
    return digits or None


def is_pan(value: str) -> bool:
    return bool(PAN_PATTERN.match(value))


def is_epic(value: str) -> bool:
    return bool(EPIC_PATTERN.match(value))


def is_driving_licence(value: str) -> bool:
    return bool(DL_PATTERN.match(value))


def is_aadhaar(value: str) -> bool:
    return bool(AADHAAR_PATTERN.match(value))


def is_passport_number(value: str) -> bool:
    return bool(PASSPORT_PATTERN.match(value))
