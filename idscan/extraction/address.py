"""Address span extraction."""

import re

from .rules import DEVANAGARI, TextViews, Validator

MAX_ADDRESS_LINES = 5

# Up to MAX_ADDRESS_LINES lines following an address label.
ADDRESS_VALUE = r".+(?:\n.*){0,%d}" % (MAX_ADDRESS_LINES - 1)

# Labels of fields that are printed after the address on the same card.
_ADDRESS_STOP = re.compile(
    r"\b(?:\d{4}\s\d{4}\s\d{4}|gender|sex|male|female|d\.?o\.?b|"
    r"date\s*of\s*birth|year\s*of\s*birth|vid|mobile|phone|"
    r"date\s*of\s*issue|issue\s*date|valid(?:ity)?|signature|"
    r"help@\S+|www\.\S+)\b"
    r"|जन्म|पुरुष|महिला",
    re.IGNORECASE,
)

_TRAILING_SEPARATORS = " \t,;:.-/"


def bound_address(value: str, max_lines: int = MAX_ADDRESS_LINES) -> str | None:
    """Cut an address span at its natural end and fold it to one line.

    The span ends at the first blank line, at the first field keyword, or
    after ``max_lines`` lines, whichever comes first.

    Args:
        value: Text following the address label.
        max_lines: Maximum number of lines to keep.

    Returns:
        Lines joined with ``", "``, or ``None`` if nothing is left.
    """
    parts: list[str] = []
    for line in value.splitlines()[:max_lines]:
        if not line.strip():
            break
        stop = _ADDRESS_STOP.search(line)
        if stop:
            line = line[: stop.start()]
        line = re.sub(r"\s+", " ", line).strip(_TRAILING_SEPARATORS)
        if line:
            parts.append(line)
        if stop:
            break
    return ", ".join(parts) or None


def address_transform(value: str, views: TextViews) -> str | None:
    return bound_address(value)


def longer_than(min_length: int) -> Validator:
    """Validator accepting addresses strictly longer than ``min_length``."""

    def validate(value: str) -> bool:
        letters = re.sub(rf"[^A-Za-z0-9{DEVANAGARI}]", "", value)
        return len(value) > min_length and bool(letters)

    return validate
