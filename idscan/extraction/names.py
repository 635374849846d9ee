"""Person-name candidates: cleanup, filtering, and full-name recovery."""

import re
from collections.abc import Collection

from .rules import TextViews

COMMON_SURNAMES: tuple[str, ...] = (
    "SINGH",
    "KUMAR",
    "SHARMA",
    "PATEL",
    "RAO",
    "REDDY",
    "MEHTA",
    "GUPTA",
    "VERMA",
    "YADAV",
    "MISHRA",
    "JHA",
    "SAXENA",
    "TIWARI",
    "JOSHI",
    "CHAUDHARY",
    "AGRAWAL",
    "JAIN",
)

# Value of a name label: letters, spaces, dots and apostrophes, stopping
# before a relation marker such as "S/O" and at the end of the line.
NAME_VALUE = r"[A-Za-z][A-Za-z .']{2,}?(?=\s*[SDWCsdwc]/[Oo]\b|[^A-Za-z .']|$)"

# Words that start the next field when OCR runs two fields into one line.
_STOP_TOKENS = frozenset(
    {
        "DOB",
        "D.O.B",
        "DATE",
        "BIRTH",
        "YEAR",
        "GENDER",
        "SEX",
        "MALE",
        "FEMALE",
        "ADDRESS",
        "FATHER",
        "FATHERS",
        "FATHER'S",
        "HUSBAND",
        "HUSBANDS",
        "HUSBAND'S",
        "SIGNATURE",
        "VID",
        "MOBILE",
        "PHONE",
        "ISSUE",
        "VALID",
        "NATIONALITY",
        "PLACE",
        "AGE",
    }
)

BASE_DENYLIST = frozenset({"GOVERNMENT", "GOVT", "INDIA", "OF", "REPUBLIC", "THE"})

_ARTIFACTS = re.compile(r"[\d<>$=|]")


def clean_name(value: str) -> str | None:
    """Normalize a name candidate.

    Upper-cases, collapses whitespace, cuts at the first token that
    starts another field, and trims stray punctuation.

    Args:
        value: Raw candidate text.

    Returns:
        Cleaned name, or ``None`` if nothing is left.
    """
    tokens: list[str] = []
    for token in value.upper().split():
        if token.strip(".:") in _STOP_TOKENS:
            break
        tokens.append(token)
    name = " ".join(tokens).strip(" .'")
    return name or None


def is_plausible_name(
    value: str,
    denylist: Collection[str] = BASE_DENYLIST,
    min_length: int = 3,
    min_tokens: int = 1,
) -> bool:
    """Check a cleaned name candidate against structural filters.

    Args:
        value: Cleaned, upper-case candidate.
        denylist: Header words that never belong to a person's name.
        min_length: Minimum number of characters.
        min_tokens: Minimum number of words.

    Returns:
        ``True`` if the candidate looks like a person's name.
    """
    tokens = value.split()
    if len(value) < min_length or len(tokens) < min_tokens:
        return False
    if _ARTIFACTS.search(value):
        return False
    if any(token.strip(".") in denylist for token in tokens):
        return False
    return any(len(token.strip(".")) > 1 for token in tokens)


def recover_full_name(
    name: str,
    text: str,
    denylist: Collection[str] = BASE_DENYLIST,
    surnames: Collection[str] = COMMON_SURNAMES,
) -> str:
    """Try to extend a one-word name using a common-surname dictionary.

    When only a given name was captured, look for it next to a known
    surname; when only a surname was captured, look for the word next to
    it. The longer result wins.

    Args:
        name: Cleaned name candidate.
        text: Text to search.
        denylist: Words that may not be used as the complementary token.
        surnames: Known surname forms.

    Returns:
        The recovered full name, or ``name`` unchanged.
    """
    tokens = name.split()
    if len(tokens) != 1:
        return name

    token = re.escape(tokens[0])
    if tokens[0] in surnames:
        patterns = (
            rf"\b([A-Z]{{3,}})[ \t]+{token}\b",
            rf"\b{token}[ \t]+([A-Z]{{3,}})\b",
        )
        forms = ("{other} {token}", "{token} {other}")
    else:
        alternatives = "|".join(re.escape(s) for s in surnames)
        patterns = (
            rf"\b{token}[ \t]+({alternatives})\b",
            rf"\b({alternatives})[ \t]+{token}\b",
        )
        forms = ("{token} {other}", "{other} {token}")

    best = name
    for pattern, form in zip(patterns, forms):
        for match in re.finditer(pattern, text, re.IGNORECASE):
            other = match.group(1).upper()
            if other in denylist or other == tokens[0]:
                continue
            candidate = form.format(token=tokens[0], other=other)
            if len(candidate) > len(best):
                best = candidate
            break
    return best


def mrz_name(value: str, views: TextViews) -> str | None:
    """Turn an MRZ name field ``SURNAME<<GIVEN<NAMES`` into ``GIVEN NAMES SURNAME``."""
    surname, _, given = value.partition("<<")
    surname = surname.replace("<", " ").strip()
    given = re.sub(r"<+", " ", given).strip()
    if not surname:
        return None
    return clean_name(f"{given} {surname}" if given else surname)
