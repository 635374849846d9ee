"""Declarative field rules.

A :class:`FieldRule` is a ``(pattern, validator, field)`` triple plus an
optional transform. Rules for the same field are tried in table order;
within one rule every match is tried in text order; the first candidate
that survives the transform and passes the validator is the value.
"""

import re
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from enum import StrEnum

from idscan.models import FieldName

Validator = Callable[[str], bool]

DEVANAGARI = r"\u0900-\u097F"

# Optional Hindi gloss after a bilingual label, as in "Name / नाम".
_DEVANAGARI_GLOSS = rf"(?:\s*/\s*[{DEVANAGARI}][{DEVANAGARI} ]*)?"


class View(StrEnum):
    """Which rendering of the recognized text a rule matches against."""

    RAW = "raw"
    CLEAN = "clean"


@dataclass(frozen=True)
class TextViews:
    """Raw text plus an artifact-stripped, whitespace-collapsed copy.

    The clean view keeps the original casing; only ``<``, ``>`` and ``$``
    are removed before whitespace is collapsed.
    """

    raw: str
    clean: str

    @classmethod
    def of(cls, raw: str) -> "TextViews":
        clean = re.sub(r"[<>]", " ", raw).replace("$", "")
        return cls(raw=raw, clean=re.sub(r"\s+", " ", clean).strip())

    def get(self, view: View) -> str:
        return self.raw if view is View.RAW else self.clean


Transform = Callable[[str, TextViews], str | None]


def strip_value(value: str, views: TextViews) -> str | None:
    """Default transform: trim surrounding whitespace."""
    return value.strip() or None


def always_valid(value: str) -> bool:
    return True


def labelled(label: str, value: str, flags: int = 0) -> re.Pattern[str]:
    """Compile ``label [/ हिंदी] [:.-] value``.

    The label is matched case-insensitively, the value as written. The
    captured value is the named group ``value``.

    Args:
        label: Regex alternation for the label.
        value: Regex for the value.
        flags: Extra flags for the whole pattern.

    Returns:
        Compiled pattern.
    """
    return re.compile(
        rf"(?i:{label}){_DEVANAGARI_GLOSS}\s*[:.\-]?\s*(?P<value>{value})", flags
    )


@dataclass(frozen=True)
class FieldRule:
    """One candidate rule for one field."""

    field: FieldName
    pattern: re.Pattern[str]
    validate: Validator = always_valid
    transform: Transform = strip_value
    view: View = View.RAW

    def candidates(self, views: TextViews) -> Iterator[str]:
        """Yield transformed candidate values in text order."""
        for match in self.pattern.finditer(views.get(self.view)):
            if "value" in self.pattern.groupindex:
                raw_value = match.group("value")
            elif match.re.groups:
                raw_value = match.group(1)
            else:
                raw_value = match.group(0)
            if raw_value is None:
                continue
            value = self.transform(raw_value, views)
            if value is not None:
                yield value

    def first(self, views: TextViews) -> str | None:
        """Return the first candidate that passes the validator."""
        for value in self.candidates(views):
            if self.validate(value):
                return value
        return None
