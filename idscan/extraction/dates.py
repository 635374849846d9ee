"""Date collection and assignment to date-valued fields.

Every date-shaped substring of a record is collected once into a
:class:`DatePool`. Dates are then handed out in two passes:

1. keyword pass: a date goes to the field whose keyword sits closest in
   front of it (or, failing that, right after it on the same line). When
   a row of several date labels sits directly above a row of dates, the
   labels are matched to the dates column by column;
2. bucket pass: remaining fields take the first free date whose year
   falls inside the field's plausible range.

A date handed to one field is never handed to another. A date that a
keyword ties to a field the current document type does not extract is
held back from the bucket pass as well.
"""

import re
from collections.abc import Sequence
from dataclasses import dataclass

from idscan.models import FieldName

DATE_PATTERN = re.compile(r"(?<!\d)(\d{1,2})[-/.](\d{1,2})[-/.](\d{4})(?!\d)")

# Keyword text between a label and its date may not contain digits.
_PREFIX_WINDOW = 40
_SUFFIX_WINDOW = 20

DATE_KEYWORDS: dict[FieldName, re.Pattern[str]] = {
    FieldName.DATE_OF_BIRTH: re.compile(
        r"\b(?:date\s*of\s*birth|d\.?\s?o\.?\s?b|birth)\b|जन्म\s*तिथि|जन्म",
        re.IGNORECASE,
    ),
    FieldName.ISSUE_DATE: re.compile(
        r"\b(?:date\s*of\s*issue|issue\s*date|issued(?:\s*on)?|d\.?o\.?i)\b"
        r"|जारी\s*करने\s*की\s*तिथि|जारी",
        re.IGNORECASE,
    ),
    FieldName.EXPIRY_DATE: re.compile(
        r"\b(?:date\s*of\s*expiry|expiry(?:\s*date)?|expires|"
        r"valid\s*(?:till|until|upto|up\s*to|thru)|validity)\b"
        r"|समाप्ति(?:\s*की\s*तिथि)?",
        re.IGNORECASE,
    ),
}


@dataclass(frozen=True)
class DateCandidate:
    """A date-shaped substring and where it sits in the text."""

    text: str
    start: int
    end: int
    day: int
    month: int
    year: int

    @property
    def span(self) -> tuple[int, int]:
        return self.start, self.end


@dataclass(frozen=True)
class YearRange:
    """Inclusive range of plausible years for a field."""

    first: int
    last: int

    def __contains__(self, year: object) -> bool:
        return isinstance(year, int) and self.first <= year <= self.last


@dataclass(frozen=True)
class DateRule:
    """How one date field is filled.

    Attributes:
        field: Target field.
        bucket: Year range for the bucket pass; ``None`` for keyword-only.
        min_pool: Minimum number of dates in the record before the bucket
            pass may assign this field.
    """

    field: FieldName
    bucket: YearRange | None = None
    min_pool: int = 1


def label_columns(line: str) -> list[FieldName]:
    """Date fields labelled on ``line``, one per column, left to right.

    A label and its gloss in another script (``Date of Issue / जारी करने
    की तिथि``) count as one column.
    """
    found = sorted(
        (match.start(), field)
        for field, pattern in DATE_KEYWORDS.items()
        for match in pattern.finditer(line)
    )
    columns: list[FieldName] = []
    for _, field in found:
        if not columns or columns[-1] != field:
            columns.append(field)
    return columns


def find_dates(text: str) -> list[DateCandidate]:
    """Collect plausible ``d/m/yyyy`` substrings in text order.

    Args:
        text: Text to scan.

    Returns:
        Candidates with day 1-31 and month 1-12.
    """
    dates: list[DateCandidate] = []
    for match in DATE_PATTERN.finditer(text):
        day, month, year = (int(g) for g in match.groups())
        if 1 <= day <= 31 and 1 <= month <= 12:
            dates.append(
                DateCandidate(
                    text=match.group(0),
                    start=match.start(),
                    end=match.end(),
                    day=day,
                    month=month,
                    year=year,
                )
            )
    return dates


class DatePool:
    """The dates of one record and which field each has gone to.

    Args:
        text: Raw recognized text.
    """

    def __init__(self, text: str) -> None:
        self.text = text
        self.dates = find_dates(text)
        self._claimed: dict[tuple[int, int], FieldName] = {}
        self._reserved: dict[tuple[int, int], FieldName] = {}

    def __len__(self) -> int:
        return len(self.dates)

    @property
    def assignments(self) -> dict[FieldName, DateCandidate]:
        by_span = {d.span: d for d in self.dates}
        return {f: by_span[span] for span, f in self._claimed.items()}

    def is_free(self, date: DateCandidate) -> bool:
        return date.span not in self._claimed and date.text not in {
            d.text for d in self.dates if d.span in self._claimed
        }

    def claim(self, date: DateCandidate, field: FieldName) -> None:
        """Give ``date`` to ``field``.

        Raises:
            ValueError: If the date, or an identical date string, is taken.
        """
        if not self.is_free(date):
            raise ValueError(f"Date {date.text!r} is already assigned")
        self._claimed[date.span] = field

    def column_field(self, date: DateCandidate) -> FieldName | None:
        """Match ``date`` against a row of labels printed above its line.

        Applies only when the line holding ``date`` carries no date label
        and the nearest non-blank line above it is digit-free and labels
        two or more date fields. The N-th date on the line then belongs to
        the N-th label.
        """
        line_start = self.text.rfind("\n", 0, date.start) + 1
        line_end = self.text.find("\n", date.end)
        if line_end == -1:
            line_end = len(self.text)
        line = self.text[line_start:line_end]
        if any(pattern.search(line) for pattern in DATE_KEYWORDS.values()):
            return None

        above = self.text[:line_start].rstrip().rpartition("\n")[2]
        if re.search(r"\d", above):
            return None
        columns = label_columns(above)
        if len(columns) < 2:
            return None

        row = [d for d in self.dates if line_start <= d.start and d.end <= line_end]
        index = row.index(date)
        return columns[index] if index < len(columns) else None

    def keyword_field(self, date: DateCandidate) -> FieldName | None:
        """Find the date field a keyword ties ``date`` to, if any."""
        column = self.column_field(date)
        if column is not None:
            return column

        prefix_start = max(0, date.start - _PREFIX_WINDOW)
        prefix = self.text[prefix_start : date.start]
        # Only the digit-free stretch directly in front of the date counts.
        gap = re.search(r"[^\d]*$", prefix)
        gap_text = gap.group(0) if gap else ""

        nearest: tuple[int, FieldName] | None = None
        for field, pattern in DATE_KEYWORDS.items():
            for match in pattern.finditer(gap_text):
                if nearest is None or match.end() > nearest[0]:
                    nearest = (match.end(), field)
        if nearest is not None:
            return nearest[1]

        line_end = self.text.find("\n", date.end)
        rest = self.text[date.end : line_end if line_end != -1 else len(self.text)]
        suffix = re.match(r"[^\d]*", rest[:_SUFFIX_WINDOW]).group(0)
        earliest: tuple[int, FieldName] | None = None
        for field, pattern in DATE_KEYWORDS.items():
            match = pattern.search(suffix)
            if match is None or re.search(r"\d", rest[match.end() :]):
                # The keyword labels a later date on the same line.
                continue
            if earliest is None or match.start() < earliest[0]:
                earliest = (match.start(), field)
        return earliest[1] if earliest else None

    def assign(self, rules: Sequence[DateRule]) -> dict[FieldName, str]:
        """Fill the given date fields from the pool.

        Args:
            rules: Date rules of the current document type, in priority order.

        Returns:
            Field name to verbatim date substring.
        """
        wanted = {rule.field for rule in rules}
        filled: dict[FieldName, str] = {}

        for date in self.dates:
            field = self.keyword_field(date)
            if field is None:
                continue
            self._reserved[date.span] = field
            if field in wanted and field not in filled and self.is_free(date):
                self.claim(date, field)
                filled[field] = date.text

        for rule in rules:
            if rule.field in filled or rule.bucket is None:
                continue
            if len(self.dates) < rule.min_pool:
                continue
            for date in self.dates:
                if date.span in self._reserved or not self.is_free(date):
                    continue
                if date.year in rule.bucket:
                    self.claim(date, rule.field)
                    filled[rule.field] = date.text
                    break

        return filled
