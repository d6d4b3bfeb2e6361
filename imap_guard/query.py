"""
Fluent builder for IMAP SEARCH criteria.

A Query accumulates search-key tokens in call order. Build a base query once
and derive variants from it with ``clone()``:

    base = Query().unflagged().unanswered()
    guard.move(base.clone().from_("github.com"), "INBOX.Github")
"""

import datetime
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple, Union

from .exceptions import InvalidArgument

# Month names for IMAP dates, independent of the process locale
_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
           "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def format_imap_date(date: datetime.date) -> str:
    """Format a date as an IMAP search date (DD-Mon-YYYY)."""
    return f"{date.day:02d}-{_MONTHS[date.month - 1]}-{date.year:04d}"


@dataclass(frozen=True)
class RawDate:
    """A date string used verbatim."""

    text: str

    def render(self, today: Optional[datetime.date] = None) -> str:
        return self.text


@dataclass(frozen=True)
class DaysAgo:
    """A date a number of days before today."""

    days: int

    def render(self, today: Optional[datetime.date] = None) -> str:
        today = today or datetime.date.today()
        return format_imap_date(today - datetime.timedelta(days=self.days))


@dataclass(frozen=True)
class CalendarDate:
    """A fixed calendar date."""

    date: datetime.date

    def render(self, today: Optional[datetime.date] = None) -> str:
        return format_imap_date(self.date)


DateSpec = Union[RawDate, DaysAgo, CalendarDate]


def date_spec(value) -> DateSpec:
    """Map a string, day count or date onto its DateSpec variant.

    Raises:
        InvalidArgument: For None, booleans and any other type
    """
    if isinstance(value, (RawDate, DaysAgo, CalendarDate)):
        return value
    if isinstance(value, str):
        return RawDate(value)
    if isinstance(value, int) and not isinstance(value, bool):
        return DaysAgo(value)
    if isinstance(value, datetime.datetime):
        return CalendarDate(value.date())
    if isinstance(value, datetime.date):
        return CalendarDate(value)
    raise InvalidArgument(f"{value!r} is invalid")


# Criteria usable as operands of OR and NOT
FLAG_CRITERIA = {
    "seen": "SEEN",
    "unseen": "UNSEEN",
    "answered": "ANSWERED",
    "unanswered": "UNANSWERED",
    "flagged": "FLAGGED",
    "unflagged": "UNFLAGGED",
    "deleted": "DELETED",
}
VALUE_CRITERIA = {
    "subject": "SUBJECT",
    "from": "FROM",
    "to": "TO",
    "cc": "CC",
    "before": "BEFORE",
    "since": "SINCE",
}

SearchKey = Union[str, Tuple[str, object]]


class Query:
    """Ordered list of IMAP search-key tokens built by chained calls."""

    def __init__(self, criteria: Optional[Union[Sequence[str], str]] = None):
        if isinstance(criteria, str):
            criteria = [criteria] if criteria else []
        self._criteria: List[str] = list(criteria or [])

    def _append(self, *tokens: str) -> "Query":
        self._criteria.extend(tokens)
        return self

    def seen(self) -> "Query":
        return self._append("SEEN")

    def unseen(self) -> "Query":
        return self._append("UNSEEN")

    def answered(self) -> "Query":
        return self._append("ANSWERED")

    def unanswered(self) -> "Query":
        return self._append("UNANSWERED")

    def flagged(self) -> "Query":
        return self._append("FLAGGED")

    def unflagged(self) -> "Query":
        return self._append("UNFLAGGED")

    def deleted(self) -> "Query":
        return self._append("DELETED")

    def subject(self, text: str) -> "Query":
        return self._append("SUBJECT", text)

    def from_(self, text: str) -> "Query":
        return self._append("FROM", text)

    def to(self, text: str) -> "Query":
        return self._append("TO", text)

    def cc(self, text: str) -> "Query":
        return self._append("CC", text)

    def before(self, date) -> "Query":
        """Add a ``BEFORE date`` condition.

        Args:
            date: Depending on its type:
                - str: used as is
                - int: that many days before today
                - datetime.date: that date
                or one of the RawDate, DaysAgo, CalendarDate variants

        Raises:
            InvalidArgument: If date is None or of any other type
        """
        return self._append("BEFORE", date_spec(date).render())

    def since(self, date) -> "Query":
        """Add a ``SINCE date`` condition, accepting the same dates as before()."""
        return self._append("SINCE", date_spec(date).render())

    def or_(self, key_a: Optional[SearchKey] = None, key_b: Optional[SearchKey] = None) -> "Query":
        """Add ``OR``, optionally followed by its two operands.

        Without operands the next two criteria chained on become the
        operands. Each operand is a flag criterion name such as ``"seen"``
        or a ``(name, value)`` pair such as ``("from", "github.com")``.

        Raises:
            InvalidArgument: If only one operand is given or an operand is unknown
        """
        if (key_a is None) != (key_b is None):
            raise InvalidArgument("OR takes either no operands or exactly two")
        if key_a is None:
            return self._append("OR")

        operands = [self._tokens_for(key_a), self._tokens_for(key_b)]
        self._append("OR")
        for tokens in operands:
            self._append(*tokens)
        return self

    def not_(self, key: Optional[SearchKey] = None) -> "Query":
        """Add ``NOT``, optionally followed by the negated criterion.

        Raises:
            InvalidArgument: If the key is not a known criterion
        """
        if key is None:
            return self._append("NOT")
        tokens = self._tokens_for(key)
        return self._append("NOT", *tokens)

    def _tokens_for(self, key: SearchKey) -> List[str]:
        """Render one OR/NOT operand into tokens on a scratch query."""
        scratch = Query()
        if isinstance(key, str) and key in FLAG_CRITERIA:
            getattr(scratch, key)()
        elif isinstance(key, tuple) and len(key) == 2 and key[0] in VALUE_CRITERIA:
            name, value = key
            method = "from_" if name == "from" else name
            getattr(scratch, method)(value)
        else:
            raise InvalidArgument(f"{key!r} is not a valid search key")
        return scratch.render()

    def render(self) -> List[str]:
        """Return the tokens as a new list."""
        return list(self._criteria)

    def render_string(self) -> str:
        """Return the tokens joined by single spaces."""
        return " ".join(self._criteria)

    def clone(self) -> "Query":
        """Return a detached copy of this query."""
        return Query(self._criteria)

    __copy__ = clone

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._criteria))

    def __len__(self) -> int:
        return len(self._criteria)

    def __eq__(self, other) -> bool:
        if isinstance(other, Query):
            return self._criteria == other._criteria
        if isinstance(other, list):
            return self._criteria == other
        return NotImplemented

    def __str__(self) -> str:
        return self.render_string()

    def __repr__(self) -> str:
        return f"Query({self._criteria!r})"
