"""Data models for calendar indexing and queries."""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class Tense(Enum):
    """Temporal filter applied to name lookups."""
    PAST = 'past'
    NOT_PAST = 'notpast'

    @classmethod
    def from_label(cls, label: str) -> 'Tense':
        """
        Resolve a tense from its label, ignoring case and underscores.

        Args:
            label: Tense label (e.g. "past", "notpast", "NOT_PAST")

        Returns:
            Matching Tense member

        Raises:
            ValueError: If the label names no tense
        """
        key = label.strip().lower().replace('_', '')
        for tense in cls:
            if tense.value == key:
                return tense
        raise ValueError(f"Unknown tense: {label!r}")


@dataclass(frozen=True)
class RawEntry:
    """Scraped (event label, date text) pair."""
    label: str
    date_text: str


@dataclass(frozen=True)
class CalendarEntry:
    """Index entry returned by window queries."""
    name: str
    date: datetime


@dataclass(frozen=True)
class MatchResult:
    """Candidate produced by a fuzzy name lookup."""
    name: str
    date: datetime
    similarity: int
