"""Calendar index construction from scraped (label, date text) pairs."""
import logging
from collections.abc import Mapping
from datetime import datetime
from typing import Dict, Iterable, Iterator

from processor.date_parser import UnrecognizedDateFormat, parse_date_text
from processor.models import RawEntry

logger = logging.getLogger(__name__)


class CalendarIndex(Mapping):
    """Read-only mapping from unique event key to event date, in insertion order."""

    def __init__(self, entries: Dict[str, datetime]):
        self._entries = dict(entries)

    def __getitem__(self, key: str) -> datetime:
        return self._entries[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"CalendarIndex({len(self._entries)} entries)"


class CalendarIndexBuilder:
    """Builds a CalendarIndex, disambiguating repeated event labels."""

    FIRST_DUPLICATE_DAY = 2

    def __init__(self, keep_start_time: bool = True):
        """
        Initialize the builder.

        Args:
            keep_start_time: Passed to the date parser for time range texts
        """
        self.keep_start_time = keep_start_time

    def build(self, raw_entries: Iterable[RawEntry]) -> CalendarIndex:
        """
        Parse every raw entry and index its dates.

        An entry whose date text cannot be parsed is logged and skipped;
        the rest of the calendar is still indexed.

        Args:
            raw_entries: Scraped entries in page order

        Returns:
            CalendarIndex of all parsed entries
        """
        entries: Dict[str, datetime] = {}
        total = 0
        skipped = 0

        for raw in raw_entries:
            total += 1
            try:
                dates = parse_date_text(raw.date_text, self.keep_start_time)
            except UnrecognizedDateFormat as e:
                logger.warning(f"Skipping event '{raw.label}': {e}")
                skipped += 1
                continue

            for date in dates:
                entries[self.unique_key(raw.label, entries)] = date

        logger.info(
            f"Indexed {len(entries)} calendar dates from {total} entries "
            f"({skipped} skipped)"
        )
        return CalendarIndex(entries)

    def unique_key(self, label: str, existing: Mapping) -> str:
        """
        Return label, or "label Day N" with the first free N >= 2.

        Args:
            label: Event label as scraped
            existing: Keys already in use

        Returns:
            Key not present in existing
        """
        if label not in existing:
            return label

        day = self.FIRST_DUPLICATE_DAY
        while f"{label} Day {day}" in existing:
            day += 1
        return f"{label} Day {day}"
