"""Queries over a built calendar index."""
import logging
from datetime import date, datetime, timedelta
from typing import Callable, Iterable, List, Optional, Union

from rapidfuzz import fuzz

from processor.calendar_index import CalendarIndex, CalendarIndexBuilder
from processor.models import CalendarEntry, MatchResult, RawEntry, Tense
from processor.normalizer import clean_display_name, join_names, normalize_query_key
from processor.top_k import DEFAULT_CAPACITY, DEFAULT_THRESHOLD, TopKResults

logger = logging.getLogger(__name__)

EXACT_MATCH_SIMILARITY = 100


class EventCalendar:
    """Answers name, date and window questions about the academic calendar."""

    def __init__(
        self,
        index: CalendarIndex,
        clock: Callable[[], datetime] = datetime.now,
        max_results: int = DEFAULT_CAPACITY,
        similarity_threshold: int = DEFAULT_THRESHOLD
    ):
        """
        Initialize the calendar.

        Args:
            index: Built calendar index
            clock: Returns the current naive local datetime
            max_results: Capacity of name lookup results (default: 3)
            similarity_threshold: Minimum similarity, 0-100 (default: 20)
        """
        self.index = index
        self.clock = clock
        self.max_results = max_results
        self.similarity_threshold = similarity_threshold

    @classmethod
    def from_entries(cls, raw_entries: Iterable[RawEntry], **kwargs) -> 'EventCalendar':
        """Build the index from raw entries and wrap it."""
        keep_start_time = kwargs.pop('keep_start_time', True)
        index = CalendarIndexBuilder(keep_start_time=keep_start_time).build(raw_entries)
        return cls(index, **kwargs)

    @classmethod
    def from_website(cls, scraper, **kwargs) -> 'EventCalendar':
        """
        Fetch the calendar page and build a fresh calendar from it.

        Args:
            scraper: Object with a fetch_entries() method

        Raises:
            requests.RequestException: If the page cannot be fetched
        """
        return cls.from_entries(scraper.fetch_entries(), **kwargs)

    def lookup_by_name(
        self,
        name: str,
        tense: Tense,
        clean_names: bool = False
    ) -> List[MatchResult]:
        """
        Find the dates of the events best matching a free-text name.

        Args:
            name: Event name as asked
            tense: Tense.PAST considers every date, Tense.NOT_PAST only
                today or later
            clean_names: Strip disambiguation artifacts from result names

        Returns:
            Up to max_results matches, highest similarity first
        """
        query = normalize_query_key(name)
        if not query:
            return []

        today = self.clock().date()
        results = TopKResults(self.max_results, self.similarity_threshold)

        for key, event_date in self.index.items():
            if tense == Tense.NOT_PAST and event_date.date() < today:
                continue

            candidate = normalize_query_key(key)
            if query in candidate:
                similarity = EXACT_MATCH_SIMILARITY
            else:
                similarity = round(fuzz.partial_ratio(query, candidate))

            display = clean_display_name(key) if clean_names else key
            results.offer(MatchResult(display, event_date, similarity))

        logger.debug(f"Lookup '{name}' ({tense.value}) matched {len(results)} events")
        return results.results()

    def lookup_by_date(
        self,
        day: Union[date, datetime],
        clean_name: bool = False
    ) -> Optional[str]:
        """
        Name every event falling on the calendar day of the given date.

        Args:
            day: Date to look up; any time of day is ignored
            clean_name: Strip disambiguation artifacts from names

        Returns:
            Names joined as "A", "A and B" or "A, B, and C"; None if no
            event falls on that day
        """
        if isinstance(day, datetime):
            day = day.date()

        names: List[str] = []
        for key, event_date in self.index.items():
            if event_date.date() != day:
                continue
            name = clean_display_name(key) if clean_name else key
            if name not in names:
                names.append(name)

        return join_names(names)

    def days_until(self, name: str, clean_name: bool = False) -> Optional[MatchResult]:
        """Return the best upcoming match for a name, or None."""
        results = self.lookup_by_name(name, Tense.NOT_PAST, clean_name)
        return results[0] if results else None

    def count_days_until(self, result: MatchResult) -> int:
        """Whole calendar days from today to the result's date."""
        return (result.date.date() - self.clock().date()).days

    def events_in_window(self, days: int, clean_names: bool = False) -> List[CalendarEntry]:
        """
        List events strictly between now and now plus the given days.

        Args:
            days: Window length in days, at least 1
            clean_names: Strip disambiguation artifacts from names

        Returns:
            Entries in ascending date order

        Raises:
            ValueError: If days is less than 1
        """
        if days < 1:
            raise ValueError(f"Window must be at least one day, got {days}")

        now = self.clock()
        cutoff = now + timedelta(days=days)

        entries = [
            CalendarEntry(clean_display_name(key) if clean_names else key, event_date)
            for key, event_date in self.index.items()
            if now < event_date < cutoff
        ]
        entries.sort(key=lambda entry: entry.date)
        return entries
