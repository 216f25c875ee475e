"""Bounded, threshold-filtered ranking of name lookup candidates."""
from typing import List

from processor.models import MatchResult

DEFAULT_CAPACITY = 3
DEFAULT_THRESHOLD = 20


class TopKResults:
    """
    Keeps the highest-similarity candidates offered to it.

    Instances are per query; never share one between lookups.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY, threshold: int = DEFAULT_THRESHOLD):
        """
        Initialize an empty result set.

        Args:
            capacity: Maximum number of results kept (default: 3)
            threshold: Minimum similarity on the 0-100 scale (default: 20)
        """
        if capacity < 1:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self.capacity = capacity
        self.threshold = threshold
        self._results: List[MatchResult] = []

    def offer(self, candidate: MatchResult) -> bool:
        """
        Offer a candidate to the set.

        A candidate below the threshold is discarded. When the set is full,
        the candidate replaces the lowest member if its similarity is at
        least that member's; ties favor the candidate.

        Returns:
            True if the candidate was admitted
        """
        if candidate.similarity < self.threshold:
            return False

        if len(self._results) < self.capacity:
            self._results.append(candidate)
        elif candidate.similarity >= self._results[-1].similarity:
            self._results[-1] = candidate
        else:
            return False

        self._results.sort(key=lambda result: result.similarity, reverse=True)
        return True

    def results(self) -> List[MatchResult]:
        """Return the kept results, highest similarity first."""
        return list(self._results)

    def __len__(self) -> int:
        return len(self._results)
