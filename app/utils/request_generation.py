"""
Generation counters for overlapping requests.

When several requests for the same key are in flight, only the most recently
started one is current, regardless of which finishes last.
"""
from collections import defaultdict
from typing import Hashable


class RequestGenerationTracker:
    """Per-key monotonically increasing request generations."""

    def __init__(self):
        self._generations: dict[Hashable, int] = defaultdict(int)

    def begin(self, key: Hashable) -> int:
        """Start a request for ``key`` and return its generation token."""
        self._generations[key] += 1
        return self._generations[key]

    def is_current(self, key: Hashable, token: int) -> bool:
        """True when no newer request for ``key`` has started since ``token``."""
        return self._generations.get(key, 0) == token

    def current(self, key: Hashable) -> int:
        return self._generations.get(key, 0)
