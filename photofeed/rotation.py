"""Search term rotation used to page through the feed."""

from collections.abc import Iterable

from photofeed.exceptions import ConfigurationError


class SearchTermRotator:
    """
    Cycle through a fixed list of search terms, one term per call.

    Each "page" of the feed is a different topic: the cursor only ever moves
    forward and wraps around the list. Calls must be serialized by the caller.
    """

    def __init__(self, terms: Iterable[str]):
        self._terms = tuple(terms)
        if not self._terms:
            raise ConfigurationError("At least one search term is required")
        self._cursor = 0

    @property
    def terms(self) -> tuple[str, ...]:
        return self._terms

    @property
    def cursor(self) -> int:
        """Number of terms handed out so far."""
        return self._cursor

    def peek(self) -> str:
        """Return the term the next call will use without advancing."""
        return self._terms[self._cursor % len(self._terms)]

    def next_term(self) -> str:
        term = self.peek()
        self._cursor += 1
        return term

    def __iter__(self) -> "SearchTermRotator":
        return self

    def __next__(self) -> str:
        return self.next_term()

    def __repr__(self) -> str:
        return f"SearchTermRotator(terms={len(self._terms)}, cursor={self._cursor})"
