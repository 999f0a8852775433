"""Accumulate fetched batches into one growing feed."""

import logging
from collections.abc import Callable

from photofeed.exceptions import FetchError
from photofeed.fetcher import PhotoFeedFetcher
from photofeed.models import DisplayRecord, FeedState, FeedUpdate

logger = logging.getLogger(__name__)

FAILURE_NOTICE = "Unable to load NASA photos. Please try again."

FeedListener = Callable[[FeedUpdate], None]


class FeedAccumulator:
    """
    Combine repeated fetches into one display-ordered collection.

    At most one load is outstanding; a load requested while another is in
    flight is ignored. Records and listeners are only touched on the event
    loop that awaits ``load``.
    """

    def __init__(self, fetcher: PhotoFeedFetcher, prefetch_distance: int = 5):
        self.fetcher = fetcher
        self.prefetch_distance = prefetch_distance
        self._records: list[DisplayRecord] = []
        self._in_flight = False
        self._listeners: list[FeedListener] = []

    @property
    def records(self) -> list[DisplayRecord]:
        return list(self._records)

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    def __len__(self) -> int:
        return len(self._records)

    def snapshot(self) -> tuple[DisplayRecord, ...]:
        return tuple(self._records)

    def state(self) -> FeedState:
        return FeedState(
            records=list(self._records),
            total=len(self._records),
            in_flight=self._in_flight,
            next_term=self.fetcher.rotator.peek(),
        )

    def subscribe(self, listener: FeedListener) -> Callable[[], None]:
        """Register a listener for completed loads; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def should_load_more(self, last_visible_index: int, prefetch: int | None = None) -> bool:
        """Infinite-scroll trigger: the last visible card is near the end of a non-empty feed."""
        if self._in_flight or not self._records:
            return False
        distance = self.prefetch_distance if prefetch is None else prefetch
        return last_visible_index >= len(self._records) - 1 - distance

    async def load(self, refresh: bool = False) -> FeedUpdate:
        """
        Fetch the next batch and append it, or replace the feed on refresh.

        Returns:
            FeedUpdate describing what happened; failures leave the feed unchanged
        """
        if self._in_flight:
            logger.debug(
                "Feed load ignored: another load is in flight", extra={"feed_status": "skipped"}
            )
            return FeedUpdate(status="skipped", total=len(self._records))

        self._in_flight = True
        try:
            batch = await self.fetcher.fetch_batch()
        except FetchError as e:
            logger.warning(
                f"Feed load failed ({e.kind}): {e}",
                extra={"feed_status": "failed", "error": e.kind},
            )
            update = FeedUpdate(
                status="failed",
                total=len(self._records),
                error=e.kind,
                message=FAILURE_NOTICE,
            )
        else:
            if refresh:
                self._records = list(batch.records)
            else:
                self._records.extend(batch.records)
            update = FeedUpdate(
                status="refreshed" if refresh else "appended",
                term=batch.term,
                added=len(batch.records),
                total=len(self._records),
            )
            logger.info(
                f"Feed {update.status}: {update.added} records, {update.total} total",
                extra={"term": batch.term, "feed_status": update.status},
            )
        finally:
            self._in_flight = False

        self._notify(update)
        return update

    async def load_more(self) -> FeedUpdate:
        return await self.load(refresh=False)

    async def refresh(self) -> FeedUpdate:
        return await self.load(refresh=True)

    def _notify(self, update: FeedUpdate) -> None:
        for listener in list(self._listeners):
            try:
                listener(update)
            except Exception:
                logger.exception("Feed listener raised")
