"""Slot-keyed thumbnail loading with cancellation on reuse."""

import asyncio
import logging
import weakref
from collections.abc import Iterable
from urllib.parse import urlparse

from photofeed.config import DEFAULT_THUMBNAIL_HOSTS
from photofeed.exceptions import ThumbnailError, ThumbnailSupersededError, TransportFailureError
from photofeed.models import Thumbnail
from photofeed.nasa_client import NasaImagesClient

logger = logging.getLogger(__name__)


def is_loadable_url(url: str | None, allowed_hosts: Iterable[str] | None = None) -> bool:
    """
    Return True for absolute http(s) URLs.

    When ``allowed_hosts`` is given the URL's host must also be one of them.
    """
    if not url:
        return False
    try:
        parsed = urlparse(url)
        hostname = parsed.hostname
    except ValueError:
        return False
    if parsed.scheme not in ("http", "https") or not hostname:
        return False
    if allowed_hosts is None:
        return True
    return hostname.lower() in {host.lower() for host in allowed_hosts}


class ThumbnailLoader:
    """
    Load thumbnails for grid slots.

    Each slot has at most one load in progress. Loading into a slot that is
    still busy cancels the earlier task, so a recycled slot never receives a
    stale image. Nothing is cached.

    Only URLs on ``allowed_hosts`` are fetched, and redirects are not followed.
    """

    def __init__(
        self,
        client: NasaImagesClient,
        allowed_hosts: Iterable[str] = DEFAULT_THUMBNAIL_HOSTS,
    ):
        self.client = client
        self.allowed_hosts = frozenset(host.lower() for host in allowed_hosts)
        self._tasks: dict[str, asyncio.Task[Thumbnail]] = {}
        self._superseded: weakref.WeakSet[asyncio.Task[Thumbnail]] = weakref.WeakSet()

    def pending(self) -> list[str]:
        return [slot for slot, task in self._tasks.items() if not task.done()]

    def start(self, slot: str, url: str) -> asyncio.Task[Thumbnail]:
        """Schedule a load for ``slot``, cancelling whatever the slot was loading."""
        if not is_loadable_url(url):
            raise ThumbnailError(f"Invalid thumbnail URL: {url!r}")
        if not is_loadable_url(url, self.allowed_hosts):
            raise ThumbnailError(f"Thumbnail host not allowed: {url!r}")

        self.cancel(slot)
        task = asyncio.create_task(self._download(slot, url), name=f"thumbnail:{slot}")
        self._tasks[slot] = task
        task.add_done_callback(lambda done, key=slot: self._forget(key, done))
        return task

    async def load(self, slot: str, url: str) -> Thumbnail:
        """
        Load a thumbnail into ``slot`` and wait for it.

        Raises:
            ThumbnailSupersededError: If a newer load for the same slot replaced this one
            ThumbnailError: If the URL is unusable, its host is not allowed, or the
                upstream response is not an image
            TransportFailureError: On network errors and non-2xx statuses
        """
        task = self.start(slot, url)
        try:
            return await task
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if task in self._superseded and not (current and current.cancelling()):
                self._superseded.discard(task)
                raise ThumbnailSupersededError(slot) from None
            raise

    def cancel(self, slot: str) -> bool:
        """Cancel the slot's in-progress load, if any."""
        task = self._tasks.pop(slot, None)
        if task is None or task.done():
            return False
        self._superseded.add(task)
        task.cancel()
        logger.debug(f"Cancelled thumbnail load for slot {slot!r}")
        return True

    async def aclose(self) -> None:
        """Cancel every pending load; awaiters see a plain cancellation."""
        tasks = list(self._tasks.values())
        self._tasks.clear()
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._superseded.clear()

    def _forget(self, slot: str, task: asyncio.Task[Thumbnail]) -> None:
        if self._tasks.get(slot) is task:
            del self._tasks[slot]

    async def _download(self, slot: str, url: str) -> Thumbnail:
        try:
            response = await self.client.get_bytes(url)
        except TransportFailureError as e:
            logger.warning(f"Image loading error for slot {slot!r}: {e}", extra={"slot": slot})
            raise

        content_type = response.headers.get("content-type", "").split(";")[0].strip().lower()
        if not content_type.startswith("image/") or not response.content:
            raise ThumbnailError(f"Failed to create image from data at {url}")
        return Thumbnail(slot=slot, url=url, content_type=content_type, content=response.content)
