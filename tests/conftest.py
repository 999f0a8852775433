"""Shared fixtures for photo feed tests."""

from typing import Any, Callable

import httpx
import pytest

from photofeed.feed import FeedAccumulator
from photofeed.fetcher import PhotoFeedFetcher
from photofeed.nasa_client import NasaImagesClient
from photofeed.rotation import SearchTermRotator

BASE_URL = "https://images.test"


def make_item(title: str, *, href: str | None = None, center: str | None = "JPL") -> dict[str, Any]:
    """Build one search item as the NASA API returns it."""
    item: dict[str, Any] = {
        "href": f"{BASE_URL}/asset/{title}",
        "data": [
            {
                "title": title,
                "description": f"Description of {title}",
                "date_created": "2023-01-01T12:00:00Z",
                "center": center,
                "nasa_id": title,
                "keywords": ["test"],
            }
        ],
    }
    if href is not None:
        item["links"] = [{"href": href, "rel": "preview", "render": "image"}]
    return item


def make_payload(term: str, count: int) -> dict[str, Any]:
    """Build a search envelope whose titles are ``{term}-{index}``."""
    return {
        "collection": {
            "version": "1.0",
            "href": f"{BASE_URL}/search?q={term}",
            "items": [
                make_item(f"{term}-{index}", href=f"{BASE_URL}/thumb/{term}-{index}.jpg")
                for index in range(count)
            ],
        }
    }


@pytest.fixture
def requests_seen() -> list[httpx.Request]:
    return []


@pytest.fixture
def make_client(requests_seen: list[httpx.Request]) -> Callable[..., NasaImagesClient]:
    """Build a client whose transport records requests and delegates to ``handler``."""

    def factory(handler: Callable[[httpx.Request], Any], base_url: str = BASE_URL) -> NasaImagesClient:
        def recording(request: httpx.Request):
            requests_seen.append(request)
            return handler(request)

        return NasaImagesClient(base_url=base_url, transport=httpx.MockTransport(recording))

    return factory


def payload_per_term(count: int = 2) -> Callable[[httpx.Request], httpx.Response]:
    """Handler answering every search with ``count`` items titled after the query term."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=make_payload(request.url.params["q"], count))

    return handler


@pytest.fixture
def make_feed(make_client) -> Callable[..., FeedAccumulator]:
    def factory(
        handler: Callable[[httpx.Request], Any] | None = None,
        terms: list[str] | None = None,
        prefetch_distance: int = 5,
    ) -> FeedAccumulator:
        client = make_client(handler or payload_per_term())
        rotator = SearchTermRotator(terms or ["space", "mars"])
        return FeedAccumulator(PhotoFeedFetcher(client, rotator), prefetch_distance=prefetch_distance)

    return factory
