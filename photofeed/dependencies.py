"""FastAPI dependencies."""

from fastapi import Request

from photofeed.exceptions import ConfigurationError
from photofeed.feed import FeedAccumulator
from photofeed.thumbnails import ThumbnailLoader


def get_feed(request: Request) -> FeedAccumulator:
    """Get the application's feed accumulator via dependency injection."""
    feed = getattr(request.app.state, "feed", None)
    if feed is None:
        raise ConfigurationError("Feed is not initialized; the application lifespan has not run")
    return feed


def get_thumbnail_loader(request: Request) -> ThumbnailLoader:
    """Get the application's thumbnail loader via dependency injection."""
    loader = getattr(request.app.state, "thumbnails", None)
    if loader is None:
        raise ConfigurationError("Thumbnail loader is not initialized; the application lifespan has not run")
    return loader
