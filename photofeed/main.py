"""FastAPI application serving the NASA photo feed."""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import Annotated

from fastapi import Depends, FastAPI, Query, Request
from fastapi.responses import HTMLResponse, JSONResponse, Response
from jinja2 import Environment, FileSystemLoader, select_autoescape

from photofeed.config import get_settings
from photofeed.dependencies import get_feed, get_thumbnail_loader
from photofeed.exceptions import (
    ConfigurationError,
    PhotoFeedError,
    ThumbnailError,
    ThumbnailSupersededError,
    TransportFailureError,
)
from photofeed.feed import FAILURE_NOTICE, FeedAccumulator
from photofeed.fetcher import PhotoFeedFetcher
from photofeed.middleware import RequestLoggingMiddleware
from photofeed.models import FeedState, FeedUpdate
from photofeed.nasa_client import NasaImagesClient
from photofeed.presentation import card_context
from photofeed.rotation import SearchTermRotator
from photofeed.thumbnails import ThumbnailLoader
from photofeed.utils.logging import get_logger, setup_logging

settings = get_settings()
setup_logging(level=settings.log_level, json_format=settings.log_json, log_file=settings.log_file)
logger = get_logger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"

templates_env = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=select_autoescape(["html", "xml"]),
)

UPDATE_STATUS_CODES = {
    "appended": 200,
    "refreshed": 200,
    "skipped": 202,
    "failed": 502,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the client and feed once and share them for the application's lifetime."""
    client = NasaImagesClient(base_url=settings.nasa_base_url, timeout=settings.nasa_timeout)
    rotator = SearchTermRotator(settings.nasa_search_terms)
    app.state.nasa_client = client
    app.state.feed = FeedAccumulator(
        PhotoFeedFetcher(client, rotator),
        prefetch_distance=settings.feed_prefetch_distance,
    )
    app.state.thumbnails = ThumbnailLoader(client, allowed_hosts=settings.thumbnail_hosts)
    logger.info(f"Photo feed ready: {len(rotator.terms)} terms from {client.base_url}")
    try:
        yield
    finally:
        await app.state.thumbnails.aclose()
        await client.aclose()


app = FastAPI(
    title=settings.app_title,
    version=settings.app_version,
    description="Infinite NASA photo feed driven by a rotating image search",
    lifespan=lifespan,
)
app.add_middleware(RequestLoggingMiddleware)


@app.exception_handler(PhotoFeedError)
async def photo_feed_error_handler(request: Request, exc: PhotoFeedError):
    status_code = 500 if isinstance(exc, ConfigurationError) else 502
    return JSONResponse(
        status_code=status_code,
        content={"ok": False, "error": exc.kind, "detail": str(exc)},
    )


def _update_response(update: FeedUpdate) -> JSONResponse:
    return JSONResponse(
        status_code=UPDATE_STATUS_CODES[update.status],
        content=update.model_dump(),
    )


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "ok",
        "service": "photofeed",
        "version": settings.app_version,
    }


@app.get("/healthz")
async def healthz():
    """Liveness check."""
    return {"status": "ok", "version": settings.app_version}


@app.get("/", response_class=HTMLResponse)
async def feed_page(request: Request, feed: FeedAccumulator = Depends(get_feed)):
    """Grid of the current feed; the first visit triggers the initial load."""
    notice = None
    if not len(feed):
        update = await feed.load_more()
        if update.status == "failed":
            notice = update.message

    template = templates_env.get_template("feed.html")
    return HTMLResponse(
        content=template.render(
            title=settings.app_title,
            cards=[card_context(record, index) for index, record in enumerate(feed.snapshot())],
            notice=notice,
            prefetch=feed.prefetch_distance,
        )
    )


@app.get("/api/feed", response_model=FeedState)
async def get_feed_state(feed: FeedAccumulator = Depends(get_feed)):
    return feed.state()


@app.post("/api/feed/next", response_model=FeedUpdate)
async def load_next_batch(feed: FeedAccumulator = Depends(get_feed)):
    """Append the next batch to the feed."""
    return _update_response(await feed.load_more())


@app.post("/api/feed/refresh", response_model=FeedUpdate)
async def refresh_feed(feed: FeedAccumulator = Depends(get_feed)):
    """Replace the feed with a fresh batch."""
    return _update_response(await feed.refresh())


@app.get("/api/feed/should-load-more")
async def should_load_more(
    last_visible: Annotated[int, Query(ge=0, description="Index of the last visible card")],
    feed: FeedAccumulator = Depends(get_feed),
):
    return {"load_more": feed.should_load_more(last_visible), "total": len(feed)}


@app.get("/api/thumbnails/{slot}")
async def get_thumbnail(
    slot: str,
    url: Annotated[str, Query(description="Image URL to load into the slot")],
    loader: ThumbnailLoader = Depends(get_thumbnail_loader),
):
    """Load an image for a grid slot; a newer request for the same slot cancels this one."""
    try:
        thumbnail = await loader.load(slot, url)
    except ThumbnailSupersededError as e:
        return JSONResponse(status_code=409, content={"ok": False, "error": e.kind, "detail": str(e)})
    except ThumbnailError as e:
        return JSONResponse(status_code=422, content={"ok": False, "error": e.kind, "detail": str(e)})
    except TransportFailureError as e:
        return JSONResponse(
            status_code=502,
            content={"ok": False, "error": e.kind, "detail": FAILURE_NOTICE},
        )
    return Response(content=thumbnail.content, media_type=thumbnail.content_type)
