"""Fetch one batch of photos for the next search term."""

import asyncio
import logging

from pydantic import ValidationError

from photofeed.exceptions import MalformedResponseError
from photofeed.models import FetchedBatch, SearchEnvelope
from photofeed.nasa_client import NasaImagesClient
from photofeed.normalize import envelope_to_records
from photofeed.rotation import SearchTermRotator

logger = logging.getLogger(__name__)

MEDIA_TYPE = "image"
PAGE_SIZE = 25


def decode_envelope(body: bytes | str) -> SearchEnvelope:
    """
    Decode a search response body.

    Raises:
        MalformedResponseError: On invalid JSON or a schema violation
    """
    try:
        return SearchEnvelope.model_validate_json(body)
    except ValidationError as e:
        raise MalformedResponseError(f"Unexpected NASA API response shape: {e.error_count()} error(s)") from e


class PhotoFeedFetcher:
    """
    Perform one remote fetch per call for the rotator's next term.

    The page size and media type never change: successive batches are
    different topics rather than further pages of one result set. Failures
    are raised once, with no retry and no caching.
    """

    def __init__(self, client: NasaImagesClient, rotator: SearchTermRotator):
        self.client = client
        self.rotator = rotator

    async def fetch_batch(self) -> FetchedBatch:
        term = self.rotator.next_term()
        body = await self.client.search(term, media_type=MEDIA_TYPE, page_size=PAGE_SIZE)
        envelope = await asyncio.to_thread(decode_envelope, body)
        records = envelope_to_records(envelope)
        logger.info(f"Fetched {len(records)} records for term {term!r}", extra={"term": term})
        return FetchedBatch(term=term, records=records)
