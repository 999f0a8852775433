"""Pydantic models for data structures."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class ItemData(BaseModel):
    """Metadata block of a search result item."""

    model_config = ConfigDict(extra="ignore")

    title: str
    description: str | None = None
    date_created: str | None = Field(default=None, description="ISO-8601-like, not validated")
    center: str | None = Field(default=None, description="NASA center, shown as attribution")


class ItemLink(BaseModel):
    """Media link of a search result item."""

    model_config = ConfigDict(extra="ignore")

    href: str
    rel: str | None = None
    render: str | None = None


class Item(BaseModel):
    """One search result; only the first data entry and first link are used."""

    model_config = ConfigDict(extra="ignore")

    data: list[ItemData]
    links: list[ItemLink] | None = None


class Collection(BaseModel):
    model_config = ConfigDict(extra="ignore")

    items: list[Item]


class SearchEnvelope(BaseModel):
    """Top-level search response."""

    model_config = ConfigDict(extra="ignore")

    collection: Collection


class DisplayRecord(BaseModel):
    """Normalized photo record for display."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    title: str | None = None
    description: str | None = None
    image_url: str = Field(default="", alias="imageURL")
    date_created: str | None = Field(default=None, alias="dateCreated")
    attribution: str | None = None


class FetchedBatch(BaseModel):
    """Records produced by one fetch, with the term that produced them."""

    model_config = ConfigDict(frozen=True)

    term: str
    records: tuple[DisplayRecord, ...] = ()


class FeedUpdate(BaseModel):
    """Outcome of one load request against the feed."""

    status: Literal["appended", "refreshed", "skipped", "failed"]
    term: str | None = None
    added: int = 0
    total: int = 0
    error: str | None = Field(default=None, description="Fetch error kind when status is 'failed'")
    message: str | None = None

    @property
    def ok(self) -> bool:
        return self.status in ("appended", "refreshed")


class FeedState(BaseModel):
    """Current feed contents."""

    records: list[DisplayRecord] = Field(default_factory=list)
    total: int = 0
    in_flight: bool = False
    next_term: str


class Thumbnail(BaseModel):
    """Raw thumbnail bytes as fetched; decoding is left to the client."""

    model_config = ConfigDict(frozen=True)

    slot: str
    url: str
    content_type: str
    content: bytes
