"""Normalize NASA search items to display records."""

from photofeed.models import DisplayRecord, Item, ItemData, ItemLink, SearchEnvelope


def _first_data(item: Item) -> ItemData | None:
    return item.data[0] if item.data else None


def _first_link(item: Item) -> ItemLink | None:
    return item.links[0] if item.links else None


def to_display_record(item: Item) -> DisplayRecord:
    """
    Map a search item to a display record.

    Total for any structurally valid item: missing data yields absent fields
    and a missing link yields an empty image URL.
    """
    data = _first_data(item)
    link = _first_link(item)
    return DisplayRecord(
        title=data.title if data else None,
        description=data.description if data else None,
        image_url=link.href if link else "",
        date_created=data.date_created if data else None,
        attribution=data.center if data else None,
    )


def envelope_to_records(envelope: SearchEnvelope) -> tuple[DisplayRecord, ...]:
    """Map every item of the envelope, preserving source order."""
    return tuple(to_display_record(item) for item in envelope.collection.items)
