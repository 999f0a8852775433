"""Labels shown on photo cards."""

from datetime import datetime

from photofeed.models import DisplayRecord

UNTITLED = "Untitled"
DEFAULT_ATTRIBUTION = "NASA"


def date_label(date_created: str | None) -> str:
    """Format ``2023-01-01T12:00:00Z`` as ``Jan 1, 2023``; otherwise fall back to ``2023/01/01``."""
    if not date_created:
        return ""
    try:
        parsed = datetime.strptime(date_created, "%Y-%m-%dT%H:%M:%SZ")
    except ValueError:
        return date_created[:10].replace("-", "/")
    return f"{parsed:%b} {parsed.day}, {parsed.year}"


def card_context(record: DisplayRecord, slot: int) -> dict[str, str]:
    """Template context for one grid card."""
    return {
        "slot": f"cell-{slot}",
        "title": record.title or UNTITLED,
        "attribution": record.attribution or DEFAULT_ATTRIBUTION,
        "date": date_label(record.date_created),
        "image_url": record.image_url,
        "description": record.description or "",
    }
