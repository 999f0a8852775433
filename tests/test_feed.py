"""Tests for accumulating batches into the feed."""

import asyncio
import logging

import httpx
import pytest

from conftest import make_payload
from photofeed.feed import FAILURE_NOTICE
from photofeed.models import FeedUpdate


async def _wait_for(predicate, attempts: int = 200) -> None:
    for _ in range(attempts):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition was never met")


@pytest.mark.asyncio
async def test_append_concatenates_in_order(make_feed):
    """Given [a, b] and a new batch [c, d], append yields [a, b, c, d]."""
    feed = make_feed()

    first = await feed.load()
    second = await feed.load()

    assert first.status == "appended"
    assert second.status == "appended"
    assert second.term == "mars"
    assert second.added == 2
    assert second.total == 4
    assert [r.title for r in feed.records] == ["space-0", "space-1", "mars-0", "mars-1"]


@pytest.mark.asyncio
async def test_refresh_replaces_collection(make_feed):
    """Given [a, b] and a new batch [c, d], refresh yields [c, d]."""
    feed = make_feed()
    await feed.load_more()

    update = await feed.refresh()

    assert update.status == "refreshed"
    assert update.total == 2
    assert [r.title for r in feed.records] == ["mars-0", "mars-1"]


@pytest.mark.asyncio
async def test_refresh_keeps_rotating_terms(make_feed, requests_seen):
    feed = make_feed(terms=["space", "mars", "moon"])
    await feed.load_more()
    await feed.refresh()
    await feed.refresh()
    assert [r.url.params["q"] for r in requests_seen] == ["space", "mars", "moon"]


@pytest.mark.asyncio
async def test_duplicate_records_are_kept(make_feed):
    feed = make_feed(terms=["space"])
    await feed.load_more()
    await feed.load_more()
    assert [r.title for r in feed.records] == ["space-0", "space-1", "space-0", "space-1"]


@pytest.mark.asyncio
async def test_failed_load_leaves_collection_unchanged(make_feed):
    responses = iter(
        [
            httpx.Response(200, json=make_payload("space", 2)),
            httpx.Response(200, content=b'{"collection": {"items": [{"data": '),
        ]
    )
    feed = make_feed(lambda request: next(responses))
    await feed.load_more()
    before = feed.snapshot()

    update = await feed.load_more()

    assert update.status == "failed"
    assert update.error == "malformed_response"
    assert update.message == FAILURE_NOTICE
    assert update.added == 0
    assert not update.ok
    assert feed.snapshot() == before
    assert not feed.in_flight


@pytest.mark.asyncio
async def test_failed_refresh_keeps_existing_records(make_feed):
    responses = iter([httpx.Response(200, json=make_payload("space", 3)), httpx.Response(500)])
    feed = make_feed(lambda request: next(responses))
    await feed.load_more()

    update = await feed.refresh()

    assert update.status == "failed"
    assert update.error == "transport_failure"
    assert len(feed) == 3


@pytest.mark.asyncio
async def test_empty_batch_is_success(make_feed):
    feed = make_feed(lambda request: httpx.Response(200, json={"collection": {"items": []}}))
    update = await feed.load_more()
    assert update.status == "appended"
    assert update.added == 0
    assert feed.records == []


@pytest.mark.asyncio
async def test_second_load_while_in_flight_is_ignored(make_feed, requests_seen):
    """A load requested during a pending load issues no request and does not disturb it."""
    release = asyncio.Event()

    async def slow_handler(request):
        await release.wait()
        return httpx.Response(200, json=make_payload(request.url.params["q"], 2))

    feed = make_feed(slow_handler)
    pending = asyncio.create_task(feed.load_more())
    await _wait_for(lambda: len(requests_seen) == 1)
    assert feed.in_flight

    skipped = await feed.load_more()
    skipped_refresh = await feed.refresh()

    assert skipped.status == "skipped"
    assert skipped_refresh.status == "skipped"
    assert len(requests_seen) == 1

    release.set()
    first = await pending

    assert first.status == "appended"
    assert first.term == "space"
    assert [r.title for r in feed.records] == ["space-0", "space-1"]
    assert feed.fetcher.rotator.cursor == 1
    assert not feed.in_flight


@pytest.mark.asyncio
async def test_unexpected_errors_propagate_and_clear_in_flight(make_feed):
    def broken(request):
        raise RuntimeError("handler bug")

    feed = make_feed(broken)

    with pytest.raises(RuntimeError):
        await feed.load_more()

    assert not feed.in_flight


@pytest.mark.asyncio
async def test_listeners_run_after_mutation(make_feed):
    feed = make_feed()
    seen: list[tuple[str, int]] = []
    feed.subscribe(lambda update: seen.append((update.status, len(feed))))

    await feed.load_more()
    await feed.refresh()

    assert seen == [("appended", 2), ("refreshed", 2)]


@pytest.mark.asyncio
async def test_failing_listener_does_not_break_feed(make_feed):
    feed = make_feed()
    received: list[FeedUpdate] = []

    def broken(update):
        raise ValueError("listener bug")

    feed.subscribe(broken)
    feed.subscribe(received.append)

    update = await feed.load_more()

    assert update.ok
    assert received == [update]


@pytest.mark.asyncio
async def test_unsubscribe_stops_delivery(make_feed):
    feed = make_feed()
    received: list[FeedUpdate] = []
    unsubscribe = feed.subscribe(received.append)

    await feed.load_more()
    unsubscribe()
    await feed.load_more()

    assert len(received) == 1


@pytest.mark.asyncio
async def test_should_load_more_near_end(make_feed):
    feed = make_feed(lambda request: httpx.Response(200, json=make_payload("space", 10)))
    assert not feed.should_load_more(0)

    await feed.load_more()

    assert feed.should_load_more(9, prefetch=0)
    assert not feed.should_load_more(8, prefetch=0)
    assert feed.should_load_more(7, prefetch=2)
    assert not feed.should_load_more(6, prefetch=2)
    assert feed.should_load_more(4)


def test_state_reports_next_term(make_feed):
    feed = make_feed(terms=["galaxy", "comet"])
    state = feed.state()
    assert state.next_term == "galaxy"
    assert state.total == 0
    assert state.in_flight is False


@pytest.mark.asyncio
async def test_load_logs_carry_term_and_status(make_feed, caplog):
    responses = iter(
        [
            httpx.Response(200, json=make_payload("space", 2)),
            httpx.Response(503),
        ]
    )
    feed = make_feed(lambda request: next(responses))

    with caplog.at_level(logging.INFO, logger="photofeed.feed"):
        await feed.load_more()
        await feed.load_more()

    records = [record for record in caplog.records if record.name == "photofeed.feed"]
    assert (records[0].term, records[0].feed_status) == ("space", "appended")
    assert (records[1].feed_status, records[1].error) == ("failed", "transport_failure")
