import asyncio
from datetime import date, timedelta
from types import SimpleNamespace

import pytest
from google.cloud import exceptions as gexc

from spa_admin.domain.bookings.repository import BookingRepository
from spa_admin.domain.staff.repository import StaffRepository
from spa_admin.fetcher import (
    CachedListFetcher,
    CancellationToken,
    InflightRequests,
    RequestCancelledError,
    request_cancellation,
)

NOW = 1_760_000_000_000
SIX_MINUTES = 6 * 60 * 1000
TODAY = date(2026, 10, 19)


class Clock:
    def __init__(self, now=NOW):
        self.now = now

    def __call__(self):
        return self.now


def seed_bookings(firestore_client, count=25):
    for i in range(count):
        day = TODAY + timedelta(days=i % 10)
        firestore_client.seed(
            "bookings",
            f"b{i:02d}",
            {"customerName": f"Guest {i}", "date": day.isoformat(), "time": "10:00", "status": "pending"},
        )


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def fetcher(firestore_client, mirror, clock):
    return CachedListFetcher(BookingRepository(firestore_client), mirror, clock=clock)


@pytest.fixture
def upcoming():
    return BookingRepository.tab_query("upcoming", TODAY)


def test_page_is_bounded_and_count_covers_it(firestore_client, fetcher, upcoming):
    seed_bookings(firestore_client)

    page = asyncio.run(fetcher.fetch(upcoming, page_size=10))

    assert len(page.items) == 10
    assert page.total_count == 25
    assert page.total_count >= len(page.items)
    assert page.last_cursor is not None
    assert not page.from_cache


def test_second_first_page_is_served_from_mirror(firestore_client, fetcher, upcoming):
    seed_bookings(firestore_client)

    first = asyncio.run(fetcher.fetch(upcoming, page_size=10))
    reads = firestore_client.reads()
    second = asyncio.run(fetcher.fetch(upcoming, page_size=10))

    assert firestore_client.reads() == reads
    assert second.from_cache
    assert second.last_cursor is None
    assert second.total_count == first.total_count
    assert [b["id"] for b in second.items] == [b["id"] for b in first.items]


def test_cursor_walk_visits_every_record_once(firestore_client, fetcher, upcoming):
    seed_bookings(firestore_client)

    seen, cursor = [], None
    while True:
        page = asyncio.run(fetcher.fetch(upcoming, page_size=10, cursor=cursor))
        if not page.items:
            break
        seen.extend(b["id"] for b in page.items)
        cursor = page.last_cursor

    assert len(seen) == 25
    assert len(set(seen)) == 25
    dates = [firestore_client.store["bookings"][i]["date"] for i in seen]
    assert dates == sorted(dates)


def test_page_past_the_end_is_empty(firestore_client, fetcher, upcoming):
    seed_bookings(firestore_client, count=10)

    first = asyncio.run(fetcher.fetch(upcoming, page_size=10))
    beyond = asyncio.run(fetcher.fetch(upcoming, page_size=10, cursor=first.last_cursor))

    assert beyond.items == []
    assert beyond.last_cursor is None
    assert beyond.total_count == first.total_count


def test_deleted_anchor_resumes_at_next_record(firestore_client, fetcher):
    for i in range(6):
        firestore_client.seed("bookings", f"b{i}", {"customerName": "x", "date": f"2026-10-2{i}"})
    list_query = BookingRepository.tab_query("upcoming", TODAY)

    first = asyncio.run(fetcher.fetch(list_query, page_size=3))
    del firestore_client.store["bookings"]["b2"]
    second = asyncio.run(fetcher.fetch(list_query, page_size=3, cursor=first.last_cursor))

    assert [b["id"] for b in second.items] == ["b3", "b4", "b5"]


def test_refresh_always_goes_remote_and_overwrites(firestore_client, fetcher, upcoming):
    seed_bookings(firestore_client, count=5)
    asyncio.run(fetcher.fetch(upcoming, page_size=10))

    del firestore_client.store["bookings"]["b00"]
    reads = firestore_client.reads()
    page = asyncio.run(fetcher.fetch(upcoming, page_size=10, refresh=True))

    assert firestore_client.reads() > reads
    assert page.total_count == 4
    cached = asyncio.run(fetcher.fetch(upcoming, page_size=10))
    assert cached.from_cache
    assert "b00" not in [b["id"] for b in cached.items]


def test_stale_mirror_rows_are_bypassed(firestore_client, fetcher, mirror, clock, upcoming):
    seed_bookings(firestore_client, count=3)
    stale = clock.now - SIX_MINUTES
    mirror.write("bookings", [{"id": "ghost", "date": TODAY.isoformat()}], stale, scope=upcoming.scope)
    mirror.write_count("bookings", 1, stale, scope=upcoming.scope)

    page = asyncio.run(fetcher.fetch(upcoming, page_size=10))

    assert not page.from_cache
    assert firestore_client.reads("bookings") == 2
    assert "ghost" not in [b["id"] for b in page.items]
    assert "ghost" not in [r["id"] for r in mirror.read("bookings", upcoming.scope)]


def test_mirror_hit_expires_after_window(firestore_client, fetcher, clock, upcoming):
    seed_bookings(firestore_client, count=3)
    asyncio.run(fetcher.fetch(upcoming, page_size=10))

    clock.now += SIX_MINUTES
    reads = firestore_client.reads()
    page = asyncio.run(fetcher.fetch(upcoming, page_size=10))

    assert not page.from_cache
    assert firestore_client.reads() > reads


def test_concurrent_identical_requests_share_one_query(firestore_client, fetcher, upcoming):
    seed_bookings(firestore_client, count=5)

    async def both():
        return await asyncio.gather(
            fetcher.fetch(upcoming, page_size=10),
            fetcher.fetch(upcoming, page_size=10),
        )

    first, second = asyncio.run(both())

    assert [c for c in firestore_client.calls if c[0] == "stream"] == [("stream", "bookings")]
    assert first.items == second.items
    assert first.items is not second.items


def test_cancelled_caller_gets_no_result_but_mirror_is_written(
    firestore_client, fetcher, mirror, upcoming
):
    seed_bookings(firestore_client, count=3)
    token = CancellationToken()
    token.cancel()

    with pytest.raises(RequestCancelledError):
        asyncio.run(fetcher.fetch(upcoming, page_size=10, token=token))

    assert len(mirror.read("bookings", upcoming.scope)) == 3


def test_remote_failure_propagates_and_leaves_mirror_alone(firestore_client, fetcher, mirror, upcoming):
    seed_bookings(firestore_client, count=3)
    firestore_client.fail_with = gexc.ServiceUnavailable("firestore down")

    with pytest.raises(gexc.ServiceUnavailable):
        asyncio.run(fetcher.fetch(upcoming, page_size=10))

    assert mirror.read("bookings", upcoming.scope) == []
    assert mirror.read_count("bookings", upcoming.scope) is None


def test_page_size_must_be_positive(fetcher, upcoming):
    with pytest.raises(ValueError):
        asyncio.run(fetcher.fetch(upcoming, page_size=0))


def test_filtered_counts_are_real_aggregates(firestore_client, mirror, clock):
    staff = StaffRepository(firestore_client)
    for i, active in enumerate([True, True, False]):
        firestore_client.seed("staffs", f"s{i}", {"name": f"S{i}", "active": active, "createdAt": i})
    fetcher = CachedListFetcher(staff, mirror, clock=clock)

    inactive = asyncio.run(fetcher.fetch(staff.list_query(False), page_size=10))
    active = asyncio.run(fetcher.fetch(staff.list_query(True), page_size=1))

    assert inactive.total_count == 1
    assert active.total_count == 2
    assert len(active.items) == 1


def test_fetch_count_is_cached(firestore_client, fetcher, clock):
    calls = []

    async def counter():
        calls.append(1)
        return 42

    assert asyncio.run(fetcher.fetch_count("lowStock", counter)) == 42
    assert asyncio.run(fetcher.fetch_count("lowStock", counter)) == 42
    assert len(calls) == 1

    assert asyncio.run(fetcher.fetch_count("lowStock", counter, refresh=True)) == 42
    assert len(calls) == 2


def ids(page):
    return [b["id"] for b in page.items]


def test_later_page_leaves_first_page_in_mirror(firestore_client, fetcher, upcoming):
    seed_bookings(firestore_client, count=20)

    first = asyncio.run(fetcher.fetch(upcoming, page_size=10))
    asyncio.run(fetcher.fetch(upcoming, page_size=10, cursor=first.last_cursor))
    again = asyncio.run(fetcher.fetch(upcoming, page_size=10))

    assert again.from_cache
    assert ids(again) == ids(first)


def test_refreshed_later_page_leaves_first_page_in_mirror(firestore_client, fetcher, upcoming):
    seed_bookings(firestore_client, count=20)

    first = asyncio.run(fetcher.fetch(upcoming, page_size=10))
    second = asyncio.run(fetcher.fetch(upcoming, page_size=10, cursor=first.last_cursor, refresh=True))
    again = asyncio.run(fetcher.fetch(upcoming, page_size=10))

    assert not set(ids(first)) & set(ids(second))
    assert ids(again) == ids(first)


def test_later_page_after_expiry_does_not_become_first_page(firestore_client, fetcher, clock, upcoming):
    seed_bookings(firestore_client, count=20)

    first = asyncio.run(fetcher.fetch(upcoming, page_size=10))
    clock.now += SIX_MINUTES
    second = asyncio.run(fetcher.fetch(upcoming, page_size=10, cursor=first.last_cursor))
    again = asyncio.run(fetcher.fetch(upcoming, page_size=10))

    assert not again.from_cache
    assert ids(again) == ids(first)
    assert not set(ids(again)) & set(ids(second))


def test_mirror_with_fewer_rows_than_page_goes_remote(firestore_client, fetcher, upcoming):
    seed_bookings(firestore_client, count=10)

    asyncio.run(fetcher.fetch(upcoming, page_size=3))
    larger = asyncio.run(fetcher.fetch(upcoming, page_size=5))
    cached = asyncio.run(fetcher.fetch(upcoming, page_size=5))

    assert not larger.from_cache
    assert len(larger.items) == 5
    assert larger.last_cursor is not None
    assert cached.from_cache
    assert ids(cached) == ids(larger)


def test_short_list_is_still_served_from_mirror(firestore_client, fetcher, upcoming):
    seed_bookings(firestore_client, count=2)

    asyncio.run(fetcher.fetch(upcoming, page_size=10))
    page = asyncio.run(fetcher.fetch(upcoming, page_size=10))

    assert page.from_cache
    assert len(page.items) == 2


def test_inflight_entry_released_after_caller_cancelled():
    inflight = InflightRequests()

    async def scenario():
        gate = asyncio.Event()

        async def slow_query():
            await gate.wait()
            return "rows"

        caller = asyncio.ensure_future(inflight.run("bookings", slow_query))
        await asyncio.sleep(0)
        assert len(inflight) == 1

        caller.cancel()
        with pytest.raises(asyncio.CancelledError):
            await caller

        gate.set()
        for _ in range(5):
            await asyncio.sleep(0)
        return len(inflight)

    assert asyncio.run(scenario()) == 0


def test_inflight_entry_released_after_failure():
    inflight = InflightRequests()

    async def failing_query():
        raise gexc.ServiceUnavailable("firestore down")

    async def scenario():
        with pytest.raises(gexc.ServiceUnavailable):
            await inflight.run("bookings", failing_query)
        await asyncio.sleep(0)
        return len(inflight)

    assert asyncio.run(scenario()) == 0


class FakeRequest:
    def __init__(self, disconnected):
        self.disconnected = disconnected
        self.url = SimpleNamespace(path="/api/bookings")

    async def is_disconnected(self):
        return self.disconnected


def watch(request):
    async def scenario():
        dependency = request_cancellation(request)
        token = await dependency.__anext__()
        await asyncio.sleep(0.01)
        cancelled = token.cancelled
        await dependency.aclose()
        return cancelled

    return asyncio.run(scenario())


def test_client_disconnect_cancels_request_token():
    assert watch(FakeRequest(disconnected=True))


def test_connected_client_keeps_request_token_live():
    assert not watch(FakeRequest(disconnected=False))
