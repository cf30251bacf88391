"""
List-fetch orchestrator.

Every list endpoint goes through CachedListFetcher.fetch, which decides
between the local mirror and Firestore:

1. Page 1 without refresh: serve from the mirror when the scope's rows and
   count are younger than CACHE_DURATION_MS and cover the requested page
   (lastCursor is then None).
2. Otherwise: query Firestore, expire stale mirror rows, write the count
   back, return the remote result. Only page 1 replaces the scope's rows, so
   the mirror never holds a later page in place of the first.
3. Refresh skips the mirror check.

Identical in-flight requests share one remote call. Errors from Firestore
propagate unchanged; nothing here retries.
"""

import asyncio
import logging
import time
from typing import Awaitable, Callable, Hashable, Optional

from fastapi import Request

from .accessor import CollectionAccessor
from .config import CACHE_DURATION_MS, DEFAULT_PAGE_SIZE
from .mirror import LocalMirror
from .pagination import ListPage, ListQuery
from .shared.serialization import sort_key

logger = logging.getLogger(__name__)

DISCONNECT_POLL_INTERVAL = 0.25  # seconds


def now_ms() -> int:
    return int(time.time() * 1000)


class RequestCancelledError(Exception):
    """The caller's cancellation token fired before the response arrived"""


class CancellationToken:
    """Tied to a caller's lifetime; a cancelled token drops late results"""

    def __init__(self):
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class InflightRequests:
    """Shares one pending task among concurrent callers with the same key"""

    def __init__(self):
        self._pending: dict[Hashable, asyncio.Future] = {}

    def __len__(self):
        return len(self._pending)

    async def run(self, key: Hashable, factory: Callable[[], Awaitable]):
        future = self._pending.get(key)
        if future is not None and not future.done():
            logger.debug(f"🔗 Joining in-flight request {key}")
            return await asyncio.shield(future)

        future = asyncio.ensure_future(factory())
        self._pending[key] = future
        future.add_done_callback(lambda done: self._release(key, done))
        return await asyncio.shield(future)

    def _release(self, key: Hashable, future: asyncio.Future) -> None:
        if self._pending.get(key) is future:
            del self._pending[key]


# Process-wide registry used by the HTTP layer
inflight_requests = InflightRequests()


def get_inflight() -> InflightRequests:
    return inflight_requests


async def request_cancellation(request: Request):
    """
    Cancellation token for one HTTP request. It fires when the client
    disconnects before the response is ready.
    """
    token = CancellationToken()

    async def watch_disconnect():
        while not token.cancelled:
            if await request.is_disconnected():
                logger.debug(f"🚫 Client left {request.url.path}")
                token.cancel()
                return
            await asyncio.sleep(DISCONNECT_POLL_INTERVAL)

    watcher = asyncio.ensure_future(watch_disconnect())
    try:
        yield token
    finally:
        watcher.cancel()


class CachedListFetcher:
    """Cache-vs-remote decision for one collection"""

    def __init__(
        self,
        accessor: CollectionAccessor,
        mirror: LocalMirror,
        inflight: Optional[InflightRequests] = None,
        clock: Callable[[], int] = now_ms,
        cache_duration_ms: int = CACHE_DURATION_MS,
    ):
        self.accessor = accessor
        self.mirror = mirror
        self.inflight = inflight or InflightRequests()
        self.clock = clock
        self.cache_duration_ms = cache_duration_ms

    @property
    def entity(self) -> str:
        return self.accessor.collection_name

    def _is_fresh(self, timestamp: int, now: int) -> bool:
        return now - timestamp < self.cache_duration_ms

    def _from_mirror(self, list_query: ListQuery, page_size: int) -> Optional[ListPage]:
        scope = list_query.scope
        now = self.clock()

        cached_count = self.mirror.read_count(self.entity, scope)
        if cached_count is None or not self._is_fresh(cached_count.timestamp, now):
            logger.debug(f"❌ Mirror MISS: {self.entity}[{scope}] (no fresh count)")
            return None

        rows = self.mirror.read(self.entity, scope)
        if not rows:
            logger.debug(f"❌ Mirror MISS: {self.entity}[{scope}] (empty)")
            return None
        if len(rows) < min(page_size, cached_count.count):
            logger.debug(f"❌ Mirror MISS: {self.entity}[{scope}] ({len(rows)} rows, page needs more)")
            return None

        oldest = min(row["timestamp"] for row in rows)
        if not self._is_fresh(oldest, now):
            logger.debug(f"❌ Mirror MISS: {self.entity}[{scope}] (stale)")
            return None

        records = [{k: v for k, v in row.items() if k != "timestamp"} for row in rows]
        records.sort(
            key=lambda r: (sort_key(r.get(list_query.order_field)), str(r["id"])),
            reverse=list_query.descending,
        )
        logger.debug(f"✅ Mirror HIT: {self.entity}[{scope}] ({len(records)} rows)")
        return ListPage(
            items=records[:page_size],
            last_cursor=None,
            total_count=cached_count.count,
            from_cache=True,
        )

    async def _from_remote(
        self, list_query: ListQuery, page_size: int, cursor: Optional[str], refresh: bool
    ) -> ListPage:
        page = await self.accessor.fetch_page(list_query, page_size, cursor)
        now = self.clock()
        scope = list_query.scope

        if not refresh:
            self.mirror.expire(self.entity, now - self.cache_duration_ms)
        if cursor is None:
            # The scope holds exactly the latest first page
            self.mirror.clear_scope(self.entity, scope)
            self.mirror.write(self.entity, page.items, now, scope=scope)
        self.mirror.write_count(self.entity, page.total_count, now, scope=scope)
        return page

    async def fetch(
        self,
        list_query: ListQuery,
        page_size: int = DEFAULT_PAGE_SIZE,
        cursor: Optional[str] = None,
        refresh: bool = False,
        token: Optional[CancellationToken] = None,
    ) -> ListPage:
        """Return one page of the list, from the mirror when fresh"""
        if page_size < 1:
            raise ValueError("page_size must be a positive integer")

        if cursor is None and not refresh:
            cached = self._from_mirror(list_query, page_size)
            if cached is not None:
                return cached

        key = (self.entity, list_query.scope, list_query.order_field, list_query.descending,
               cursor, page_size, refresh)
        page = await self.inflight.run(
            key, lambda: self._from_remote(list_query, page_size, cursor, refresh)
        )

        if token is not None and token.cancelled:
            logger.debug(f"🚫 Dropping {self.entity} result for a cancelled caller")
            raise RequestCancelledError(self.entity)

        # Joined callers must not share one mutable page
        return ListPage(
            items=list(page.items),
            last_cursor=page.last_cursor,
            total_count=page.total_count,
        )

    async def fetch_count(
        self,
        scope: str,
        counter: Callable[[], Awaitable[int]],
        refresh: bool = False,
    ) -> int:
        """Cached aggregate count; `counter` runs on a miss"""
        now = self.clock()
        if not refresh:
            cached_count = self.mirror.read_count(self.entity, scope)
            if cached_count is not None and self._is_fresh(cached_count.timestamp, now):
                logger.debug(f"✅ Mirror count HIT: {self.entity}[{scope}] = {cached_count.count}")
                return cached_count.count

        count = await self.inflight.run((self.entity, "count", scope), counter)
        self.mirror.write_count(self.entity, count, self.clock(), scope=scope)
        return count
