# jobboard/services/live_query.py
"""
Live queries over a Mongo collection.

A ``LiveQuery`` re-delivers the *full* matching result set to its subscriber
every time the underlying data changes. Two delivery modes are supported:

- ``change_stream``: a MongoDB change stream on the collection wakes the
  query up; every matching change triggers a re-query. Requires a replica set.
- ``poll``: the query is re-run every ``LIVE_QUERY_POLL_INTERVAL`` seconds and
  the snapshot is delivered only when it differs from the last one delivered.

The first snapshot is always delivered from ``start()``. Snapshots are
delivered on the caller's event loop; ``stop()`` cancels the background task.
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Tuple

from jobboard.core.config import settings
from jobboard.db.mongo import get_db

logger = logging.getLogger(__name__)

Snapshot = List[Dict[str, Any]]
SnapshotHandler = Callable[[Snapshot], Awaitable[None]]

MODES = ("poll", "change_stream")


class LiveQuery:
    def __init__(self, collection: str, query: Dict[str, Any], sort: Sequence[Tuple[str, int]],
                 on_snapshot: SnapshotHandler, mode: Optional[str] = None,
                 poll_interval: Optional[float] = None):
        self.collection = collection
        self.query = query
        self.sort = list(sort)
        self.on_snapshot = on_snapshot
        self.mode = mode or settings.LIVE_QUERY_MODE
        if self.mode not in MODES:
            raise ValueError(f"unknown live query mode {self.mode!r}")
        self.poll_interval = poll_interval if poll_interval is not None else settings.LIVE_QUERY_POLL_INTERVAL
        self._last: Optional[Snapshot] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def fetch(self) -> Snapshot:
        db = get_db()
        cur = db[self.collection].find(self.query).sort(self.sort)
        return [d async for d in cur]

    async def refresh(self, force: bool = False) -> bool:
        """Re-run the query; deliver when forced or changed. Returns True if delivered."""
        docs = await self.fetch()
        if not force and docs == self._last:
            return False
        self._last = docs
        try:
            await self.on_snapshot(docs)
        except Exception:
            # a failing subscriber must not tear down the subscription
            logger.exception("Snapshot handler failed for %s %s", self.collection, self.query)
        return True

    async def start(self) -> None:
        await self.refresh(force=True)
        self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _run(self) -> None:
        while True:
            try:
                if self.mode == "change_stream":
                    await self._watch()
                else:
                    await asyncio.sleep(self.poll_interval)
                    await self.refresh()
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Live query on %s failed, retrying shortly", self.collection)
                await asyncio.sleep(max(self.poll_interval, 1.0))

    def _change_pipeline(self) -> List[Dict[str, Any]]:
        match = {f"fullDocument.{k}": v for k, v in self.query.items()}
        return [{"$match": {"$or": [match, {"operationType": "delete"}]}}]

    async def _watch(self) -> None:
        db = get_db()
        async with db[self.collection].watch(self._change_pipeline(), full_document="updateLookup") as stream:
            async for _change in stream:
                await self.refresh(force=True)
