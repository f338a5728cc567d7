"""
Last-query-wins coordination for type-ahead search.
"""
from __future__ import annotations

import asyncio
from typing import List, Optional

from domain.models import Coordinate, SearchResult
from services.geo_ranker import rank
from services.place_search import PlaceSearchAdapter


class SearchSession:
    """
    Tracks one caller's stream of queries.

    Each submit() takes a new revision and cancels whatever search is still in
    flight. A search only commits to `latest` if its revision is still current
    when it completes; otherwise submit() returns None.
    """

    def __init__(self, adapter: PlaceSearchAdapter):
        self.adapter = adapter
        self.revision = 0
        self.latest: List[SearchResult] = []
        self._inflight: Optional[asyncio.Task] = None

    async def _run(self, query: str, origin: Optional[Coordinate]) -> List[SearchResult]:
        results = await self.adapter.search(query, origin)
        return rank(results, origin)

    async def submit(self, query: str, origin: Optional[Coordinate] = None) -> Optional[List[SearchResult]]:
        self.revision += 1
        revision = self.revision
        if self._inflight is not None and not self._inflight.done():
            self._inflight.cancel()

        task = asyncio.ensure_future(self._run(query, origin))
        self._inflight = task
        try:
            results = await task
        except asyncio.CancelledError:
            if task.cancelled() and revision != self.revision:
                return None
            raise
        finally:
            if self._inflight is task:
                self._inflight = None

        if revision != self.revision:
            return None
        self.latest = results
        return results

    def cancel(self) -> None:
        """Abandon any in-flight search; its results will be discarded."""
        self.revision += 1
        if self._inflight is not None and not self._inflight.done():
            self._inflight.cancel()
