"""Pairwise cost matrix and its concurrent builder."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Iterator, Mapping, Protocol, Sequence

from ...models.domain import Edge, Waypoint

logger = logging.getLogger(__name__)


class PairwiseCostProvider(Protocol):
    """Anything that can price a single ordered pair of waypoints."""

    async def cost(self, origin: Waypoint, destination: Waypoint) -> Edge:
        ...


class CostMatrix(Mapping[tuple[int, int], Edge]):
    """Read-only ``(origin index, destination index) -> Edge`` lookup.

    Directional: ``(a, b)`` and ``(b, a)`` are separate entries.
    """

    def __init__(self, edges: Mapping[tuple[int, int], Edge] | None = None) -> None:
        self._edges: dict[tuple[int, int], Edge] = {}
        for key, edge in (edges or {}).items():
            origin, destination = key
            if origin == destination:
                raise ValueError(f"Self-pair ({origin}, {destination}) is not allowed in a cost matrix.")
            if (edge.origin, edge.destination) != key:
                raise ValueError(f"Edge {edge.origin}->{edge.destination} stored under key {key}.")
            self._edges[key] = edge

    def __getitem__(self, key: tuple[int, int]) -> Edge:
        return self._edges[key]

    def __iter__(self) -> Iterator[tuple[int, int]]:
        return iter(self._edges)

    def __len__(self) -> int:
        return len(self._edges)

    def edge(self, origin: int, destination: int) -> Edge:
        try:
            return self._edges[(origin, destination)]
        except KeyError:
            raise KeyError(f"No edge {origin}->{destination} in cost matrix.") from None

    def __repr__(self) -> str:
        return f"CostMatrix({len(self._edges)} edges)"


class CostMatrixBuilder:
    """Prices every ordered pair of waypoints, at most ``max_parallel_requests`` at a time."""

    def __init__(self, provider: PairwiseCostProvider, max_parallel_requests: int = 8) -> None:
        if max_parallel_requests < 1:
            raise ValueError("max_parallel_requests must be at least 1.")
        self.provider = provider
        self.max_parallel_requests = max_parallel_requests

    async def build(self, waypoints: Sequence[Waypoint]) -> CostMatrix:
        """Return the complete matrix or raise the first failure.

        Outstanding requests are cancelled as soon as one pair fails, or when
        this coroutine is itself cancelled.
        """
        pairs = [
            (origin, destination)
            for origin in waypoints
            for destination in waypoints
            if origin.index != destination.index
        ]
        if not pairs:
            return CostMatrix()

        start_time = time.perf_counter()
        logger.info(
            f"Building cost matrix: {len(waypoints)} waypoints, {len(pairs)} pair requests "
            f"(max {self.max_parallel_requests} concurrent)"
        )

        semaphore = asyncio.Semaphore(self.max_parallel_requests)

        async def price(origin: Waypoint, destination: Waypoint) -> Edge:
            async with semaphore:
                return await self.provider.cost(origin, destination)

        tasks = [asyncio.ensure_future(price(origin, destination)) for origin, destination in pairs]
        edges: dict[tuple[int, int], Edge] = {}
        try:
            pending = set(tasks)
            while pending:
                done, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_EXCEPTION)
                for task in done:
                    if task.exception() is not None:
                        raise task.exception()
                    edge = task.result()
                    edges[(edge.origin, edge.destination)] = edge
        finally:
            outstanding = [task for task in tasks if not task.done()]
            for task in outstanding:
                task.cancel()
            if outstanding:
                logger.debug(f"Cancelling {len(outstanding)} outstanding pair requests")
            await asyncio.gather(*tasks, return_exceptions=True)

        elapsed = time.perf_counter() - start_time
        logger.info(f"Cost matrix complete: {len(edges)} edges in {elapsed:.2f}s")
        return CostMatrix(edges)
