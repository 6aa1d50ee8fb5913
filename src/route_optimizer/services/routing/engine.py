"""Route optimization orchestration: validate, resolve, price, sequence, assemble."""

from __future__ import annotations

import enum
import logging
from typing import Optional, Sequence

from ...models.domain import RouteResult
from .assembler import assemble
from .errors import InsufficientInput, RoutingError
from .matrix import CostMatrixBuilder, PairwiseCostProvider
from .resolver import WaypointResolver
from .sequencer import sequence

GENERIC_FAILURE_MESSAGE = "An unexpected error occurred while optimizing the route."

logger = logging.getLogger(__name__)


class OptimizationStage(str, enum.Enum):
    RECEIVED = "received"
    VALIDATED = "validated"
    MATRIX_BUILT = "matrix_built"
    SEQUENCED = "sequenced"
    ASSEMBLED = "assembled"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


def prepare_labels(locations: Sequence[str], starting_point: Optional[str] = None) -> list[str]:
    """Trim inputs, drop blanks and put the origin first.

    A non-blank ``starting_point`` becomes the origin and every location is
    a stop; otherwise the first non-blank location is the origin.
    """
    labels = [location.strip() for location in locations if location and location.strip()]
    if len(labels) < 2:
        raise InsufficientInput("At least 2 valid addresses are required for route optimization.")
    start = starting_point.strip() if starting_point else ""
    if start:
        labels.insert(0, start)
    return labels


class RouteOptimizationEngine:
    def __init__(
        self,
        provider: PairwiseCostProvider,
        *,
        resolver: WaypointResolver | None = None,
        max_parallel_requests: int = 8,
        close_loop_default: bool = True,
    ) -> None:
        self.resolver = resolver or WaypointResolver()
        self.builder = CostMatrixBuilder(provider, max_parallel_requests=max_parallel_requests)
        self.close_loop_default = close_loop_default

    async def optimize(
        self,
        locations: Sequence[str],
        starting_point: Optional[str] = None,
        close_loop: Optional[bool] = None,
    ) -> RouteResult:
        """Return an ordered route with totals, or a result carrying only an error.

        Routing failures and unexpected exceptions are both converted; only
        cancellation propagates.
        """
        stage = OptimizationStage.RECEIVED
        close_loop = self.close_loop_default if close_loop is None else close_loop
        try:
            labels = prepare_labels(locations, starting_point)
            waypoints = self.resolver.resolve_waypoints(labels)
            stage = self._advance(stage, OptimizationStage.VALIDATED)

            matrix = await self.builder.build(waypoints)
            stage = self._advance(stage, OptimizationStage.MATRIX_BUILT)

            origin, *candidates = [waypoint.index for waypoint in waypoints]
            route = sequence(origin, candidates, matrix, close_loop=close_loop)
            stage = self._advance(stage, OptimizationStage.SEQUENCED)

            result = assemble(route, matrix, waypoints)
            stage = self._advance(stage, OptimizationStage.ASSEMBLED)
        except RoutingError as exc:
            logger.warning(f"Route optimization failed at stage '{stage.value}' ({exc.code}): {exc}")
            return RouteResult.failure(str(exc), exc.code)
        except Exception:
            logger.exception(f"Unexpected error during route optimization at stage '{stage.value}'")
            return RouteResult.failure(GENERIC_FAILURE_MESSAGE, "internal_error")

        self._advance(stage, OptimizationStage.SUCCEEDED)
        logger.info(
            f"Optimized {len(result.ordered_addresses)} stops: "
            f"{result.total_distance_km:.2f} km, {result.total_duration_seconds}s"
        )
        return result

    @staticmethod
    def _advance(current: OptimizationStage, target: OptimizationStage) -> OptimizationStage:
        logger.debug(f"Optimization stage {current.value} -> {target.value}")
        return target
