"""View controller - keeps the displayed risk map in sync with the selected age weight"""

import asyncio
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Protocol, Sequence, Tuple

from riskmap.config import settings
from riskmap.domain.exceptions import FetchError
from riskmap.domain.figure import EMPTY_FIGURE, FigureDescription, build_figure
from riskmap.domain.models import ApplicantRecord
from riskmap.infrastructure.observability.logging import log_figure_rebuilt
from riskmap.infrastructure.observability.metrics import figure_points_gauge, stale_response_counter

logger = logging.getLogger(__name__)

# Weight the backend applies to the unweighted applicant listing
BASELINE_AGE_WEIGHT = 1.0


class RiskDataSource(Protocol):
    async def fetch_baseline(self) -> Sequence[ApplicantRecord]: ...

    async def fetch_scored(self, age_weight: float) -> Sequence[ApplicantRecord]: ...


class ViewStatus(str, Enum):
    IDLE = "idle"  # startup not yet requested
    LOADING = "loading"
    READY = "ready"
    EMPTY = "empty"  # latest response was an empty batch
    ERROR = "error"  # latest issued fetch failed


@dataclass(frozen=True)
class ViewSnapshot:
    """Read-only view of controller state for rendering surfaces"""

    records: Tuple[ApplicantRecord, ...]
    weight: float
    figure: FigureDescription
    status: ViewStatus
    last_error: Optional[Exception]


class ViewController:
    """
    Owns the (records, weight, figure) triple.

    Every fetch is stamped with a sequence number when issued. A response is
    committed only if no newer fetch was issued in the meantime, so the most
    recently requested weight always wins regardless of completion order.
    Weight changes are ignored by the network until a baseline batch is loaded.
    """

    def __init__(
        self,
        source: RiskDataSource,
        builder: Callable[[Sequence[ApplicantRecord], float], Optional[FigureDescription]] = build_figure,
        initial_weight: float | None = None,
    ):
        self.source = source
        self.builder = builder
        self._records: Tuple[ApplicantRecord, ...] = ()
        self._weight = settings.default_age_weight if initial_weight is None else initial_weight
        self._figure = EMPTY_FIGURE
        self._status = ViewStatus.IDLE
        self._last_error: Optional[Exception] = None
        self._issued = 0
        self._weight_task: Optional[asyncio.Task] = None

    @property
    def records(self) -> Tuple[ApplicantRecord, ...]:
        return self._records

    @property
    def weight(self) -> float:
        return self._weight

    @property
    def figure(self) -> FigureDescription:
        return self._figure

    @property
    def status(self) -> ViewStatus:
        return self._status

    @property
    def last_error(self) -> Optional[Exception]:
        return self._last_error

    def snapshot(self) -> ViewSnapshot:
        return ViewSnapshot(
            records=self._records,
            weight=self._weight,
            figure=self._figure,
            status=self._status,
            last_error=self._last_error,
        )

    async def start(self) -> None:
        """Load the baseline batch and draw the first figure"""
        await self.reload()

    async def reload(self) -> None:
        """
        Fetch the baseline batch again.

        On failure the current state is kept. The batch is drawn at the
        baseline weight it was scored with; if the weight in effect differs,
        the scores are then recomputed at that weight.
        """
        seq = self._issue()
        started = time.perf_counter()
        try:
            records = await self.source.fetch_baseline()
        except FetchError as e:
            self._fail(seq, e)
            return

        applied = self._commit(seq, "fetch_baseline", records, started, BASELINE_AGE_WEIGHT)
        if applied and self._weight != BASELINE_AGE_WEIGHT:
            await self.set_weight(self._weight)

    def change_weight(self, weight: float) -> Optional[asyncio.Task]:
        """
        Record a new age weight and schedule the recomputation.

        Returns the scheduled task, or None when no baseline batch is loaded
        yet. Any recomputation still in flight is cancelled.
        """
        self._weight = weight
        if not self._records:
            logger.info(
                "Age weight recorded before baseline load",
                extra={"age_weight": weight, "status": self._status.value},
            )
            return None

        if self._weight_task is not None and not self._weight_task.done():
            self._weight_task.cancel()

        seq = self._issue()
        self._weight_task = asyncio.create_task(self._recompute(seq, weight))
        return self._weight_task

    async def set_weight(self, weight: float) -> None:
        """Change the age weight and wait until the recomputation settles"""
        task = self.change_weight(weight)
        if task is None:
            return

        await asyncio.wait({task})
        # A superseded task is cancelled; nothing to report for it
        if not task.cancelled():
            task.result()

    async def close(self) -> None:
        if self._weight_task is not None and not self._weight_task.done():
            self._weight_task.cancel()
            await asyncio.wait({self._weight_task})

    async def _recompute(self, seq: int, weight: float) -> None:
        started = time.perf_counter()
        try:
            records = await self.source.fetch_scored(weight)
        except FetchError as e:
            self._fail(seq, e)
            return

        self._commit(seq, "fetch_scored", records, started, weight)

    def _issue(self) -> int:
        self._issued += 1
        self._status = ViewStatus.LOADING
        return self._issued

    def _commit(
        self, seq: int, operation: str, records: Sequence[ApplicantRecord], started: float, weight: float
    ) -> bool:
        if seq != self._issued:
            stale_response_counter.labels(operation=operation).inc()
            logger.info(
                "Discarding stale response",
                extra={"operation": operation, "sequence": seq, "latest_sequence": self._issued},
            )
            return False

        figure = self.builder(records, weight)
        if figure is None:
            # Keep the last good batch and figure on screen
            self._status = ViewStatus.EMPTY
            self._last_error = None
            logger.warning("Empty applicant batch", extra={"operation": operation, "age_weight": weight})
            return False

        self._records = tuple(records)
        self._figure = figure
        self._status = ViewStatus.READY
        self._last_error = None

        figure_points_gauge.set(figure.point_count)
        log_figure_rebuilt(operation, weight, figure.point_count, (time.perf_counter() - started) * 1000)
        return True

    def _fail(self, seq: int, error: FetchError) -> None:
        logger.error(
            f"Risk API error: {error}",
            extra={"operation": error.operation, "age_weight": self._weight, "sequence": seq},
        )
        if seq != self._issued:
            return

        self._status = ViewStatus.ERROR
        self._last_error = error
