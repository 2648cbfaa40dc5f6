"""
Dashboard state and recomputation.

The dashboard is an immutable state (datasets, filter selections, load
error) and a pure function from that state to everything that gets
rendered. A session memoizes the last view so unrelated updates do not
trigger a recomputation.
"""

import logging
import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Hashable, Optional, Tuple

from .aggregation import DailyAggregate, aggregate_daily, sum_costs
from .filters import FilterCriteria, filter_usages
from .presentation import (
    ChartData,
    ChartStyle,
    DateBounds,
    PickerOptions,
    build_chart_data,
    date_bounds,
    picker_options,
)
from .pricing import build_cost_index
from ai_spend_dashboard.storage.models import Datasets

logger = logging.getLogger(__name__)

LOADING_MESSAGE = "Loading..."
EMPTY_MESSAGE = "No data available."


class DashboardStatus(Enum):
    """Externally visible states of the dashboard."""
    LOADING = "loading"  # Either dataset not yet available
    EMPTY = "empty"  # Both loaded, but no usage rows or no cost rows
    READY = "ready"  # Chart and filters can be rendered
    FAILED = "failed"  # A dataset could not be loaded


class StateTransitionError(Exception):
    """Raised on an attempt to leave a terminal load state."""


@dataclass(frozen=True)
class DashboardState:
    """Everything the rendered dashboard depends on."""
    datasets: Optional[Datasets] = None
    criteria: FilterCriteria = field(default_factory=FilterCriteria)
    error: Optional[str] = None

    @property
    def status(self) -> DashboardStatus:
        if self.error is not None:
            return DashboardStatus.FAILED
        if self.datasets is None:
            return DashboardStatus.LOADING
        if self.datasets.is_empty:
            return DashboardStatus.EMPTY
        return DashboardStatus.READY

    def with_datasets(self, datasets: Datasets) -> "DashboardState":
        """Move out of LOADING once both datasets are available."""
        self._require_loading()
        return replace(self, datasets=datasets)

    def with_error(self, message: str) -> "DashboardState":
        """Move out of LOADING because a dataset could not be loaded."""
        self._require_loading()
        return replace(self, error=message)

    def with_criteria(self, criteria: FilterCriteria) -> "DashboardState":
        return replace(self, criteria=criteria)

    def _require_loading(self) -> None:
        if self.status is not DashboardStatus.LOADING:
            raise StateTransitionError(
                f"Cannot load datasets in state {self.status.value}; a full reload is required"
            )


@dataclass(frozen=True)
class DashboardView:
    """Result of one recomputation."""
    status: DashboardStatus
    message: Optional[str] = None
    aggregates: Tuple[DailyAggregate, ...] = ()
    chart: Optional[ChartData] = None
    bounds: DateBounds = field(default_factory=DateBounds)
    options: PickerOptions = field(default_factory=PickerOptions)

    @property
    def total_cost(self) -> float:
        return sum_costs(entry.total_cost for entry in self.aggregates)

    @property
    def invalid_days(self) -> Tuple[DailyAggregate, ...]:
        """Days whose total is not a finite number."""
        return tuple(entry for entry in self.aggregates if not math.isfinite(entry.total_cost))


def compute_view(state: DashboardState, style: ChartStyle = ChartStyle()) -> DashboardView:
    """Derive the rendered view from the current state.

    Pure function of (usages, costs, filters): the cost index, the
    filtered subset and the daily series are all rebuilt from the inputs.

    Args:
        state: Current dashboard state
        style: Chart styling

    Returns:
        The view for the state's status
    """
    status = state.status
    if status is DashboardStatus.LOADING:
        return DashboardView(status=status, message=LOADING_MESSAGE)
    if status is DashboardStatus.FAILED:
        return DashboardView(status=status, message=state.error)
    if status is DashboardStatus.EMPTY:
        return DashboardView(status=status, message=EMPTY_MESSAGE)

    datasets = state.datasets
    index = build_cost_index(datasets.costs)
    filtered = filter_usages(datasets.usages, state.criteria)
    aggregates = aggregate_daily(filtered, index)
    logger.debug(
        "Recomputed view: %d of %d usage records across %d days",
        len(filtered), len(datasets.usages), len(aggregates)
    )

    return DashboardView(
        status=status,
        aggregates=tuple(aggregates),
        chart=build_chart_data(aggregates, style),
        bounds=date_bounds(aggregates),
        options=picker_options(datasets.usages),
    )


class DashboardSession:
    """Holds the current state and memoizes its view.

    The view is recomputed only when the (datasets, filters) key changes.
    """

    def __init__(self, style: ChartStyle = ChartStyle(), state: Optional[DashboardState] = None):
        self.style = style
        self.state = state or DashboardState()
        self._cache_key: Optional[Hashable] = None
        self._cached_view: Optional[DashboardView] = None
        self.recompute_count = 0

    def load(self, datasets: Datasets) -> DashboardView:
        self.state = self.state.with_datasets(datasets)
        return self.view

    def fail(self, message: str) -> DashboardView:
        self.state = self.state.with_error(message)
        return self.view

    def select(self, criteria: FilterCriteria) -> DashboardView:
        self.state = self.state.with_criteria(criteria)
        return self.view

    @property
    def view(self) -> DashboardView:
        key = (self.state.status, self.state.datasets, self.state.criteria, self.state.error)
        if self._cached_view is None or not self._same_key(key):
            self._cached_view = compute_view(self.state, self.style)
            self._cache_key = key
            self.recompute_count += 1
        return self._cached_view

    def _same_key(self, key: Tuple) -> bool:
        # Identity check before equality; datasets are usually the same object
        cached = self._cache_key
        return all(a is b or a == b for a, b in zip(cached, key))
