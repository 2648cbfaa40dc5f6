"""
Presentation adapter.

Maps the daily series into the shape a chart widget consumes and derives
the bounds and options for the filter pickers.
"""

import math
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from .aggregation import DailyAggregate
from .dates import format_date
from ai_spend_dashboard.storage.models import UsageRecord


@dataclass(frozen=True)
class ChartStyle:
    """Fixed styling of the daily spend dataset."""
    label: str = "Daily usage"
    background_color: str = "rgb(17,100,102)"
    border_color: str = "rgba(75,192,192,1)"


@dataclass(frozen=True)
class ChartDataset:
    """One labeled numeric series of the chart."""
    label: str
    data: Tuple[float, ...]
    background_color: str
    border_color: str


@dataclass(frozen=True)
class ChartData:
    """Chart-ready label/value series."""
    labels: Tuple[str, ...]
    datasets: Tuple[ChartDataset, ...]

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for a chart widget; non-finite values become None."""
        return {
            "labels": list(self.labels),
            "datasets": [
                {
                    "label": dataset.label,
                    "data": [value if math.isfinite(value) else None for value in dataset.data],
                    "backgroundColor": dataset.background_color,
                    "borderColor": dataset.border_color,
                }
                for dataset in self.datasets
            ],
        }


@dataclass(frozen=True)
class DateBounds:
    """First and last day of the series; both None when it is empty."""
    min_date: Optional[date] = None
    max_date: Optional[date] = None


@dataclass(frozen=True)
class PickerOptions:
    """Distinct values offered by the categorical pickers."""
    types: Tuple[str, ...] = ()
    models: Tuple[str, ...] = ()


def build_chart_data(aggregates: Sequence[DailyAggregate], style: ChartStyle = ChartStyle()) -> ChartData:
    """Build the chart series from ordered daily aggregates."""
    return ChartData(
        labels=tuple(format_date(entry.date) for entry in aggregates),
        datasets=(
            ChartDataset(
                label=style.label,
                data=tuple(entry.total_cost for entry in aggregates),
                background_color=style.background_color,
                border_color=style.border_color,
            ),
        ),
    )


def date_bounds(aggregates: Sequence[DailyAggregate]) -> DateBounds:
    """Bounds for the date-range pickers, taken from the ordered series."""
    if not aggregates:
        return DateBounds()
    return DateBounds(min_date=aggregates[0].date, max_date=aggregates[-1].date)


def _distinct(values: Iterable[str]) -> Tuple[str, ...]:
    return tuple(dict.fromkeys(values))


def picker_options(usages: Iterable[UsageRecord]) -> PickerOptions:
    """Distinct types and models, in first-seen order."""
    records: List[UsageRecord] = list(usages)
    return PickerOptions(
        types=_distinct(usage.type for usage in records),
        models=_distinct(usage.model for usage in records),
    )
