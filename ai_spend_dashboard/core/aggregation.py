"""
Daily cost aggregation.

Groups usage by calendar day and sums the computed costs.
"""

import math
from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List

from .pricing import CostIndex, calculate_cost
from ai_spend_dashboard.storage.models import UsageRecord


@dataclass(frozen=True)
class DailyAggregate:
    """Total cost of all usage on one calendar day."""
    date: date
    total_cost: float


def sum_costs(costs: Iterable[float]) -> float:
    """Exactly rounded sum of costs.

    A sum of finite costs beyond the float range yields ``inf`` instead of
    the ``OverflowError`` raised by ``math.fsum``.
    """
    values = list(costs)
    try:
        return math.fsum(values)
    except OverflowError:
        return sum(values)


def aggregate_daily(usages: Iterable[UsageRecord], index: CostIndex) -> List[DailyAggregate]:
    """Sum usage costs per day.

    The result holds one entry per distinct day, sorted ascending by the
    date itself. Sums are exactly rounded (see :func:`sum_costs`), so the
    output does not depend on the order of the input records.

    Args:
        usages: Filtered usage records
        index: Cost index used to price each record

    Returns:
        Daily aggregates in strictly ascending date order
    """
    daily_costs: Dict[date, List[float]] = defaultdict(list)
    for usage in usages:
        daily_costs[usage.timestamp].append(calculate_cost(usage, index))

    return [
        DailyAggregate(date=day, total_cost=sum_costs(daily_costs[day]))
        for day in sorted(daily_costs)
    ]
