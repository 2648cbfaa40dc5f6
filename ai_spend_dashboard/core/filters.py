"""
Usage filtering.

Narrows the usage list to the records matching the active selections.
"""

from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional

from ai_spend_dashboard.storage.models import UsageRecord


@dataclass(frozen=True)
class FilterCriteria:
    """User-selected constraints; an unset field matches everything.

    Both dates are inclusive.
    """
    type: Optional[str] = None
    model: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @property
    def is_empty(self) -> bool:
        return (
            self.type is None and self.model is None
            and self.start_date is None and self.end_date is None
        )


def matches(usage: UsageRecord, criteria: FilterCriteria) -> bool:
    """Check one record against all four criteria."""
    return (
        (criteria.type is None or usage.type == criteria.type)
        and (criteria.model is None or usage.model == criteria.model)
        and (criteria.start_date is None or usage.timestamp >= criteria.start_date)
        and (criteria.end_date is None or usage.timestamp <= criteria.end_date)
    )


def filter_usages(usages: Iterable[UsageRecord], criteria: FilterCriteria) -> List[UsageRecord]:
    """Return the matching records, preserving their relative order."""
    return [usage for usage in usages if matches(usage, criteria)]
