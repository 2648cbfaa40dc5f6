"""
Data models for the dataset layer.

Defines the typed records produced from the usage and cost CSV files.
"""

from dataclasses import dataclass
from datetime import date
from typing import Tuple


@dataclass(frozen=True)
class UsageRecord:
    """Immutable line item of model consumption on one calendar day.

    Unit counts that could not be parsed are carried as ``nan`` so that
    the resulting cost is visibly invalid rather than silently zero.
    """
    timestamp: date
    type: str
    model: str
    input_units: float
    output_units: float


@dataclass(frozen=True)
class CostRate:
    """Per-unit price for a model's input and output consumption."""
    model: str
    input_rate: float  # Currency per input unit
    output_rate: float  # Currency per output unit


@dataclass(frozen=True)
class Datasets:
    """Both datasets of one successful load.

    Only ever constructed once both sources are available, so partial
    data can never reach the computation.
    """
    usages: Tuple[UsageRecord, ...]
    costs: Tuple[CostRate, ...]

    @property
    def is_empty(self) -> bool:
        """True when either dataset yielded no rows."""
        return not self.usages or not self.costs
