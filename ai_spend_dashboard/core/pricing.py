"""
Pricing calculations and rate management.

Builds the per-model cost index and computes the cost of usage records.
"""

import logging
import math
from enum import Enum
from types import MappingProxyType
from typing import Dict, Iterable, Mapping

from ai_spend_dashboard.storage.models import CostRate, UsageRecord

logger = logging.getLogger(__name__)

CostIndex = Mapping[str, CostRate]


class InvalidRatePolicy(Enum):
    """How non-numeric cost rates are handled."""
    PROPAGATE = "propagate"  # Keep nan so affected costs show as invalid
    REJECT = "reject"  # Refuse the cost dataset at load time


class InvalidCostRateError(ValueError):
    """Raised when a cost rate is not a number and the policy is REJECT."""
    def __init__(self, rate: CostRate):
        super().__init__(
            f"Invalid cost rate for model '{rate.model}': "
            f"input={rate.input_rate}, output={rate.output_rate}"
        )
        self.rate = rate


def is_valid_rate(rate: CostRate) -> bool:
    """True when both rates are real numbers."""
    return not (math.isnan(rate.input_rate) or math.isnan(rate.output_rate))


def build_cost_index(
    rates: Iterable[CostRate],
    policy: InvalidRatePolicy = InvalidRatePolicy.PROPAGATE
) -> CostIndex:
    """Build a read-only lookup from model name to cost rate.

    Duplicate models resolve deterministically: the last row wins.

    Args:
        rates: Cost rates in dataset order
        policy: Handling of rates that are not numbers

    Returns:
        Immutable mapping of model to CostRate

    Raises:
        InvalidCostRateError: If a rate is invalid and policy is REJECT
    """
    index: Dict[str, CostRate] = {}
    for rate in rates:
        if not is_valid_rate(rate):
            if policy is InvalidRatePolicy.REJECT:
                raise InvalidCostRateError(rate)
            logger.warning(
                "Cost rate for model '%s' is not a number; its costs will be invalid",
                rate.model
            )
        if rate.model in index:
            logger.debug("Duplicate cost rate for model '%s', keeping the last one", rate.model)
        index[rate.model] = rate
    return MappingProxyType(index)


def calculate_cost(usage: UsageRecord, index: CostIndex) -> float:
    """Calculate the cost of one usage record.

    Unknown models cost nothing. No rounding is applied here; invalid
    (nan) rates or units propagate into the result.

    Args:
        usage: Usage record to price
        index: Cost index for the current cost dataset

    Returns:
        input_rate * input_units + output_rate * output_units
    """
    rate = index.get(usage.model)
    if rate is None:
        return 0.0
    return rate.input_rate * usage.input_units + rate.output_rate * usage.output_units
