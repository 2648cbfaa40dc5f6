"""
Typed dataset construction.

Converts decoded CSV rows into usage records and cost rates.
"""

import logging
import math
import re
from typing import Dict, Iterable, List

from ai_spend_dashboard.core.dates import parse_date
from .csv_decoder import decode_csv
from .models import CostRate, Datasets, UsageRecord

logger = logging.getLogger(__name__)

USAGE_COLUMNS = ("created_at", "type", "model", "usage_input", "usage_output")
COST_COLUMNS = ("model", "input", "output")

NUMBER_PATTERN = re.compile(r"[+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|Infinity)", re.ASCII)


def parse_number(value: str) -> float:
    """Parse a numeric field, returning ``nan`` instead of raising.

    Accepts plain decimal literals with an optional sign and exponent, and
    ``Infinity``. Python-only spellings such as ``1_000``, ``inf`` or ``nan``
    are treated as non-numeric.

    Args:
        value: Raw field text

    Returns:
        The parsed float, or ``nan`` for empty or non-numeric text
    """
    if not isinstance(value, str) or not NUMBER_PATTERN.fullmatch(value.strip()):
        return math.nan
    return float(value.strip())


def usage_records_from_rows(rows: Iterable[Dict[str, str]]) -> List[UsageRecord]:
    """Build usage records, normalizing ``created_at`` to a calendar date.

    Rows with an unparseable date are skipped and logged; the rest of the
    batch is kept.

    Args:
        rows: Decoded usage rows

    Returns:
        Usage records in input order
    """
    records = []
    for i, row in enumerate(rows):
        raw_date = row.get("created_at", "")
        try:
            timestamp = parse_date(raw_date)
        except ValueError as e:
            logger.warning("Skipping usage row %d: %s", i + 1, e)
            continue

        record = UsageRecord(
            timestamp=timestamp,
            type=row.get("type", ""),
            model=row.get("model", ""),
            input_units=parse_number(row.get("usage_input", "")),
            output_units=parse_number(row.get("usage_output", "")),
        )
        if math.isnan(record.input_units) or math.isnan(record.output_units):
            logger.warning("Usage row %d has non-numeric units: %s", i + 1, row)
        records.append(record)
    return records


def cost_rates_from_rows(rows: Iterable[Dict[str, str]]) -> List[CostRate]:
    """Build cost rates; non-numeric rates are kept as ``nan``."""
    return [
        CostRate(
            model=row.get("model", ""),
            input_rate=parse_number(row.get("input", "")),
            output_rate=parse_number(row.get("output", "")),
        )
        for row in rows
    ]


def _warn_missing_columns(rows: List[Dict[str, str]], expected, name: str) -> None:
    if not rows:
        return
    missing = [column for column in expected if column not in rows[0]]
    if missing:
        logger.warning("%s dataset is missing columns: %s", name, ", ".join(missing))


def build_datasets(usages_text: str, costs_text: str) -> Datasets:
    """Decode and type both raw CSV documents."""
    usage_rows = decode_csv(usages_text)
    cost_rows = decode_csv(costs_text)
    _warn_missing_columns(usage_rows, USAGE_COLUMNS, "Usage")
    _warn_missing_columns(cost_rows, COST_COLUMNS, "Cost")

    usages = usage_records_from_rows(usage_rows)
    costs = cost_rates_from_rows(cost_rows)
    logger.info("Loaded %d usage records and %d cost rates", len(usages), len(costs))
    return Datasets(usages=tuple(usages), costs=tuple(costs))
