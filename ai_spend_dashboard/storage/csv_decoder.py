"""
Header-aware CSV decoding.

Turns delimited text into string-valued records keyed by the header row.
"""

import csv
import io
import logging
from typing import Dict, List

logger = logging.getLogger(__name__)


def decode_csv(text: str, delimiter: str = ",") -> List[Dict[str, str]]:
    """Decode delimited text with a header row into records.

    Decoding fails open: a row with too few values gets empty strings for
    the missing fields, surplus values are dropped, and blank lines are
    skipped. A broken row never aborts the rest of the batch.

    Args:
        text: Raw delimited text, header row first
        delimiter: Field separator

    Returns:
        One dictionary per data row, in file order
    """
    if text.startswith("\ufeff"):
        text = text[1:]

    reader = csv.reader(io.StringIO(text), delimiter=delimiter)
    try:
        header = next(reader)
    except StopIteration:
        return []
    except csv.Error as e:
        logger.warning("Unreadable CSV header: %s", e)
        return []

    fields = [name.strip() for name in header]
    records = []
    try:
        for row in reader:
            if not any(value.strip() for value in row):
                continue
            if len(row) != len(fields):
                logger.debug(
                    "Line %d has %d values, expected %d",
                    reader.line_num, len(row), len(fields)
                )
            records.append({
                name: row[i] if i < len(row) else ""
                for i, name in enumerate(fields)
            })
    except csv.Error as e:
        # Keep what was decoded so far
        logger.warning("Stopped decoding at line %d: %s", reader.line_num, e)

    return records
