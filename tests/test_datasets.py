"""
Unit tests for typed dataset construction.
"""

import logging
import math
from datetime import date

from ai_spend_dashboard.storage.datasets import (
    build_datasets,
    cost_rates_from_rows,
    parse_number,
    usage_records_from_rows,
)
from ai_spend_dashboard.storage.models import CostRate, UsageRecord


class TestParseNumber:
    """Test lenient numeric parsing."""

    def test_integer_and_decimal(self):
        """Verify ordinary numbers parse."""
        assert parse_number("1000") == 1000.0
        assert parse_number("0.01") == 0.01

    def test_whitespace_stripped(self):
        """Verify surrounding whitespace is ignored."""
        assert parse_number(" 2.5 ") == 2.5

    def test_non_numeric_is_nan(self):
        """Verify bad input becomes nan instead of raising."""
        assert math.isnan(parse_number("abc"))
        assert math.isnan(parse_number(""))

    def test_python_only_spellings_are_nan(self):
        """Verify underscores and Python's inf/nan words are not numbers."""
        assert math.isnan(parse_number("1_000"))
        assert math.isnan(parse_number("inf"))
        assert math.isnan(parse_number("nan"))
        assert math.isnan(parse_number("0x10"))

    def test_exponent_and_infinity(self):
        """Verify exponents, signs and Infinity parse."""
        assert parse_number("1e3") == 1000.0
        assert parse_number("-.5") == -0.5
        assert parse_number("Infinity") == math.inf


class TestUsageRecords:
    """Test usage row normalization."""

    def test_date_normalized(self):
        """Verify created_at becomes a calendar date right after decoding."""
        records = usage_records_from_rows([{
            "created_at": "01.03.2024", "type": "chat", "model": "gpt-x",
            "usage_input": "1000", "usage_output": "500",
        }])
        assert records == [UsageRecord(
            timestamp=date(2024, 3, 1), type="chat", model="gpt-x",
            input_units=1000.0, output_units=500.0,
        )]

    def test_bad_date_row_skipped(self, caplog):
        """Verify a row with an unparseable date is dropped and logged."""
        rows = [
            {"created_at": "not a date", "type": "chat", "model": "gpt-x",
             "usage_input": "1", "usage_output": "1"},
            {"created_at": "02.03.2024", "type": "chat", "model": "gpt-x",
             "usage_input": "1", "usage_output": "1"},
        ]
        with caplog.at_level(logging.WARNING):
            records = usage_records_from_rows(rows)

        assert [record.timestamp for record in records] == [date(2024, 3, 2)]
        assert "Skipping usage row 1" in caplog.text

    def test_non_numeric_units_kept_as_nan(self):
        """Verify bad unit counts are carried as nan."""
        records = usage_records_from_rows([{
            "created_at": "01.03.2024", "type": "chat", "model": "gpt-x",
            "usage_input": "lots", "usage_output": "5",
        }])
        assert math.isnan(records[0].input_units)
        assert records[0].output_units == 5.0


class TestCostRates:
    """Test cost row conversion."""

    def test_rates_parsed(self):
        """Verify input and output rates are parsed as floats."""
        rates = cost_rates_from_rows([{"model": "gpt-x", "input": "0.01", "output": "0.02"}])
        assert rates == [CostRate(model="gpt-x", input_rate=0.01, output_rate=0.02)]

    def test_non_numeric_rate_is_nan(self):
        """Verify non-numeric rates become nan rather than zero."""
        rates = cost_rates_from_rows([{"model": "gpt-x", "input": "free", "output": "0.02"}])
        assert math.isnan(rates[0].input_rate)


class TestBuildDatasets:
    """Test building both datasets from raw text."""

    def test_both_datasets_built(self):
        """Verify usage and cost text are decoded and typed."""
        datasets = build_datasets(
            "created_at,type,model,usage_input,usage_output\n01.03.2024,chat,gpt-x,1000,500\n",
            "model,input,output\ngpt-x,0.01,0.02\n",
        )
        assert len(datasets.usages) == 1
        assert datasets.costs == (CostRate("gpt-x", 0.01, 0.02),)
        assert not datasets.is_empty

    def test_empty_usage_text(self):
        """Verify an empty usage file yields an empty dataset."""
        datasets = build_datasets("", "model,input,output\ngpt-x,0.01,0.02\n")
        assert datasets.usages == ()
        assert datasets.is_empty

    def test_missing_columns_logged(self, caplog):
        """Verify a header lacking expected columns is reported."""
        with caplog.at_level(logging.WARNING):
            build_datasets(
                "created_at,type,model\n01.03.2024,chat,gpt-x\n",
                "model,input,output\ngpt-x,0.01,0.02\n",
            )
        assert "missing columns: usage_input, usage_output" in caplog.text
