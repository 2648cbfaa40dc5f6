"""
Core modules for AI Spend Dashboard.

This package contains the cost index, cost calculation, filtering,
daily aggregation and presentation logic.
"""
