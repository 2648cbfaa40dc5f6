"""
AI Spend Dashboard.

Joins AI usage records with per-model unit costs and reports daily spend.
"""

__version__ = "0.1.0"
