"""
Dataset access for AI Spend Dashboard.

Fetching, decoding and typing of the usage and cost CSV sources.
"""
