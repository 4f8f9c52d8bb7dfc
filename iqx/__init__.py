"""
IQX Stocks - Vietnamese stock-market company data.

Syncs company summaries from Simplize into a relational store and
serves them through a REST API.
"""

__version__ = "0.1.0"
