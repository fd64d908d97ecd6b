"""
Jam statistics aggregators.

These aggregators turn the per-jam ledger of a game into per-jammer and
per-line summary rows and a cumulative score timeline.

Design: Pure functions over in-memory rows, no database or I/O access.
"""

from .jam_stats import JamStatsAggregator

__all__ = ["JamStatsAggregator"]
