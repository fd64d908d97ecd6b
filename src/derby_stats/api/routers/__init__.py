"""API routers."""

from . import games, skaters, stats, teams

__all__ = ["games", "skaters", "stats", "teams"]
