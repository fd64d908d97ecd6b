"""
Services built on top of the repositories and the jam aggregator.
"""

from .charts import build_chart_series
from .game_stats import GameStatsService, GameStatsSession, aggregate_report
from .games import GameService, RosterService
from .jam_entry import JamEntryService
from .requests import LatestRequestGuard, RequestToken
from .teams import SkaterService, TeamService

__all__ = [
    "GameService",
    "GameStatsService",
    "GameStatsSession",
    "JamEntryService",
    "LatestRequestGuard",
    "RequestToken",
    "RosterService",
    "SkaterService",
    "TeamService",
    "aggregate_report",
    "build_chart_series",
]
