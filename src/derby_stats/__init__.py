"""
Derby Stats

Roster, game and per-jam statistics for roller derby bouts, backed by a
PostgreSQL jam ledger.

Key Features:
- Jammer and line summaries (jams, lead rate, points for/against) per side
- Cumulative score timeline ordered by period and jam number
- Jam entry with one row per (game, period, jam number) slot
- Stale-response suppression for selector-driven loads

Usage:
    from derby_stats import JamStatsAggregator, GameStatsService, get_repositories
    from derby_stats.pg_connection import get_postgres_db

    service = GameStatsService(get_repositories(get_postgres_db()))
    report = service.build_report(game_id, side="home", period="all")

    # Or aggregate rows already in memory
    rows = JamStatsAggregator.summarize_by_jammer(jams, "home", "all", skaters)
"""

from .aggregators import JamStatsAggregator
from .core.models import (
    GameModel,
    GameStatsReport,
    JamEntry,
    JamRecord,
    JammerSummaryRow,
    LineRef,
    LineSummaryRow,
    SkaterRef,
    TeamModel,
    TimelinePoint,
)
from .core.types import ALL_PERIODS, TeamSide
from .repositories import RepositorySet, get_repositories
from .services import (
    GameService,
    GameStatsService,
    GameStatsSession,
    JamEntryService,
    RosterService,
    SkaterService,
    TeamService,
    build_chart_series,
)

__all__ = [
    # Aggregation
    "JamStatsAggregator",
    # Services
    "GameService",
    "GameStatsService",
    "GameStatsSession",
    "JamEntryService",
    "RosterService",
    "SkaterService",
    "TeamService",
    "build_chart_series",
    # Repositories
    "RepositorySet",
    "get_repositories",
    # Types
    "ALL_PERIODS",
    "TeamSide",
    # Models
    "GameModel",
    "GameStatsReport",
    "JamEntry",
    "JamRecord",
    "JammerSummaryRow",
    "LineRef",
    "LineSummaryRow",
    "SkaterRef",
    "TeamModel",
    "TimelinePoint",
]
