"""
Stats router - per-game jammer, line and score timeline statistics.

Endpoints:
- GET /{game_id}/stats - Aggregated report for one side and period
- GET /{game_id}/stats/charts - The same report shaped as chart series

An empty report (no jams match the period) is a normal 200 response with
empty collections; clients render their "no data" state from it.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Query

from ...core.types import ALL_PERIODS, TeamSide
from ...services.charts import build_chart_series
from ..dependencies import StatsServiceDependency

router = APIRouter()

SideQuery = Annotated[TeamSide, Query(description="Team side: home or visiting")]
PeriodQuery = Annotated[str, Query(description="Period filter: all, 1 or 2")]


@router.get("/{game_id}/stats")
def get_game_stats(
    game_id: str,
    service: StatsServiceDependency,
    side: SideQuery = TeamSide.home,
    period: PeriodQuery = ALL_PERIODS,
) -> dict[str, Any]:
    """Get jammer, line and timeline statistics for a game."""
    report = service.build_report(game_id, side, period)
    return report.model_dump(mode="json")


@router.get("/{game_id}/stats/charts")
def get_game_stats_charts(
    game_id: str,
    service: StatsServiceDependency,
    side: SideQuery = TeamSide.home,
    period: PeriodQuery = ALL_PERIODS,
) -> dict[str, Any]:
    """Get the game statistics as chart-ready label and dataset series."""
    game = service.get_game(game_id)
    report = service.build_report(game_id, side, period)
    return build_chart_series(report, game)
