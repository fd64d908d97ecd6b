"""
Chart series for the game stats page.

Maps aggregation output onto labels and numeric datasets. Colors, axes and
every other presentation detail belong to the renderer.
"""

from __future__ import annotations

from typing import Any, Sequence

from ..core.models import GameModel, GameStatsReport, JammerSummaryRow, LineSummaryRow, TimelinePoint
from ..core.types import TeamSide

DEFAULT_TEAM_NAMES = {
    TeamSide.home: "Home Team",
    TeamSide.visiting: "Visiting Team",
}


def jammer_label(row: JammerSummaryRow) -> str:
    return f"#{row.skater_number} {row.skater_name}"


def jams_played_share(jam_count: int, total_jams: int) -> int:
    """Share of the side's jams, as a rounded percentage."""
    if total_jams <= 0:
        return 0
    return round(jam_count / total_jams * 100)


def summary_series(
    labels: list[str],
    rows: Sequence[JammerSummaryRow] | Sequence[LineSummaryRow],
    total_jams: int,
) -> dict[str, Any]:
    """Jams played, lead percentage and points datasets for summary rows."""
    return {
        "has_data": bool(rows),
        "labels": labels,
        "jams_played": {
            "label": "Jams Played",
            "data": [row.jam_count for row in rows],
            "share": [jams_played_share(row.jam_count, total_jams) for row in rows],
            "total_jams": total_jams,
        },
        "lead_percentage": {
            "label": "Lead Percentage",
            "data": [row.lead_percentage for row in rows],
            "lead_count": [row.lead_count for row in rows],
            "jam_count": [row.jam_count for row in rows],
        },
        "points": [
            {"label": "Points For", "data": [row.points_for for row in rows]},
            {"label": "Points Against", "data": [row.points_against for row in rows]},
            {"label": "Total Score", "data": [row.point_differential for row in rows]},
        ],
    }


def timeline_series(timeline: Sequence[TimelinePoint], game: GameModel | None = None) -> dict[str, Any]:
    """Cumulative score lines for both teams."""
    names = {
        side: (game.team_name(side) if game else None) or default
        for side, default in DEFAULT_TEAM_NAMES.items()
    }
    return {
        "has_data": bool(timeline),
        "labels": [point.label for point in timeline],
        "datasets": [
            {"label": names[TeamSide.home], "side": "home", "data": [p.home_score for p in timeline]},
            {
                "label": names[TeamSide.visiting],
                "side": "visiting",
                "data": [p.visiting_score for p in timeline],
            },
        ],
    }


def build_chart_series(report: GameStatsReport, game: GameModel | None = None) -> dict[str, Any]:
    """All chart series of the game stats page for one report."""
    return {
        "game_id": report.game_id,
        "side": report.side.value,
        "period": report.period,
        "score_evolution": timeline_series(report.timeline, game),
        "jammers": summary_series(
            [jammer_label(row) for row in report.jammers], report.jammers, report.total_jams
        ),
        "lines": summary_series(
            [row.line_name for row in report.lines], report.lines, report.total_jams
        ),
    }
