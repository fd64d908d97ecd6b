"""
Jam statistics aggregator.

Turns the jam ledger of a single game into:
- per-jammer summary rows for one side
- per-line summary rows for one side
- the cumulative score timeline

Design: Self-contained, stateless, never mutates its inputs. Data anomalies
(no jammer recorded, NULL points, references the registry no longer knows)
degrade to fewer rows or zero contribution instead of raising.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Mapping, Optional, TypeVar, Union

from ..core.models import (
    JamRecord,
    JammerSummaryRow,
    LineRef,
    LineSummaryRow,
    SkaterRef,
    TimelinePoint,
)
from ..core.types import ALL_PERIODS, PeriodFilter, TeamSide, parse_period_filter, parse_side

logger = logging.getLogger(__name__)

RowT = TypeVar("RowT")


def collation_key(text: str) -> tuple[str, str]:
    """Sort key for display names: case-insensitive, lowercase first on ties."""
    return (text.casefold(), text.swapcase())


@dataclass
class _Tally:
    jam_count: int = 0
    lead_count: int = 0
    points_for: int = 0
    points_against: int = 0

    @property
    def lead_percentage(self) -> float:
        if self.jam_count == 0:
            return 0.0
        return 100 * self.lead_count / self.jam_count


class JamStatsAggregator:
    """Aggregate a game's jam ledger into jammer, line and timeline views."""

    @staticmethod
    def filter_by_period(
        jams: Iterable[JamRecord], period_filter: PeriodFilter = ALL_PERIODS
    ) -> list[JamRecord]:
        """Keep jams from one period, or all of them for "all"."""
        period = parse_period_filter(period_filter)
        if period == ALL_PERIODS:
            return list(jams)
        return [jam for jam in jams if jam.period == period]

    @staticmethod
    def count_jams_with_jammer(
        jams: Iterable[JamRecord],
        side: Union[TeamSide, str],
        period_filter: PeriodFilter = ALL_PERIODS,
    ) -> int:
        """Number of jams in the period where `side` had a jammer recorded."""
        side = parse_side(side)
        return sum(
            1
            for jam in JamStatsAggregator.filter_by_period(jams, period_filter)
            if jam.jammer_for(side)
        )

    @staticmethod
    def _tally(
        jams: Iterable[JamRecord],
        side: TeamSide,
        key: Callable[[JamRecord], Optional[str]],
    ) -> dict[str, _Tally]:
        tallies: dict[str, _Tally] = {}
        opposite = side.opposite
        for jam in jams:
            ident = key(jam)
            if not ident:
                continue
            tally = tallies.setdefault(ident, _Tally())
            tally.jam_count += 1
            if jam.lead_team is side:
                tally.lead_count += 1
            tally.points_for += jam.points_for(side)
            tally.points_against += jam.points_for(opposite)
        return tallies

    @staticmethod
    def _resolve(
        tallies: Mapping[str, _Tally],
        registry: Mapping[str, RowT],
        kind: str,
    ) -> list[tuple[RowT, _Tally]]:
        resolved = []
        for ident, tally in tallies.items():
            ref = registry.get(ident)
            if ref is None:
                logger.debug("Dropping stats for unknown %s %s", kind, ident)
                continue
            resolved.append((ref, tally))
        return resolved

    @staticmethod
    def summarize_by_jammer(
        jams: Iterable[JamRecord],
        side: Union[TeamSide, str],
        period_filter: PeriodFilter,
        skaters: Mapping[str, SkaterRef],
    ) -> list[JammerSummaryRow]:
        """Summarize each jammer's jams for one side of the game.

        Args:
            jams: Jam ledger of one game, in any order
            side: Side whose jammers are summarized
            period_filter: "all", 1 or 2
            skaters: Skater registry keyed by skater ID

        Returns:
            One row per resolvable jammer, ordered by jersey number compared
            as text, so "10" comes before "2".
        """
        side = parse_side(side)
        filtered = JamStatsAggregator.filter_by_period(jams, period_filter)
        tallies = JamStatsAggregator._tally(filtered, side, lambda jam: jam.jammer_for(side))

        rows = [
            JammerSummaryRow(
                skater_id=skater.id,
                skater_number=skater.number,
                skater_name=skater.name,
                jam_count=tally.jam_count,
                lead_count=tally.lead_count,
                lead_percentage=tally.lead_percentage,
                points_for=tally.points_for,
                points_against=tally.points_against,
            )
            for skater, tally in JamStatsAggregator._resolve(tallies, skaters, "jammer")
        ]
        # Jersey numbers are compared as text, not numerically.
        rows.sort(key=lambda row: (*collation_key(row.skater_number), row.skater_id))
        return rows

    @staticmethod
    def summarize_by_line(
        jams: Iterable[JamRecord],
        side: Union[TeamSide, str],
        period_filter: PeriodFilter,
        lines: Mapping[str, LineRef],
    ) -> list[LineSummaryRow]:
        """Summarize each line's jams for one side of the game.

        Same counting as summarize_by_jammer, keyed by the side's line and
        ordered by line name ignoring case, so "bravo" sits between
        "Alpha" and "Charlie".
        """
        side = parse_side(side)
        filtered = JamStatsAggregator.filter_by_period(jams, period_filter)
        tallies = JamStatsAggregator._tally(filtered, side, lambda jam: jam.line_for(side))

        rows = [
            LineSummaryRow(
                line_id=line.id,
                line_name=line.name,
                jam_count=tally.jam_count,
                lead_count=tally.lead_count,
                lead_percentage=tally.lead_percentage,
                points_for=tally.points_for,
                points_against=tally.points_against,
            )
            for line, tally in JamStatsAggregator._resolve(tallies, lines, "line")
        ]
        rows.sort(key=lambda row: (*collation_key(row.line_name), row.line_id))
        return rows

    @staticmethod
    def compute_score_timeline(
        jams: Iterable[JamRecord], period_filter: PeriodFilter = ALL_PERIODS
    ) -> list[TimelinePoint]:
        """Running home and visiting score after each jam.

        Jams are walked in (period, jam number) order regardless of input
        order. Labels are "P{period} J{jam}" for the full game and "J{jam}"
        for a single period. No matching jams gives an empty timeline.
        """
        period = parse_period_filter(period_filter)
        ordered = sorted(
            JamStatsAggregator.filter_by_period(jams, period),
            key=lambda jam: jam.slot,
        )

        timeline = []
        home_total = 0
        visiting_total = 0
        for jam in ordered:
            home_total += jam.points_for(TeamSide.home)
            visiting_total += jam.points_for(TeamSide.visiting)
            if period == ALL_PERIODS:
                label = f"P{jam.period} J{jam.jam_number}"
            else:
                label = f"J{jam.jam_number}"
            timeline.append(
                TimelinePoint(
                    label=label,
                    period=jam.period,
                    jam_number=jam.jam_number,
                    home_score=home_total,
                    visiting_score=visiting_total,
                )
            )
        return timeline
