"""
Game statistics service.

Loads a game's jam ledger and the skater and line registries, then runs the
JamStatsAggregator for one (side, period) selection.

The skater and line lookups are independent of each other: the async path
runs them concurrently and aggregates only once both have completed.
GameStatsSession adds stale-response suppression for interactive clients
that change the selection while a load is in flight.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable, Union

from ..aggregators import JamStatsAggregator
from ..core.errors import GameNotFoundError
from ..core.models import GameModel, GameStatsReport, JamRecord, LineRef, SkaterRef
from ..core.types import ALL_PERIODS, PeriodFilter, TeamSide, parse_period_filter, parse_side
from ..repositories.base import RepositorySet
from .requests import LatestRequestGuard

logger = logging.getLogger(__name__)


def _jammer_ids(jams: Iterable[JamRecord]) -> set[str]:
    ids = set()
    for jam in jams:
        ids.update(ident for ident in (jam.home_jammer_id, jam.visiting_jammer_id) if ident)
    return ids


def _line_ids(jams: Iterable[JamRecord]) -> set[str]:
    ids = set()
    for jam in jams:
        ids.update(ident for ident in (jam.home_line_id, jam.visiting_line_id) if ident)
    return ids


def aggregate_report(
    game_id: str,
    jams: list[JamRecord],
    skaters: dict[str, SkaterRef],
    lines: dict[str, LineRef],
    side: Union[TeamSide, str],
    period: PeriodFilter,
) -> GameStatsReport:
    """Build a report from already-loaded ledger and registries."""
    side = parse_side(side)
    period = parse_period_filter(period)
    return GameStatsReport(
        game_id=game_id,
        side=side,
        period=period,
        total_jams=JamStatsAggregator.count_jams_with_jammer(jams, side, period),
        jammers=JamStatsAggregator.summarize_by_jammer(jams, side, period, skaters),
        lines=JamStatsAggregator.summarize_by_line(jams, side, period, lines),
        timeline=JamStatsAggregator.compute_score_timeline(jams, period),
    )


class GameStatsService:
    """Compute game statistics from the repositories."""

    def __init__(self, repos: RepositorySet):
        self.repos = repos

    def get_game(self, game_id: str) -> GameModel:
        """
        Raises:
            GameNotFoundError: If no game exists with this ID
        """
        game = self.repos.games.find_by_id(game_id)
        if game is None:
            raise GameNotFoundError(game_id)
        return game

    def build_report(
        self,
        game_id: str,
        side: Union[TeamSide, str] = TeamSide.home,
        period: PeriodFilter = ALL_PERIODS,
    ) -> GameStatsReport:
        """Load everything for a game and aggregate it for one selection."""
        side = parse_side(side)
        period = parse_period_filter(period)
        self.get_game(game_id)

        jams = self.repos.jams.list_for_game(game_id)
        skaters = self.repos.skaters.find_by_ids(_jammer_ids(jams))
        lines = self.repos.lines.find_by_ids(_line_ids(jams))
        logger.debug(
            "Game %s: %d jams, %d skaters, %d lines", game_id, len(jams), len(skaters), len(lines)
        )
        return aggregate_report(game_id, jams, skaters, lines, side, period)

    async def load_report(
        self,
        game_id: str,
        side: Union[TeamSide, str] = TeamSide.home,
        period: PeriodFilter = ALL_PERIODS,
    ) -> GameStatsReport:
        """
        Async variant of build_report.

        The skater and line registries are fetched concurrently once the ledger
        is in; aggregation starts after both have arrived.
        """
        side = parse_side(side)
        period = parse_period_filter(period)
        await asyncio.to_thread(self.get_game, game_id)

        jams = await asyncio.to_thread(self.repos.jams.list_for_game, game_id)
        skaters, lines = await asyncio.gather(
            asyncio.to_thread(self.repos.skaters.find_by_ids, _jammer_ids(jams)),
            asyncio.to_thread(self.repos.lines.find_by_ids, _line_ids(jams)),
        )
        return aggregate_report(game_id, jams, skaters, lines, side, period)


class GameStatsSession:
    """
    Selector state for one game's stats view.

    Every select() call supersedes the previous one; a report is only
    returned for the selection that is current when it completes.
    """

    def __init__(self, service: GameStatsService, game_id: str):
        self.service = service
        self.game_id = game_id
        self.side = TeamSide.home
        self.period: PeriodFilter = ALL_PERIODS
        self._guard: LatestRequestGuard[GameStatsReport] = LatestRequestGuard()

    async def select(
        self,
        side: Union[TeamSide, str, None] = None,
        period: Union[PeriodFilter, str, None] = None,
    ) -> GameStatsReport:
        """
        Change the selection and load its report.

        Raises:
            StaleResponseError: If the selection changed again before the
                load completed.
        """
        if side is not None:
            self.side = parse_side(side)
        if period is not None:
            self.period = parse_period_filter(period)

        selection = (self.side, self.period)
        return await self._guard.run(
            selection,
            lambda: self.service.load_report(self.game_id, *selection),
        )
