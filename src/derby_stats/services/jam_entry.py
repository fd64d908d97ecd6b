"""
Jam entry service.

Saves the values entered for one jam slot. A jam with nothing entered
(no jammers, no lines, no points, no lead) is not written, so paging
through empty slots never creates ledger rows. Jammers and lines must come
from the roster of the side they are entered for.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..core.errors import (
    GameNotFoundError,
    InvalidReferenceError,
    InvalidSelectionError,
    JamNotFoundError,
)
from ..core.models import JamEntry, JamRecord
from ..core.types import PERIODS, TeamSide
from ..repositories.base import RepositorySet

logger = logging.getLogger(__name__)


class JamEntryService:
    """Read and write single jam slots of a game."""

    def __init__(self, repos: RepositorySet):
        self.repos = repos

    @staticmethod
    def _check_slot(period: int, jam_number: int) -> None:
        if period not in PERIODS:
            raise InvalidSelectionError(f"Invalid period: {period!r}")
        if jam_number < 1:
            raise InvalidSelectionError(f"Invalid jam number: {jam_number!r}")

    def list_jams(self, game_id: str, period: Optional[int] = None) -> list[JamRecord]:
        if period is not None:
            self._check_slot(period, 1)
        return self.repos.jams.list_for_game(game_id, period)

    def get_jam(self, game_id: str, period: int, jam_number: int) -> JamRecord:
        """
        Raises:
            JamNotFoundError: If nothing is recorded for the slot
        """
        self._check_slot(period, jam_number)
        jam = self.repos.jams.find(game_id, period, jam_number)
        if jam is None:
            raise JamNotFoundError(game_id, period, jam_number)
        return jam

    def save_jam(
        self, game_id: str, period: int, jam_number: int, entry: JamEntry
    ) -> Optional[JamRecord]:
        """
        Store the entry for a slot, replacing whatever was recorded there.

        Returns:
            The stored record, or None when the entry was empty and skipped

        Raises:
            GameNotFoundError: If the game does not exist
            InvalidReferenceError: If a jammer or line is not on that side's roster
        """
        self._check_slot(period, jam_number)
        if entry.is_empty():
            logger.debug("Skipping empty jam P%d J%d for game %s", period, jam_number, game_id)
            return None

        record = entry.to_record(game_id, period, jam_number)
        self._check_roster(record)
        self.repos.jams.upsert(record)
        logger.info("Saved jam P%d J%d for game %s", period, jam_number, game_id)
        return record

    def _check_roster(self, record: JamRecord) -> None:
        game = self.repos.games.find_by_id(record.game_id)
        if game is None:
            raise GameNotFoundError(record.game_id)

        rosters = {roster.team_id: roster for roster in self.repos.rosters.list_for_game(game.id)}
        for side in TeamSide:
            jammer_id = record.jammer_for(side)
            line_id = record.line_for(side)
            if not (jammer_id or line_id):
                continue
            roster = rosters.get(game.team_id(side))
            if roster is None:
                raise InvalidReferenceError(f"No {side.value} roster recorded for game {game.id}")
            if jammer_id and jammer_id not in roster.jammer_ids:
                raise InvalidReferenceError(f"Jammer {jammer_id} is not on the {side.value} roster")
            if line_id and line_id not in roster.line_ids:
                raise InvalidReferenceError(f"Line {line_id} is not on the {side.value} roster")
