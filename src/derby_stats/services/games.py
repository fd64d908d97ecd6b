"""
Game and roster management services.

A game needs two different, existing teams. Each team playing in a game
may have one roster: the skaters allowed to jam for it and its named
lines. Jam entry only accepts jammers and lines from these rosters.
"""

from __future__ import annotations

import logging

from ..core.errors import (
    GameNotFoundError,
    InvalidReferenceError,
    RosterNotFoundError,
    TeamNotFoundError,
)
from ..core.models import GameInput, GameModel, RosterInput, RosterModel
from ..repositories.base import RepositorySet

logger = logging.getLogger(__name__)


class GameService:
    """Game registry."""

    def __init__(self, repos: RepositorySet):
        self.repos = repos

    def list_games(self) -> list[GameModel]:
        return self.repos.games.list_all()

    def get_game(self, game_id: str) -> GameModel:
        game = self.repos.games.find_by_id(game_id)
        if game is None:
            raise GameNotFoundError(game_id)
        return game

    def _check_teams(self, data: GameInput) -> None:
        for team_id in (data.home_team_id, data.visiting_team_id):
            if self.repos.teams.find_by_id(team_id) is None:
                raise InvalidReferenceError(f"Team {team_id} does not exist")

    def create_game(self, data: GameInput) -> GameModel:
        self._check_teams(data)
        game = self.repos.games.create(data)
        logger.info("Created game %s", game.id)
        return game

    def update_game(self, game_id: str, data: GameInput) -> GameModel:
        self.get_game(game_id)
        self._check_teams(data)
        game = self.repos.games.update(game_id, data)
        if game is None:
            raise GameNotFoundError(game_id)
        return game

    def delete_game(self, game_id: str) -> None:
        if not self.repos.games.delete(game_id):
            raise GameNotFoundError(game_id)
        logger.info("Deleted game %s", game_id)


class RosterService:
    """Per-game rosters of the two teams."""

    def __init__(self, repos: RepositorySet):
        self.repos = repos

    def _get_game(self, game_id: str) -> GameModel:
        game = self.repos.games.find_by_id(game_id)
        if game is None:
            raise GameNotFoundError(game_id)
        return game

    def list_rosters(self, game_id: str) -> list[RosterModel]:
        self._get_game(game_id)
        return self.repos.rosters.list_for_game(game_id)

    def save_roster(self, game_id: str, team_id: str, data: RosterInput) -> RosterModel:
        """
        Create or replace a team's roster for a game.

        Raises:
            GameNotFoundError: If the game does not exist
            TeamNotFoundError: If the team does not exist
            InvalidReferenceError: If the team does not play in the game, or a
                jammer is not a member of the team
        """
        game = self._get_game(game_id)
        if self.repos.teams.find_by_id(team_id) is None:
            raise TeamNotFoundError(team_id)
        if game.side_of(team_id) is None:
            raise InvalidReferenceError(f"Team {team_id} does not play in game {game_id}")

        members = {skater.id for skater in self.repos.teams.list_skaters(team_id)}
        outsiders = [skater_id for skater_id in data.jammer_ids if skater_id not in members]
        if outsiders:
            raise InvalidReferenceError(
                f"Skaters {', '.join(outsiders)} are not on team {team_id}"
            )

        roster = self.repos.rosters.save(game_id, team_id, data)
        logger.info("Saved roster for team %s in game %s", team_id, game_id)
        return roster

    def delete_roster(self, game_id: str, team_id: str) -> None:
        self._get_game(game_id)
        if not self.repos.rosters.delete(game_id, team_id):
            raise RosterNotFoundError(game_id, team_id)
