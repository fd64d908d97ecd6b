"""
Team and skater registry services.

Create, update, delete and list teams and skaters, and manage which skaters
belong to which team. Missing records raise the matching NotFound error so
the API answers 404.
"""

from __future__ import annotations

import logging

from ..core.errors import SkaterNotFoundError, TeamNotFoundError
from ..core.models import MembershipInput, SkaterInput, SkaterRef, TeamInput, TeamModel
from ..repositories.base import RepositorySet

logger = logging.getLogger(__name__)


class TeamService:
    """Team registry and team membership."""

    def __init__(self, repos: RepositorySet):
        self.repos = repos

    def list_teams(self) -> list[TeamModel]:
        return self.repos.teams.list_all()

    def get_team(self, team_id: str) -> TeamModel:
        team = self.repos.teams.find_by_id(team_id)
        if team is None:
            raise TeamNotFoundError(team_id)
        return team

    def create_team(self, data: TeamInput) -> TeamModel:
        team = self.repos.teams.create(data)
        logger.info("Created team %s", team.name)
        return team

    def update_team(self, team_id: str, data: TeamInput) -> TeamModel:
        team = self.repos.teams.update(team_id, data)
        if team is None:
            raise TeamNotFoundError(team_id)
        return team

    def delete_team(self, team_id: str) -> None:
        if not self.repos.teams.delete(team_id):
            raise TeamNotFoundError(team_id)
        logger.info("Deleted team %s", team_id)

    def list_members(self, team_id: str) -> list[SkaterRef]:
        self.get_team(team_id)
        return self.repos.teams.list_skaters(team_id)

    def add_members(self, team_id: str, data: MembershipInput) -> list[SkaterRef]:
        """
        Add skaters to a team and return its members.

        Raises:
            TeamNotFoundError: If the team does not exist
            SkaterNotFoundError: For the first skater ID that does not exist
        """
        self.get_team(team_id)
        found = self.repos.skaters.find_by_ids(data.skater_ids)
        for skater_id in data.skater_ids:
            if skater_id not in found:
                raise SkaterNotFoundError(skater_id)
        self.repos.teams.add_skaters(team_id, data.skater_ids)
        return self.repos.teams.list_skaters(team_id)

    def remove_member(self, team_id: str, skater_id: str) -> None:
        self.get_team(team_id)
        if not self.repos.teams.remove_skater(team_id, skater_id):
            raise SkaterNotFoundError(skater_id, f"Skater {skater_id} is not on team {team_id}")


class SkaterService:
    """Skater registry."""

    def __init__(self, repos: RepositorySet):
        self.repos = repos

    def list_skaters(self) -> list[SkaterRef]:
        return self.repos.skaters.list_all()

    def get_skater(self, skater_id: str) -> SkaterRef:
        skater = self.repos.skaters.find_by_id(skater_id)
        if skater is None:
            raise SkaterNotFoundError(skater_id)
        return skater

    def list_teams(self, skater_id: str) -> list[TeamModel]:
        self.get_skater(skater_id)
        return self.repos.teams.list_for_skater(skater_id)

    def create_skater(self, data: SkaterInput) -> SkaterRef:
        return self.repos.skaters.create(data)

    def update_skater(self, skater_id: str, data: SkaterInput) -> SkaterRef:
        skater = self.repos.skaters.update(skater_id, data)
        if skater is None:
            raise SkaterNotFoundError(skater_id)
        return skater

    def delete_skater(self, skater_id: str) -> None:
        if not self.repos.skaters.delete(skater_id):
            raise SkaterNotFoundError(skater_id)
        logger.info("Deleted skater %s", skater_id)
