"""
Domain exceptions for Derby Stats.

The API layer translates these into its uniform error envelope
(see derby_stats.api.errors).
"""

from typing import Any


class DerbyStatsError(Exception):
    """Base class for all Derby Stats errors."""


class EntityNotFoundError(DerbyStatsError):
    """No record of some kind exists with the requested ID."""

    resource = "Record"

    def __init__(self, identifier: Any, message: str | None = None):
        self.identifier = identifier
        super().__init__(message or f"{self.resource} {identifier} not found")


class GameNotFoundError(EntityNotFoundError):
    resource = "Game"

    def __init__(self, game_id: Any):
        self.game_id = game_id
        super().__init__(game_id)


class TeamNotFoundError(EntityNotFoundError):
    resource = "Team"


class SkaterNotFoundError(EntityNotFoundError):
    resource = "Skater"


class RosterNotFoundError(EntityNotFoundError):
    """A team has no roster for the game."""

    resource = "Roster"

    def __init__(self, game_id: Any, team_id: Any):
        self.game_id = game_id
        self.team_id = team_id
        super().__init__(
            f"{team_id} in game {game_id}",
            f"No roster for team {team_id} in game {game_id}",
        )


class JamNotFoundError(EntityNotFoundError):
    """No jam is recorded for the requested slot."""

    resource = "Jam"

    def __init__(self, game_id: Any, period: int, jam_number: int):
        self.game_id = game_id
        self.period = period
        self.jam_number = jam_number
        super().__init__(
            f"P{period} J{jam_number} in game {game_id}",
            f"Jam P{period} J{jam_number} not found for game {game_id}",
        )


class InvalidSelectionError(DerbyStatsError, ValueError):
    """A side or period selector value is not valid."""


class InvalidReferenceError(DerbyStatsError, ValueError):
    """Input refers to a team, skater or line that does not exist or is not allowed there."""


class StaleResponseError(DerbyStatsError):
    """A response arrived for a selection that has since been replaced."""

    def __init__(self, token: int, current: int):
        self.token = token
        self.current = current
        super().__init__(f"Request {token} superseded by request {current}")
