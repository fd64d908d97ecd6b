"""
Base repository protocols.

Defines abstract interfaces for the jam ledger, the team, skater and game
registries and the per-game rosters, so services never touch SQL directly.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, Optional

from ..core.models import (
    GameInput,
    GameModel,
    JamRecord,
    LineRef,
    RosterInput,
    RosterModel,
    SkaterInput,
    SkaterRef,
    TeamInput,
    TeamModel,
)


class GameRepository(ABC):
    """Abstract interface for game data access."""

    @abstractmethod
    def find_by_id(self, game_id: str) -> GameModel | None:
        """
        Find a game by ID, with home and visiting teams embedded.

        Args:
            game_id: Game ID

        Returns:
            GameModel, or None if not found
        """
        ...

    @abstractmethod
    def list_all(self) -> list[GameModel]:
        """All games with teams embedded, latest start first, undated games last."""
        ...

    @abstractmethod
    def create(self, data: GameInput) -> GameModel:
        ...

    @abstractmethod
    def update(self, game_id: str, data: GameInput) -> GameModel | None:
        """Replace a game's values. Returns None if the game does not exist."""
        ...

    @abstractmethod
    def delete(self, game_id: str) -> bool:
        """Delete a game with its rosters and jams. Returns False if it did not exist."""
        ...


class JamRepository(ABC):
    """
    Abstract interface for the jam ledger.

    A jam is identified by its (game_id, period, jam_number) slot.
    """

    @abstractmethod
    def list_for_game(self, game_id: str, period: Optional[int] = None) -> list[JamRecord]:
        """
        List the jams of a game.

        Args:
            game_id: Game ID
            period: If provided, only jams from this period

        Returns:
            Jam records ordered by period then jam number
        """
        ...

    @abstractmethod
    def find(self, game_id: str, period: int, jam_number: int) -> JamRecord | None:
        """Find the jam recorded for one slot."""
        ...

    @abstractmethod
    def upsert(self, jam: JamRecord) -> None:
        """
        Insert a jam, or overwrite the one already recorded for its slot.

        Args:
            jam: Jam record to store
        """
        ...


class SkaterRepository(ABC):
    """Abstract interface for skater data access."""

    @abstractmethod
    def find_by_ids(self, skater_ids: Iterable[str]) -> dict[str, SkaterRef]:
        """
        Look up skaters by ID.

        IDs that do not exist are simply absent from the result.

        Returns:
            Mapping of skater ID to its display identity
        """
        ...

    @abstractmethod
    def find_by_id(self, skater_id: str) -> SkaterRef | None:
        ...

    @abstractmethod
    def list_all(self) -> list[SkaterRef]:
        """All skaters ordered by jersey number."""
        ...

    @abstractmethod
    def create(self, data: SkaterInput) -> SkaterRef:
        ...

    @abstractmethod
    def update(self, skater_id: str, data: SkaterInput) -> SkaterRef | None:
        ...

    @abstractmethod
    def delete(self, skater_id: str) -> bool:
        ...


class LineRepository(ABC):
    """Abstract interface for roster line lookups."""

    @abstractmethod
    def find_by_ids(self, line_ids: Iterable[str]) -> dict[str, LineRef]:
        """Look up roster lines by ID; unknown IDs are absent from the result."""
        ...


class TeamRepository(ABC):
    """Abstract interface for teams and their skater membership."""

    @abstractmethod
    def find_by_id(self, team_id: str) -> TeamModel | None:
        ...

    @abstractmethod
    def list_all(self) -> list[TeamModel]:
        """All teams ordered by name."""
        ...

    @abstractmethod
    def create(self, data: TeamInput) -> TeamModel:
        ...

    @abstractmethod
    def update(self, team_id: str, data: TeamInput) -> TeamModel | None:
        ...

    @abstractmethod
    def delete(self, team_id: str) -> bool:
        ...

    @abstractmethod
    def list_skaters(self, team_id: str) -> list[SkaterRef]:
        """Members of a team, ordered by jersey number."""
        ...

    @abstractmethod
    def add_skaters(self, team_id: str, skater_ids: Iterable[str]) -> None:
        """Add skaters to a team; existing members are left as they are."""
        ...

    @abstractmethod
    def remove_skater(self, team_id: str, skater_id: str) -> bool:
        ...

    @abstractmethod
    def list_for_skater(self, skater_id: str) -> list[TeamModel]:
        """Teams a skater belongs to, ordered by name."""
        ...


class RosterRepository(ABC):
    """Abstract interface for per-game team rosters."""

    @abstractmethod
    def list_for_game(self, game_id: str) -> list[RosterModel]:
        ...

    @abstractmethod
    def save(self, game_id: str, team_id: str, data: RosterInput) -> RosterModel:
        """
        Create or replace a team's roster for a game.

        Jammers are replaced by `data.jammer_ids`. Lines whose name is still
        listed keep their ID (and so their jam history); other lines are
        removed and new names are added.
        """
        ...

    @abstractmethod
    def delete(self, game_id: str, team_id: str) -> bool:
        ...


@dataclass
class RepositorySet:
    """
    Collection of all repositories.

    Provides convenient access to all repository implementations.
    """
    games: GameRepository
    jams: JamRepository
    skaters: SkaterRepository
    lines: LineRepository
    teams: TeamRepository
    rosters: RosterRepository
