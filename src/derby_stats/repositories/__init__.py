"""
Repository abstraction layer.

Provides database-agnostic interfaces for data access,
allowing services to be exercised against in-memory implementations.

Usage:
    from derby_stats.repositories import get_repositories

    repos = get_repositories(db)
    jams = repos.jams.list_for_game(game_id)
    skaters = repos.skaters.find_by_ids({jam.home_jammer_id for jam in jams})
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .base import (
    GameRepository,
    JamRepository,
    LineRepository,
    RepositorySet,
    RosterRepository,
    SkaterRepository,
    TeamRepository,
)

if TYPE_CHECKING:
    from ..pg_connection import PostgresDB

__all__ = [
    "GameRepository",
    "JamRepository",
    "LineRepository",
    "RosterRepository",
    "SkaterRepository",
    "TeamRepository",
    "RepositorySet",
    "get_repositories",
]


def get_repositories(db: "PostgresDB") -> RepositorySet:
    """
    Get repository set for the given database connection.

    Args:
        db: Database connection

    Returns:
        RepositorySet with all repository implementations
    """
    from .postgres import (
        PostgresGameRepository,
        PostgresJamRepository,
        PostgresLineRepository,
        PostgresRosterRepository,
        PostgresSkaterRepository,
        PostgresTeamRepository,
    )

    return RepositorySet(
        games=PostgresGameRepository(db),
        jams=PostgresJamRepository(db),
        skaters=PostgresSkaterRepository(db),
        lines=PostgresLineRepository(db),
        teams=PostgresTeamRepository(db),
        rosters=PostgresRosterRepository(db),
    )
