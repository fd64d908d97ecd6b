"""
Dependency injection for API endpoints.

Routes use the synchronous PostgresDB pool; FastAPI runs sync dependencies
and sync endpoints in its thread pool. Tests override get_repositories to
run the routers against in-memory repositories.
"""

from typing import Annotated

from fastapi import Depends

from ..pg_connection import PostgresDB, get_postgres_db
from ..repositories import RepositorySet
from ..repositories import get_repositories as build_repositories
from ..services import (
    GameService,
    GameStatsService,
    JamEntryService,
    RosterService,
    SkaterService,
    TeamService,
)

_db_instance: PostgresDB | None = None


def get_db() -> PostgresDB:
    """
    Dependency that provides synchronous database connection.

    Returns:
        PostgresDB instance with connection pooling
    """
    global _db_instance
    if _db_instance is None:
        _db_instance = get_postgres_db()
    return _db_instance


def close_db() -> None:
    """Close the global database connection. Called at app shutdown."""
    global _db_instance
    if _db_instance is not None:
        _db_instance.close()
        _db_instance = None


def get_repositories(db: Annotated[PostgresDB, Depends(get_db)]) -> RepositorySet:
    return build_repositories(db)


RepositoriesDependency = Annotated[RepositorySet, Depends(get_repositories)]


def get_stats_service(repos: RepositoriesDependency) -> GameStatsService:
    return GameStatsService(repos)


def get_jam_entry_service(repos: RepositoriesDependency) -> JamEntryService:
    return JamEntryService(repos)


StatsServiceDependency = Annotated[GameStatsService, Depends(get_stats_service)]
JamEntryServiceDependency = Annotated[JamEntryService, Depends(get_jam_entry_service)]


def get_team_service(repos: RepositoriesDependency) -> TeamService:
    return TeamService(repos)


def get_skater_service(repos: RepositoriesDependency) -> SkaterService:
    return SkaterService(repos)


def get_game_service(repos: RepositoriesDependency) -> GameService:
    return GameService(repos)


def get_roster_service(repos: RepositoriesDependency) -> RosterService:
    return RosterService(repos)


TeamServiceDependency = Annotated[TeamService, Depends(get_team_service)]
SkaterServiceDependency = Annotated[SkaterService, Depends(get_skater_service)]
GameServiceDependency = Annotated[GameService, Depends(get_game_service)]
RosterServiceDependency = Annotated[RosterService, Depends(get_roster_service)]
