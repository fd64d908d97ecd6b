"""
Games router - games, their rosters and the jam ledger.

Endpoints:
- GET / - All games, latest first
- POST / - Create a game
- GET /{game_id} - Game with home and visiting teams
- PUT /{game_id} - Update a game
- DELETE /{game_id} - Delete a game with its rosters and jams
- GET /{game_id}/rosters - Rosters of the teams playing
- PUT /{game_id}/rosters/{team_id} - Create or replace a team's roster
- DELETE /{game_id}/rosters/{team_id} - Delete a team's roster
- GET /{game_id}/jams - Jam ledger, optionally for one period
- GET /{game_id}/jams/{period}/{jam_number} - One jam slot
- PUT /{game_id}/jams/{period}/{jam_number} - Save one jam slot (empty entries are skipped)
"""

from typing import Annotated, Any

from fastapi import APIRouter, Path, Query, Response

from ...core.models import GameInput, JamEntry, RosterInput
from ...core.types import parse_period_filter, ALL_PERIODS
from ..dependencies import (
    GameServiceDependency,
    JamEntryServiceDependency,
    RosterServiceDependency,
)

router = APIRouter()

PeriodPath = Annotated[int, Path(ge=1, le=2, description="Period: 1 or 2")]
JamNumberPath = Annotated[int, Path(ge=1, description="Jam number within the period")]


@router.get("")
def list_games(service: GameServiceDependency) -> dict[str, Any]:
    """List all games, latest start first and undated games last."""
    games = service.list_games()
    return {"games": [game.model_dump(mode="json") for game in games]}


@router.post("", status_code=201)
def create_game(data: GameInput, service: GameServiceDependency) -> dict[str, Any]:
    return service.create_game(data).model_dump(mode="json")


@router.get("/{game_id}")
def get_game(game_id: str, service: GameServiceDependency) -> dict[str, Any]:
    """Get a game with its teams."""
    return service.get_game(game_id).model_dump(mode="json")


@router.put("/{game_id}")
def update_game(game_id: str, data: GameInput, service: GameServiceDependency) -> dict[str, Any]:
    return service.update_game(game_id, data).model_dump(mode="json")


@router.delete("/{game_id}", status_code=204)
def delete_game(game_id: str, service: GameServiceDependency) -> Response:
    service.delete_game(game_id)
    return Response(status_code=204)


@router.get("/{game_id}/rosters")
def list_rosters(game_id: str, service: RosterServiceDependency) -> dict[str, Any]:
    """List the rosters recorded for a game, with their jammers and lines."""
    rosters = service.list_rosters(game_id)
    return {
        "game_id": game_id,
        "rosters": [roster.model_dump(mode="json") for roster in rosters],
    }


@router.put("/{game_id}/rosters/{team_id}")
def save_roster(
    game_id: str,
    team_id: str,
    data: RosterInput,
    service: RosterServiceDependency,
) -> dict[str, Any]:
    """
    Create or replace a team's roster for a game.

    Lines that keep their name keep their ID, so jams already recorded
    against them still resolve.
    """
    return service.save_roster(game_id, team_id, data).model_dump(mode="json")


@router.delete("/{game_id}/rosters/{team_id}", status_code=204)
def delete_roster(game_id: str, team_id: str, service: RosterServiceDependency) -> Response:
    service.delete_roster(game_id, team_id)
    return Response(status_code=204)


@router.get("/{game_id}/jams")
def list_jams(
    game_id: str,
    service: GameServiceDependency,
    jam_service: JamEntryServiceDependency,
    period: Annotated[str, Query(description="all, 1 or 2")] = ALL_PERIODS,
) -> dict[str, Any]:
    """List the jams recorded for a game, ordered by period and jam number."""
    period_filter = parse_period_filter(period)
    service.get_game(game_id)

    jams = jam_service.list_jams(game_id, None if period_filter == ALL_PERIODS else period_filter)
    return {
        "game_id": game_id,
        "period": period_filter,
        "jams": [jam.model_dump(mode="json") for jam in jams],
    }


@router.get("/{game_id}/jams/{period}/{jam_number}")
def get_jam(
    game_id: str,
    period: PeriodPath,
    jam_number: JamNumberPath,
    jam_service: JamEntryServiceDependency,
) -> dict[str, Any]:
    """Get the jam recorded for one slot."""
    return jam_service.get_jam(game_id, period, jam_number).model_dump(mode="json")


@router.put("/{game_id}/jams/{period}/{jam_number}")
def save_jam(
    game_id: str,
    period: PeriodPath,
    jam_number: JamNumberPath,
    entry: JamEntry,
    service: GameServiceDependency,
    jam_service: JamEntryServiceDependency,
) -> dict[str, Any]:
    """Save the values entered for one jam slot."""
    service.get_game(game_id)

    record = jam_service.save_jam(game_id, period, jam_number, entry)
    return {
        "saved": record is not None,
        "jam": record.model_dump(mode="json") if record else None,
    }
