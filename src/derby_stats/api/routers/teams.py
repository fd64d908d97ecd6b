"""
Teams router - team registry and team membership.

Endpoints:
- GET / - All teams ordered by name
- POST / - Create a team
- GET /{team_id} - Team with its skaters
- PUT /{team_id} - Update a team
- DELETE /{team_id} - Delete a team
- GET /{team_id}/skaters - Team members
- POST /{team_id}/skaters - Add skaters to the team
- DELETE /{team_id}/skaters/{skater_id} - Remove a skater from the team
"""

from typing import Any

from fastapi import APIRouter, Response

from ...core.models import MembershipInput, TeamInput
from ..dependencies import TeamServiceDependency

router = APIRouter()


@router.get("")
def list_teams(service: TeamServiceDependency) -> dict[str, Any]:
    return {"teams": [team.model_dump(mode="json") for team in service.list_teams()]}


@router.post("", status_code=201)
def create_team(data: TeamInput, service: TeamServiceDependency) -> dict[str, Any]:
    return service.create_team(data).model_dump(mode="json")


@router.get("/{team_id}")
def get_team(team_id: str, service: TeamServiceDependency) -> dict[str, Any]:
    """Get a team with its skaters ordered by jersey number."""
    team = service.get_team(team_id).model_dump(mode="json")
    team["skaters"] = [skater.model_dump(mode="json") for skater in service.list_members(team_id)]
    return team


@router.put("/{team_id}")
def update_team(team_id: str, data: TeamInput, service: TeamServiceDependency) -> dict[str, Any]:
    return service.update_team(team_id, data).model_dump(mode="json")


@router.delete("/{team_id}", status_code=204)
def delete_team(team_id: str, service: TeamServiceDependency) -> Response:
    service.delete_team(team_id)
    return Response(status_code=204)


@router.get("/{team_id}/skaters")
def list_members(team_id: str, service: TeamServiceDependency) -> dict[str, Any]:
    skaters = service.list_members(team_id)
    return {"team_id": team_id, "skaters": [skater.model_dump(mode="json") for skater in skaters]}


@router.post("/{team_id}/skaters")
def add_members(
    team_id: str, data: MembershipInput, service: TeamServiceDependency
) -> dict[str, Any]:
    """Add skaters to a team. Skaters already on the team are left as they are."""
    skaters = service.add_members(team_id, data)
    return {"team_id": team_id, "skaters": [skater.model_dump(mode="json") for skater in skaters]}


@router.delete("/{team_id}/skaters/{skater_id}", status_code=204)
def remove_member(team_id: str, skater_id: str, service: TeamServiceDependency) -> Response:
    service.remove_member(team_id, skater_id)
    return Response(status_code=204)
