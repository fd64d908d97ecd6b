"""
Skaters router - skater registry.

Endpoints:
- GET / - All skaters ordered by jersey number
- POST / - Create a skater
- GET /{skater_id} - Skater with the teams they belong to
- PUT /{skater_id} - Update a skater
- DELETE /{skater_id} - Delete a skater
"""

from typing import Any

from fastapi import APIRouter, Response

from ...core.models import SkaterInput
from ..dependencies import SkaterServiceDependency

router = APIRouter()


@router.get("")
def list_skaters(service: SkaterServiceDependency) -> dict[str, Any]:
    return {"skaters": [skater.model_dump(mode="json") for skater in service.list_skaters()]}


@router.post("", status_code=201)
def create_skater(data: SkaterInput, service: SkaterServiceDependency) -> dict[str, Any]:
    return service.create_skater(data).model_dump(mode="json")


@router.get("/{skater_id}")
def get_skater(skater_id: str, service: SkaterServiceDependency) -> dict[str, Any]:
    skater = service.get_skater(skater_id).model_dump(mode="json")
    skater["teams"] = [team.model_dump(mode="json") for team in service.list_teams(skater_id)]
    return skater


@router.put("/{skater_id}")
def update_skater(
    skater_id: str, data: SkaterInput, service: SkaterServiceDependency
) -> dict[str, Any]:
    return service.update_skater(skater_id, data).model_dump(mode="json")


@router.delete("/{skater_id}", status_code=204)
def delete_skater(skater_id: str, service: SkaterServiceDependency) -> Response:
    service.delete_skater(skater_id)
    return Response(status_code=204)
