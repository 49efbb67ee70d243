from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from app.dependencies import CurrentUser
from app.inventory.service import InventoryService
from app.squad.schemas import CreateSquadRequest, UpdateLineupRequest
from app.squad.service import SquadService
from app.utils.db import get_session
from app.utils.responses import ResponseSchema

squad_router = APIRouter(prefix="/squads", tags=["Squads"])


@squad_router.post("")
def create_squad(
    body: CreateSquadRequest,
    user: CurrentUser,
    session: Session = Depends(get_session),
):
    squad = SquadService(session).create_squad(
        user.id, body.name, body.formation, body.is_active
    )
    return ResponseSchema.created(data={"squad": squad}, message="Squad created successfully")


@squad_router.get("/{squad_id}")
def get_squad(
    squad_id: UUID,
    user: CurrentUser,
    include_stats: bool = Query(False),
    session: Session = Depends(get_session),
):
    squad = SquadService(session).get_squad_by_id(squad_id, user.id, include_stats)
    return ResponseSchema.success(data={"squad": squad})


@squad_router.put("/{squad_id}/lineup")
def update_lineup(
    squad_id: UUID,
    body: UpdateLineupRequest,
    user: CurrentUser,
    session: Session = Depends(get_session),
):
    inventory = InventoryService(session)
    squad = SquadService(session).update_lineup(
        squad_id, user.id, body.positions, inventory.user_owns_player
    )
    return ResponseSchema.success(data={"squad": squad}, message="Lineup updated successfully")
