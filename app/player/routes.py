from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from app.db_models import Role
from app.player.service import PlayerService, player_summary
from app.utils.db import get_session
from app.utils.responses import ResponseSchema

player_router = APIRouter(prefix="/players", tags=["Players"])


@player_router.get("")
def list_players(
    position: Role | None = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    session: Session = Depends(get_session),
):
    svc = PlayerService(session)
    data, total = svc.list_players(position, page, page_size)
    return ResponseSchema.pagination_response(data, total=total, page=page, page_size=page_size)


@player_router.get("/{player_id}")
def get_player(player_id: UUID, session: Session = Depends(get_session)):
    player = PlayerService(session).get_player(player_id)
    if not player:
        return ResponseSchema.not_found("Player not found", error="PLAYER_NOT_FOUND")
    return ResponseSchema.success(data=player_summary(player, include_stats=True))
