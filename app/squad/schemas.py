from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.squad.formations import Formation


class CreateSquadRequest(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str = Field(min_length=1, max_length=100)
    formation: Formation
    is_active: bool = False


class PositionAssignment(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    position_slot: str = Field(min_length=1, max_length=20)
    player_id: UUID | None = None


class UpdateLineupRequest(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    positions: list[PositionAssignment] = Field(min_length=1)
