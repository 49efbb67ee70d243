from __future__ import annotations

import secrets
import time
from datetime import UTC, datetime
from enum import Enum
from uuid import UUID

from sqlalchemy import Column, Index, UniqueConstraint, text
from sqlalchemy import Enum as SAEnum
from sqlalchemy.sql.sqltypes import DateTime
from sqlmodel import Field, SQLModel


def uuid7() -> UUID:
    """Generate a sortable UUID (version 7) using 60-bit ms timestamp.

    Layout (MSB -> LSB):
    - 60 bits: timestamp in milliseconds since Unix epoch
    - 4 bits: version (0111)
    - 2 bits: variant (10)
    - 62 bits: random
    """
    ts_ms = int(time.time_ns() // 1_000_000)
    if ts_ms >= (1 << 60):
        raise ValueError("Timestamp exceeds 60-bit space for UUIDv7")
    rand62 = secrets.randbits(62)
    value = (ts_ms << 68) | (0x7 << 64) | (0b10 << 62) | rand62
    return UUID(int=value)


def utcnow() -> datetime:
    return datetime.now(UTC)


class Role(str, Enum):
    """Positional category of a player."""

    GOALKEEPER = "GK"
    DEFENDER = "DF"
    MIDFIELDER = "MF"
    FORWARD = "FW"
    UTILITY = "UT"


class SlotType(str, Enum):
    STARTER = "STARTER"
    BENCH = "BENCH"


def _tz_column(nullable: bool = False) -> Column:
    return Column(DateTime(timezone=True), nullable=nullable)


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: UUID = Field(default_factory=uuid7, primary_key=True)
    email: str = Field(index=True, unique=True)
    username: str
    hashed_password: str
    created_at: datetime = Field(default_factory=utcnow, sa_column=_tz_column())
    updated_at: datetime = Field(default_factory=utcnow, sa_column=_tz_column())


class Player(SQLModel, table=True):
    __tablename__ = "players"

    id: UUID = Field(default_factory=uuid7, primary_key=True)
    name: str = Field(max_length=100)
    position: Role = Field(
        sa_column=Column(
            SAEnum(Role, name="player_role", values_callable=lambda e: [m.value for m in e]),
            nullable=False,
            index=True,
        )
    )
    rarity: int = Field(ge=1, le=5)
    base_overall: int = Field(ge=40, le=99)
    tier: int = Field(default=0, ge=0, le=5)
    pace: int = Field(ge=1, le=100)
    shooting: int = Field(ge=1, le=100)
    passing: int = Field(ge=1, le=100)
    dribbling: int = Field(ge=1, le=100)
    defending: int = Field(ge=1, le=100)
    physical: int = Field(ge=1, le=100)
    created_at: datetime = Field(default_factory=utcnow, sa_column=_tz_column())
    updated_at: datetime = Field(default_factory=utcnow, sa_column=_tz_column())


class UserInventory(SQLModel, table=True):
    __tablename__ = "user_inventory"
    __table_args__ = (
        UniqueConstraint("user_id", "player_id", name="uq_user_inventory_user_player"),
    )

    id: UUID = Field(default_factory=uuid7, primary_key=True)
    user_id: UUID = Field(foreign_key="users.id", index=True, ondelete="CASCADE")
    player_id: UUID = Field(foreign_key="players.id", ondelete="CASCADE")
    quantity: int = Field(default=1, ge=1, le=50)
    acquired_at: datetime = Field(default_factory=utcnow, sa_column=_tz_column())
    created_at: datetime = Field(default_factory=utcnow, sa_column=_tz_column())


class Squad(SQLModel, table=True):
    __tablename__ = "squads"
    __table_args__ = (
        UniqueConstraint("user_id", "name", name="uq_squads_user_name"),
    )

    id: UUID = Field(default_factory=uuid7, primary_key=True)
    user_id: UUID = Field(foreign_key="users.id", index=True, ondelete="CASCADE")
    name: str = Field(max_length=100)
    formation: str = Field(max_length=10)
    is_active: bool = False
    created_at: datetime = Field(default_factory=utcnow, sa_column=_tz_column())
    updated_at: datetime = Field(default_factory=utcnow, sa_column=_tz_column())


class SquadPosition(SQLModel, table=True):
    __tablename__ = "squad_positions"
    __table_args__ = (
        UniqueConstraint("squad_id", "position_slot", name="uq_squad_positions_slot"),
        # A player may fill at most one slot per squad; empty slots are exempt
        Index(
            "uq_squad_positions_player",
            "squad_id",
            "player_id",
            unique=True,
            postgresql_where=text("player_id IS NOT NULL"),
            sqlite_where=text("player_id IS NOT NULL"),
        ),
    )

    id: UUID = Field(default_factory=uuid7, primary_key=True)
    squad_id: UUID = Field(foreign_key="squads.id", index=True, ondelete="CASCADE")
    player_id: UUID | None = Field(
        default=None, foreign_key="players.id", nullable=True, ondelete="SET NULL"
    )
    position_slot: str = Field(max_length=20)
    slot_type: SlotType = Field(
        sa_column=Column(
            SAEnum(SlotType, name="slot_type", values_callable=lambda e: [m.value for m in e]),
            nullable=False,
        )
    )
    created_at: datetime = Field(default_factory=utcnow, sa_column=_tz_column())
    updated_at: datetime = Field(default_factory=utcnow, sa_column=_tz_column())
