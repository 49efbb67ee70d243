from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any
from uuid import UUID

from sqlalchemy import case, update
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from app.db_models import Player, Role, Squad, SquadPosition, SlotType, utcnow
from app.logger import logger
from app.player.service import PlayerService, player_summary
from app.squad.exceptions import (
    DuplicateAssignment,
    Forbidden,
    PlayerNotFound,
    PlayerNotInInventory,
    PositionMismatch,
    SlotNotFound,
    SquadNameExists,
    SquadNotFound,
    SquadServiceError,
)
from app.squad.formations import Formation, generate_position_slots, is_position_compatible
from app.squad.schemas import PositionAssignment

OwnershipCheck = Callable[[UUID, UUID], bool]


def _squad_fields(squad: Squad) -> dict[str, Any]:
    return {
        "id": str(squad.id),
        "user_id": str(squad.user_id),
        "name": squad.name,
        "formation": squad.formation,
        "is_active": squad.is_active,
        "created_at": squad.created_at.isoformat(),
        "updated_at": squad.updated_at.isoformat(),
    }


class SquadService:
    """Squads and their position slots.

    Every write runs in a single transaction on the injected session: either
    all of it is committed or the session is rolled back.
    """

    def __init__(self, session: Session):
        self.session = session
        self.players = PlayerService(session)

    def _get_owned_squad(self, squad_id: UUID, user_id: UUID, lock: bool = False) -> Squad:
        stmt = select(Squad).where(Squad.id == squad_id)
        if lock:
            # Serializes concurrent lineup edits on the same squad (no-op on SQLite)
            stmt = stmt.with_for_update()
        squad = self.session.exec(stmt).first()
        if squad is None:
            raise SquadNotFound()
        if squad.user_id != user_id:
            raise Forbidden()
        return squad

    def _name_taken(self, user_id: UUID, name: str) -> bool:
        existing = self.session.exec(
            select(Squad.id).where(Squad.user_id == user_id).where(Squad.name == name)
        ).first()
        return existing is not None

    def create_squad(
        self,
        user_id: UUID,
        name: str,
        formation: Formation | str,
        is_active: bool = False,
    ) -> dict[str, Any]:
        slots = generate_position_slots(formation)

        if self._name_taken(user_id, name):
            raise SquadNameExists()

        try:
            if is_active:
                self.session.exec(
                    update(Squad)
                    .where(Squad.user_id == user_id)
                    .where(Squad.is_active == True)  # noqa: E712
                    .values(is_active=False, updated_at=utcnow())
                )

            squad = Squad(
                user_id=user_id,
                name=name,
                formation=Formation(formation).value,
                is_active=is_active,
            )
            self.session.add(squad)
            self.session.flush()

            positions = [
                SquadPosition(
                    squad_id=squad.id,
                    position_slot=slot.position_slot,
                    slot_type=slot.slot_type,
                    player_id=None,
                )
                for slot in slots
            ]
            self.session.add_all(positions)
            self.session.flush()

            data = _squad_fields(squad)
            data["positions"] = [
                {
                    "id": str(pos.id),
                    "position_slot": pos.position_slot,
                    "slot_type": SlotType(pos.slot_type).value,
                    "player_id": None,
                }
                for pos in positions
            ]
            self.session.commit()
        except IntegrityError as err:
            self.session.rollback()
            # Lost a race against a concurrent insert of the same name
            if self._name_taken(user_id, name):
                raise SquadNameExists() from err
            raise
        except Exception:
            self.session.rollback()
            raise

        logger.bind(user_id=str(user_id), squad_id=data["id"]).info(
            f"Squad created with formation {data['formation']}"
        )
        return data

    def get_squad_by_id(
        self, squad_id: UUID, user_id: UUID, include_stats: bool = False
    ) -> dict[str, Any]:
        squad = self._get_owned_squad(squad_id, user_id)

        rows = self.session.exec(
            select(SquadPosition, Player)
            .join(Player, Player.id == SquadPosition.player_id, isouter=True)
            .where(SquadPosition.squad_id == squad.id)
            .order_by(
                case((SquadPosition.slot_type == SlotType.STARTER, 0), else_=1),
                SquadPosition.position_slot,
            )
        ).all()

        positions = [
            {
                "id": str(pos.id),
                "position_slot": pos.position_slot,
                "slot_type": SlotType(pos.slot_type).value,
                "player_id": str(pos.player_id) if pos.player_id else None,
                "player": player_summary(player, include_stats) if player else None,
            }
            for (pos, player) in rows
        ]

        starters = sum(1 for p in positions if p["slot_type"] == SlotType.STARTER.value)
        filled = sum(1 for p in positions if p["player_id"] is not None)

        data = _squad_fields(squad)
        data.update(
            {
                "positions": positions,
                "starters_count": starters,
                "bench_count": len(positions) - starters,
                "filled_positions": filled,
                "empty_positions": len(positions) - filled,
            }
        )
        return data

    def _validate_assignments(
        self,
        user_id: UUID,
        assignments: Sequence[PositionAssignment],
        slots: dict[str, SquadPosition],
        owns_player: OwnershipCheck,
    ) -> None:
        requested = [a.player_id for a in assignments if a.player_id is not None]
        if len(set(requested)) != len(requested):
            raise DuplicateAssignment()

        for a in assignments:
            if a.position_slot not in slots:
                raise SlotNotFound(a.position_slot)

        catalog = self.players.get_players(requested)
        for a in assignments:
            if a.player_id is None:
                continue
            if not owns_player(user_id, a.player_id):
                raise PlayerNotInInventory()
            player = catalog.get(a.player_id)
            if player is None:
                raise PlayerNotFound()
            if not is_position_compatible(player.position, a.position_slot):
                raise PositionMismatch(
                    f"Player position {Role(player.position).value} is not compatible "
                    f"with slot {a.position_slot}"
                )

    def update_lineup(
        self,
        squad_id: UUID,
        user_id: UUID,
        assignments: Sequence[PositionAssignment],
        owns_player: OwnershipCheck,
    ) -> dict[str, Any]:
        if not assignments:
            raise ValueError("assignments must contain at least one position")

        try:
            squad = self._get_owned_squad(squad_id, user_id, lock=True)
            slots = {
                s.position_slot: s
                for s in self.session.exec(
                    select(SquadPosition).where(SquadPosition.squad_id == squad.id)
                ).all()
            }

            self._validate_assignments(user_id, assignments, slots, owns_player)

            targets = {a.position_slot: a.player_id for a in assignments}
            placed = {pid for pid in targets.values() if pid is not None}
            vacated = [
                name
                for name, s in slots.items()
                if s.player_id in placed and name not in targets
            ]

            now = utcnow()
            # Clear first so the one-slot-per-player index never sees a
            # transient duplicate while players swap or move
            for name in [*targets, *vacated]:
                slots[name].player_id = None
                slots[name].updated_at = now
                self.session.add(slots[name])
            self.session.flush()

            for name, player_id in targets.items():
                if player_id is not None:
                    slots[name].player_id = player_id
                    self.session.add(slots[name])

            squad.updated_at = now
            self.session.add(squad)
            self.session.commit()
        except SquadServiceError as err:
            self.session.rollback()
            logger.bind(squad_id=str(squad_id), user_id=str(user_id)).warning(
                f"Lineup update rejected: {err.code}"
            )
            raise
        except Exception:
            self.session.rollback()
            raise

        logger.bind(squad_id=str(squad_id), user_id=str(user_id)).info(
            f"Lineup updated: {len(targets)} slot(s) assigned, {len(vacated)} vacated"
        )
        return self.get_squad_by_id(squad_id, user_id, include_stats=True)
