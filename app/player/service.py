from __future__ import annotations

from typing import Any
from uuid import UUID

from sqlalchemy import func
from sqlmodel import Session, select

from app.db_models import Player, Role

SKILL_FIELDS = ("pace", "shooting", "passing", "dribbling", "defending", "physical")


def player_summary(player: Player, include_stats: bool = False) -> dict[str, Any]:
    """Coarse player attributes, plus the six skill ratings when asked."""
    data: dict[str, Any] = {
        "id": str(player.id),
        "name": player.name,
        "position": Role(player.position).value,
        "rarity": player.rarity,
        "base_overall": player.base_overall,
        "tier": player.tier,
    }
    if include_stats:
        for field in SKILL_FIELDS:
            data[field] = getattr(player, field)
    return data


class PlayerService:
    def __init__(self, session: Session):
        self.session = session

    def get_player(self, player_id: UUID) -> Player | None:
        return self.session.get(Player, player_id)

    def get_players(self, player_ids: list[UUID]) -> dict[UUID, Player]:
        if not player_ids:
            return {}
        rows = self.session.exec(select(Player).where(Player.id.in_(player_ids))).all()
        return {p.id: p for p in rows}

    def list_players(
        self,
        position: Role | None,
        page: int,
        page_size: int,
    ) -> tuple[list[dict[str, Any]], int]:
        stmt = select(Player)
        count_stmt = select(func.count()).select_from(Player)
        if position is not None:
            stmt = stmt.where(Player.position == position)
            count_stmt = count_stmt.where(Player.position == position)

        total = self.session.exec(count_stmt).one()

        stmt = (
            stmt.order_by(Player.base_overall.desc(), Player.name)
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        rows = self.session.exec(stmt).all()
        return [player_summary(p, include_stats=True) for p in rows], int(total)
