from __future__ import annotations

from typing import Any
from uuid import UUID

from sqlalchemy import func
from sqlmodel import Session, select

from app.db_models import Player, UserInventory
from app.inventory.schemas import InventoryQuery, InventorySort, SortOrder
from app.logger import logger
from app.player.service import player_summary

_SORT_COLUMNS = {
    InventorySort.NAME: Player.name,
    InventorySort.BASE_OVERALL: Player.base_overall,
    InventorySort.RARITY: Player.rarity,
    InventorySort.ACQUIRED_AT: UserInventory.acquired_at,
}


class InventoryService:
    """Read and grant access to the players a user holds."""

    def __init__(self, session: Session):
        self.session = session

    def user_owns_player(self, user_id: UUID, player_id: UUID) -> bool:
        row = self.session.exec(
            select(UserInventory.id)
            .where(UserInventory.user_id == user_id)
            .where(UserInventory.player_id == player_id)
        ).first()
        return row is not None

    def add_player(self, user_id: UUID, player_id: UUID, quantity: int = 1) -> UserInventory:
        holding = self.session.exec(
            select(UserInventory)
            .where(UserInventory.user_id == user_id)
            .where(UserInventory.player_id == player_id)
        ).first()
        if holding is None:
            holding = UserInventory(user_id=user_id, player_id=player_id, quantity=quantity)
        else:
            holding.quantity = min(50, holding.quantity + quantity)
        self.session.add(holding)
        self.session.commit()
        self.session.refresh(holding)
        logger.bind(user_id=str(user_id), player_id=str(player_id)).info(
            "Inventory holding updated"
        )
        return holding

    def get_user_inventory(
        self, user_id: UUID, query: InventoryQuery
    ) -> tuple[list[dict[str, Any]], int]:
        conditions = [UserInventory.user_id == user_id]
        if query.position is not None:
            conditions.append(Player.position == query.position)
        if query.rarity is not None:
            conditions.append(Player.rarity == query.rarity)
        if query.min_overall is not None:
            conditions.append(Player.base_overall >= query.min_overall)
        if query.max_overall is not None:
            conditions.append(Player.base_overall <= query.max_overall)

        total = self.session.exec(
            select(func.count(UserInventory.id))
            .join(Player, Player.id == UserInventory.player_id)
            .where(*conditions)
        ).one()

        stmt = (
            select(UserInventory, Player)
            .join(Player, Player.id == UserInventory.player_id)
            .where(*conditions)
        )

        column = _SORT_COLUMNS[query.sort]
        ordering = column.asc() if query.order == SortOrder.ASC else column.desc()
        stmt = (
            stmt.order_by(ordering, UserInventory.id)
            .offset((query.page - 1) * query.limit)
            .limit(query.limit)
        )
        rows = self.session.exec(stmt).all()

        data = [
            {
                "inventory_id": str(holding.id),
                "player": player_summary(player, include_stats=True),
                "quantity": holding.quantity,
                "acquired_at": holding.acquired_at.isoformat(),
            }
            for (holding, player) in rows
        ]
        return data, int(total)
