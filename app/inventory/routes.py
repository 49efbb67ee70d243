from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from app.dependencies import CurrentUser
from app.inventory.schemas import InventoryQuery
from app.inventory.service import InventoryService
from app.utils.db import get_session
from app.utils.responses import ResponseSchema

# Shares the /players prefix; include before player_router so the literal
# path wins over /players/{player_id}
inventory_router = APIRouter(prefix="/players", tags=["Inventory"])


@inventory_router.get("/my-inventory")
def my_inventory(
    user: CurrentUser,
    query: Annotated[InventoryQuery, Query()],
    session: Session = Depends(get_session),
):
    data, total = InventoryService(session).get_user_inventory(user.id, query)
    return ResponseSchema.pagination_response(
        data, total=total, page=query.page, page_size=query.limit
    )
