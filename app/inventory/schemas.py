from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.db_models import Role


class InventorySort(str, Enum):
    NAME = "name"
    BASE_OVERALL = "base_overall"
    RARITY = "rarity"
    ACQUIRED_AT = "acquired_at"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class InventoryQuery(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    position: Role | None = None
    rarity: int | None = Field(default=None, ge=1, le=5)
    min_overall: int | None = Field(default=None, ge=40, le=99)
    max_overall: int | None = Field(default=None, ge=40, le=99)
    sort: InventorySort = InventorySort.ACQUIRED_AT
    order: SortOrder = SortOrder.DESC
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1, le=100)

    @model_validator(mode="after")
    def check_overall_range(self) -> InventoryQuery:
        if (
            self.min_overall is not None
            and self.max_overall is not None
            and self.min_overall > self.max_overall
        ):
            raise ValueError("min_overall cannot exceed max_overall")
        return self
