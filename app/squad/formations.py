"""Formation catalog, slot generation and slot compatibility rules.

Everything here is pure data or pure functions; the squad service is the only
place that persists what these produce.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType

from app.db_models import Role, SlotType
from app.squad.exceptions import InvalidFormation

BENCH_PREFIX = "BENCH_"
BENCH_SIZE = 7

# Stable emission order for starter slots
STARTER_ROLE_ORDER: tuple[Role, ...] = (
    Role.GOALKEEPER,
    Role.DEFENDER,
    Role.MIDFIELDER,
    Role.FORWARD,
)


class Formation(str, Enum):
    F_4_3_3 = "4-3-3"
    F_4_2_4 = "4-2-4"
    F_5_3_2 = "5-3-2"
    F_3_5_2 = "3-5-2"
    F_4_4_2 = "4-4-2"


@dataclass(frozen=True)
class FormationLayout:
    starters: MappingProxyType
    bench: int = BENCH_SIZE

    @property
    def total_slots(self) -> int:
        return sum(self.starters.values()) + self.bench


@dataclass(frozen=True)
class PositionSlot:
    position_slot: str
    slot_type: SlotType


def _layout(df: int, mf: int, fw: int) -> FormationLayout:
    return FormationLayout(
        starters=MappingProxyType(
            {
                Role.GOALKEEPER: 1,
                Role.DEFENDER: df,
                Role.MIDFIELDER: mf,
                Role.FORWARD: fw,
            }
        )
    )


FORMATIONS: MappingProxyType = MappingProxyType(
    {
        Formation.F_4_3_3: _layout(4, 3, 3),
        Formation.F_4_2_4: _layout(4, 2, 4),
        Formation.F_5_3_2: _layout(5, 3, 2),
        Formation.F_3_5_2: _layout(3, 5, 2),
        Formation.F_4_4_2: _layout(4, 4, 2),
    }
)

def get_formation_layout(formation: Formation | str) -> FormationLayout:
    try:
        return FORMATIONS[Formation(formation)]
    except ValueError as err:
        raise InvalidFormation(str(formation)) from err


def generate_position_slots(formation: Formation | str) -> list[PositionSlot]:
    """Return the ordered slot set a squad of ``formation`` must have.

    Starters come first in goalkeeper, defender, midfielder, forward order,
    each numbered from 1 (``DF_1``..``DF_4``); bench slots follow as
    ``BENCH_1``..``BENCH_7``.
    """
    layout = get_formation_layout(formation)

    slots: list[PositionSlot] = []
    for role in STARTER_ROLE_ORDER:
        for i in range(1, layout.starters[role] + 1):
            slots.append(PositionSlot(f"{role.value}_{i}", SlotType.STARTER))

    for i in range(1, layout.bench + 1):
        slots.append(PositionSlot(f"{BENCH_PREFIX}{i}", SlotType.BENCH))

    return slots


def is_position_compatible(player_position: Role | str, position_slot: str) -> bool:
    """Whether a player of ``player_position`` may fill ``position_slot``.

    Utility players and bench slots accept anyone; otherwise the slot prefix
    must equal the player's role. Malformed slots are simply incompatible.
    """
    role = player_position.value if isinstance(player_position, Role) else str(player_position)

    if role == Role.UTILITY.value:
        return True

    if position_slot.startswith(BENCH_PREFIX):
        return True

    slot_role = position_slot.split("_", 1)[0]
    return role == slot_role
