from __future__ import annotations

from fastapi import status


class SquadServiceError(Exception):
    """Base class for squad domain failures.

    ``code`` is the stable machine-readable identifier returned to clients,
    ``status_code`` the HTTP status the API layer maps it to.
    """

    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "SQUAD_ERROR"
    default_message: str = "Squad operation failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidFormation(SquadServiceError):
    code = "INVALID_FORMATION"

    def __init__(self, formation: str):
        self.formation = formation
        super().__init__(f"Invalid formation: {formation}")


class SquadNameExists(SquadServiceError):
    status_code = status.HTTP_409_CONFLICT
    code = "SQUAD_NAME_EXISTS"
    default_message = "A squad with this name already exists"


class SquadNotFound(SquadServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "SQUAD_NOT_FOUND"
    default_message = "Squad not found"


class Forbidden(SquadServiceError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "FORBIDDEN"
    default_message = "You do not have permission to access this squad"


class SlotNotFound(SquadServiceError):
    code = "SLOT_NOT_FOUND"

    def __init__(self, position_slot: str):
        self.position_slot = position_slot
        super().__init__(f"Squad has no position slot {position_slot}")


class PlayerNotInInventory(SquadServiceError):
    code = "PLAYER_NOT_IN_INVENTORY"
    default_message = "Player not found in your inventory"


class PlayerNotFound(SquadServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "PLAYER_NOT_FOUND"
    default_message = "Player not found"


class PositionMismatch(SquadServiceError):
    code = "POSITION_MISMATCH"
    default_message = "Player position is not compatible with the slot"


class DuplicateAssignment(SquadServiceError):
    status_code = status.HTTP_409_CONFLICT
    code = "DUPLICATE_ASSIGNMENT"
    default_message = "Player is already assigned to another position in this squad"
