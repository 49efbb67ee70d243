from typing import Any, Generic, TypeVar

from fastapi import status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

T = TypeVar("T")


class BaseResponse(BaseModel, Generic[T]):
    status_code: int
    message: str
    data: T | None = None
    error: str | None = None
    meta: dict[str, Any] | None = None


def _envelope(response: BaseResponse) -> dict[str, Any]:
    # Only unset envelope keys are dropped; None inside data is meaningful
    return {k: v for k, v in response.model_dump().items() if v is not None}


class ResponseSchema:
    @staticmethod
    def success(
        data: Any = None,
        message: str = "Success",
        meta: dict[str, Any] | None = None,
        status_code: int = status.HTTP_200_OK,
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status_code,
            content=_envelope(
                BaseResponse(status_code=status_code, message=message, data=data, meta=meta)
            ),
        )

    @staticmethod
    def created(data: Any = None, message: str = "Created") -> JSONResponse:
        return ResponseSchema.success(
            data=data, message=message, status_code=status.HTTP_201_CREATED
        )

    @staticmethod
    def error(
        message: str,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        error: str | None = None,
        meta: dict[str, Any] | None = None,
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status_code,
            content=_envelope(
                BaseResponse(status_code=status_code, message=message, error=error, meta=meta)
            ),
        )

    @staticmethod
    def not_found(
        message: str = "Resource not found", error: str | None = None
    ) -> JSONResponse:
        return ResponseSchema.error(
            message=message, status_code=status.HTTP_404_NOT_FOUND, error=error
        )

    @staticmethod
    def bad_request(
        message: str = "Bad request", error: str | None = None
    ) -> JSONResponse:
        return ResponseSchema.error(
            message=message, status_code=status.HTTP_400_BAD_REQUEST, error=error
        )

    @staticmethod
    def unauthorized(
        message: str = "Unauthorized", error: str | None = None
    ) -> JSONResponse:
        return ResponseSchema.error(
            message=message, status_code=status.HTTP_401_UNAUTHORIZED, error=error
        )

    @staticmethod
    def too_many_requests(
        message: str = "Too many requests", error: str | None = None
    ) -> JSONResponse:
        return ResponseSchema.error(
            message=message, status_code=status.HTTP_429_TOO_MANY_REQUESTS, error=error
        )

    @staticmethod
    def conflict(message: str = "Conflict", error: str | None = None) -> JSONResponse:
        return ResponseSchema.error(
            message=message, status_code=status.HTTP_409_CONFLICT, error=error
        )

    @staticmethod
    def pagination_response(
        data: list[Any], total: int, page: int, page_size: int, message: str = "Success"
    ) -> JSONResponse:
        meta = {
            "total": total,
            "page": page,
            "page_size": page_size,
            "total_pages": (total + page_size - 1) // page_size,
        }
        return ResponseSchema.success(data=data, message=message, meta=meta)
