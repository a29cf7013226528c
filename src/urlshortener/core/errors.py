from __future__ import annotations
from dataclasses import dataclass
from typing import Any

from fastapi import HTTPException


@dataclass(frozen=True)
class ApiError:
    code: str
    message: str


STATUS_TO_ERROR_CODE: dict[int, str] = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
    422: "VALIDATION_ERROR",
    500: "INTERNAL_SERVER_ERROR",
}


class ShortenerError(Exception):
    """Base class for errors the HTTP layer turns into an error envelope."""

    status_code: int = 500
    code: str = "INTERNAL_SERVER_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_api_error(self) -> ApiError:
        return ApiError(code=self.code, message=self.message)


class ValidationError(ShortenerError):
    status_code = 400
    code = "VALIDATION_ERROR"


class Unauthorized(ShortenerError):
    status_code = 401
    code = "UNAUTHORIZED"


class NotFound(ShortenerError):
    status_code = 404
    code = "NOT_FOUND"


class StorageError(ShortenerError):
    # message is logged server-side only; clients get a generic one
    status_code = 500
    code = "INTERNAL_SERVER_ERROR"


class AllocationExhausted(StorageError):
    def __init__(self, attempts: int) -> None:
        super().__init__(f"allocation exhausted after {attempts} attempts")
        self.attempts = attempts


def normalize_http_exception(exc: HTTPException) -> ApiError:
    """
    Converts HTTPException.detail into (code, message).

    Supports:
    - detail as str -> message=str, code inferred from status
    - detail as {"code": "...", "message": "..."} -> use directly
    - detail as {"error": {"code": "...", "message": "..."}} -> use directly
    """
    status = exc.status_code
    default_code = STATUS_TO_ERROR_CODE.get(status, "ERROR")

    detail: Any = exc.detail
    if isinstance(detail, dict):
        if "error" in detail and isinstance(detail["error"], dict):
            inner = detail["error"]
            if "code" in inner and "message" in inner:
                return ApiError(code=str(inner["code"]), message=str(inner["message"]))
        if "code" in detail and "message" in detail:
            return ApiError(code=str(detail["code"]), message=str(detail["message"]))

    # fallback
    msg = detail if isinstance(detail, str) else "Request failed"
    return ApiError(code=default_code, message=str(msg))


def error_body(error: ApiError) -> dict[str, Any]:
    return {"error": {"code": error.code, "message": error.message}}
