"""Response envelope models.

Success bodies are {"data": ...}; error bodies are {"error": {...}} with a
machine-readable code. The two shapes never overlap.
"""

from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class DataResponse(BaseModel, Generic[T]):
    """Standard response envelope for single resources.

    All success responses use {"data": ...} envelope.

    Usage:
        @router.get("/users/me")
        async def get_me(user: CurrentUser) -> DataResponse[UserPublic]:
            return DataResponse(data=UserPublic.from_user(user))
    """

    data: T


class ErrorDetail(BaseModel):
    """Error detail for response body.

    Attributes:
        code: Machine-readable error code (e.g., "INSUFFICIENT_BALANCE").
        message: Human-readable error message.
        details: Optional list of extra context (field errors, balance).
    """

    code: str
    message: str
    details: list[dict] | None = None


class ErrorResponse(BaseModel):
    """Standard error response envelope.

    All errors use {"error": {...}} envelope.

    Usage in exception handlers:
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(
                error=ErrorDetail(code=exc.code, message=exc.message)
            ).model_dump(),
        )
    """

    error: ErrorDetail
