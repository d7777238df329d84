from fastapi import HTTPException
from app.constants.error_codes import ErrorCode


class AppException(HTTPException):
    """Domain error raised by services and rendered by app_exception_handler."""

    def __init__(
        self,
        status_code: int,
        message: str,
        error_code: ErrorCode,
        details: dict | list | None = None,
    ):
        super().__init__(status_code=status_code, detail=message)
        self.error_code = error_code
        self.details = details


def ensure_version(entity, expected: int, label: str, error_code: ErrorCode) -> None:
    """Optimistic lock check against the row's stored version counter."""
    if entity.version != expected:
        raise AppException(
            409,
            f"{label} was modified by another process",
            error_code,
            details={"expected_version": expected, "current_version": entity.version},
        )
