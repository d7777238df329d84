# app/utils/response.py

from typing import TypeVar, Generic, Optional, Dict, Any

from fastapi import Response
from pydantic import BaseModel

T = TypeVar("T")


def success_response(message: str, data: Optional[T] = None) -> Dict[str, Any]:
    return {
        "success": True,
        "message": message,
        "data": data,
    }


def file_response(filename: str, content: bytes, media_type: str = "application/pdf") -> Response:
    """Raw download outside the JSON envelope."""
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


class APIResponse(BaseModel, Generic[T]):
    success: bool = True
    message: str
    data: Optional[T] = None
