from typing import Any, Dict, Generic, Optional, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


def success_response(message: str, data: Optional[Any] = None) -> Dict[str, Any]:
    return {"success": True, "message": message, "data": data}


def error_response(message: str, error_code: str, details: Optional[Any] = None) -> Dict[str, Any]:
    """Envelope every failed request is rendered with; see core/error_handlers.py."""
    return {
        "success": False,
        "message": message,
        "error_code": error_code,
        "details": details,
    }


class APIResponse(BaseModel, Generic[T]):
    success: bool = True
    message: str
    data: Optional[T] = None


class APIErrorResponse(BaseModel):
    success: bool = False
    message: str
    error_code: str
    details: Optional[Any] = None
