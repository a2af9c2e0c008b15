from typing import Any, List, Optional

from fastapi.responses import JSONResponse

from storefront.models.schemas import ApiResponse


def envelope(status_code: int, success: bool, message: str, data: Any = None, errors: Optional[List[str]] = None):
    body = ApiResponse(success=success, message=message, data=data, errors=errors)
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


def ok(data: Any = None, message: str = "OK", status_code: int = 200):
    return envelope(status_code, True, message, data)


def created(data: Any = None, message: str = "Created"):
    return envelope(201, True, message, data)


def fail(status_code: int, message: str, errors: Optional[List[str]] = None):
    return envelope(status_code, False, message, None, errors or [message])
