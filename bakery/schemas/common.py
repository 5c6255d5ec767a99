"""
Shared result schema for service actions
"""
from pydantic import BaseModel
from typing import Optional

from bakery.errors import ErrorCode


class ActionResult(BaseModel):
    """Outcome of an action; failures carry a localized message and a code"""
    success: bool
    error: Optional[str] = None
    error_code: Optional[ErrorCode] = None

    @classmethod
    def fail(cls, error_code: ErrorCode, error: str, **fields):
        return cls(success=False, error_code=error_code, error=error, **fields)
