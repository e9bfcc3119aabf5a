"""
app/schemas/response.py

Error body returned by every exception handler.
"""

from pydantic import BaseModel, ConfigDict
from typing import Optional, Any


class ErrorResponse(BaseModel):
    """
    Standard error response structure.
    """
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "error": "Signature does not match the claimed address",
                "code": "SIGNATURE_MISMATCH",
                "details": None,
            }
        }
    )

    error: str
    code: str
    details: Optional[Any] = None
