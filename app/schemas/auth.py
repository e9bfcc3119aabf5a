"""
app/schemas/auth.py

Request/response schemas for the wallet-linking HTTP surface.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, Union


class AuthCallbackRequest(BaseModel):
    """
    Body posted by the wallet-signing page.

    Every field is optional at the schema level so that missing fields
    surface as a 400 from the linker instead of a 422.
    """
    model_config = ConfigDict(populate_by_name=True)

    chat_id: Optional[Union[int, str]] = Field(default=None, alias="chatId")
    account: Optional[str] = None
    signature: Optional[str] = None
    message: Optional[str] = None

    @field_validator("chat_id")
    @classmethod
    def chat_id_as_string(cls, v):
        return None if v is None else str(v)


class LinkResult(BaseModel):
    """Outcome of a successful wallet link."""
    success: bool = True
    chat_id: str
    wallet_address: str
    notified: bool = False
