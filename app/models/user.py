"""
app/models/user.py

Purpose: Persisted document models

- User: chat identity and its linked wallet
- Membership: speculative chat identity / group bookkeeping
- AuthSession: append-only audit record of a completed wallet link
"""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

from utils.time_utils import calculate_session_expiry


class User(BaseModel):
    """A chat identity. At most one wallet is linked at a time."""
    chat_id: str
    wallet_address: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: Optional[datetime] = None

    @property
    def is_linked(self) -> bool:
        return bool(self.wallet_address)


class Membership(BaseModel):
    """
    Local record that a chat identity asked to join a group.

    Written before any on-chain join is mined, so it is not proof of
    on-chain membership.
    """
    chat_id: str
    group_id: int
    wallet_address: str
    joined_at: datetime = Field(default_factory=datetime.utcnow)


class AuthSession(BaseModel):
    """Audit trail of a successful link; never used for authorization."""
    user_id: str
    message: str
    signature: str
    created_at: datetime
    expires_at: datetime

    @classmethod
    def issue(cls, user_id: str, message: str, signature: str, ttl_minutes: int = 10) -> "AuthSession":
        now = datetime.utcnow()
        return cls(
            user_id=user_id,
            message=message,
            signature=signature,
            created_at=now,
            expires_at=calculate_session_expiry(now, ttl_minutes),
        )
