"""
app/schemas/chain.py

Read models reconstructed from the registry and group contracts, plus the
unsigned transaction payloads handed to the user's signing client.

None of these are persisted.
"""

from pydantic import BaseModel, Field
from decimal import Decimal
from typing import List, Optional


class GroupView(BaseModel):
    """Registry metadata for one ROSCA group."""
    group_id: int
    name: str
    description: str
    contribution_amount: int = Field(..., description="Contribution per cycle, smallest unit")
    cycle_duration: int = Field(..., description="Cycle length in seconds")
    current_participants: int
    max_participants: int
    creator: str
    group_contract: str
    created_at: int = Field(..., description="Unix timestamp")

    @property
    def is_full(self) -> bool:
        return self.current_participants >= self.max_participants


class StatusView(BaseModel):
    """A wallet's standing inside one group contract."""
    is_enrolled: bool
    has_contributed_this_cycle: bool
    total_contributions: int
    has_received_payout: bool


class CycleView(BaseModel):
    """Current cycle of a group contract."""
    cycle_number: int
    pool_balance: int
    contributions_this_cycle: int
    current_recipient: Optional[str] = Field(
        default=None,
        description="None while the recipient is not yet determined"
    )
    time_remaining: int


class PayoutRecord(BaseModel):
    recipient: str
    amount: int
    timestamp: int


class MyGroupEntry(BaseModel):
    """A membership resolved against the chain."""
    group: GroupView
    status: StatusView


class GroupHistory(BaseModel):
    group: GroupView
    payouts: List[PayoutRecord] = Field(default_factory=list)


class TransactionPayload(BaseModel):
    """Unsigned call for the user's own wallet. Never submitted by the bot."""
    to: str
    data: str
    value: int = 0
    value_eth: Decimal = Decimal(0)
    gas: int
    chain_id: int
    description: str


class CompositionResult(BaseModel):
    """Either a payload or the reason none was produced."""
    payload: Optional[TransactionPayload] = None
    reason: Optional[str] = None
    wallet_address: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.payload is not None
