"""
app/services/transaction_service.py

Purpose: Unsigned transaction preparation

- createGroup / joinGroup on the registry
- contribute on a group contract
- Precondition checks (linked wallet, enrollment, cycle status)

Payloads are handed to the user's own signing client. Nothing here signs
or submits a transaction.
"""

from decimal import Decimal
from typing import List, Optional

from eth_abi import encode
from eth_abi.exceptions import EncodingError
from eth_utils import function_signature_to_4byte_selector, to_hex

from app.core.config import settings
from app.core.exceptions import NotLinkedError, ValidationError
from app.core.logging import get_logger, LogContext
from app.schemas.chain import TransactionPayload, CompositionResult
from app.services.chain_service import ChainViewAggregator
from app.services.user_service import UserService
from utils.chain_utils import to_base_units, from_base_units
from utils.constants import ALREADY_CONTRIBUTED_MESSAGE, NOT_ENROLLED_MESSAGE, GROUP_FULL_MESSAGE
from utils.contract_abi import (
    CREATE_GROUP_SIGNATURE,
    CREATE_GROUP_TYPES,
    JOIN_GROUP_SIGNATURE,
    JOIN_GROUP_TYPES,
    CONTRIBUTE_SIGNATURE,
    CONTRIBUTE_TYPES,
)

logger = get_logger(__name__)


def encode_call(signature: str, types: List[str], args: list) -> str:
    """
    4-byte selector of `signature` followed by the ABI-encoded arguments.

    Raises:
        ValidationError: If an argument does not fit its ABI type
    """
    selector = function_signature_to_4byte_selector(signature)
    try:
        encoded = encode(types, args)
    except EncodingError as e:
        raise ValidationError(f"Cannot encode {signature}: {e}") from e
    return to_hex(selector + encoded)


class TransactionComposer:
    """Builds unsigned call payloads for the three user actions."""

    def __init__(
        self,
        users: UserService,
        aggregator: ChainViewAggregator,
        registry_address: Optional[str] = None,
        chain_id: Optional[int] = None,
    ):
        self.users = users
        self.aggregator = aggregator
        self.registry_address = (registry_address or settings.REGISTRY_CONTRACT_ADDRESS).lower()
        self.chain_id = chain_id or settings.CHAIN_ID

    async def require_wallet(self, chat_id: str) -> str:
        """
        Raises:
            NotLinkedError: If the chat identity has no linked wallet
        """
        wallet = await self.users.get_wallet(chat_id)
        if not wallet:
            raise NotLinkedError()
        return wallet

    def _payload(self, to: str, data: str, value: int, gas: int, description: str) -> TransactionPayload:
        return TransactionPayload(
            to=to,
            data=data,
            value=value,
            value_eth=from_base_units(value),
            gas=gas,
            chain_id=self.chain_id,
            description=description,
        )

    async def create_group(
        self,
        chat_id: str,
        amount: Decimal,
        duration_seconds: int,
        max_participants: int,
        name: str,
        description: str,
    ) -> CompositionResult:
        """
        Prepares registry.createGroup.

        Args:
            amount: Contribution per cycle as a display decimal
            duration_seconds: Cycle length
            max_participants: Member cap
        """
        wallet = await self.require_wallet(chat_id)

        try:
            amount_units = to_base_units(amount)
        except ValueError as e:
            raise ValidationError(str(e)) from e

        with LogContext(chat_id=chat_id):
            data = encode_call(
                CREATE_GROUP_SIGNATURE,
                CREATE_GROUP_TYPES,
                [amount_units, int(duration_seconds), int(max_participants), name, description],
            )
            logger.info(f"Prepared createGroup for '{name}'")

        return CompositionResult(
            payload=self._payload(
                to=self.registry_address,
                data=data,
                value=0,
                gas=settings.GAS_CREATE_GROUP,
                description=f"Create group '{name}'",
            ),
            wallet_address=wallet,
        )

    async def join_group(self, chat_id: str, group_id: int) -> CompositionResult:
        """
        Prepares registry.joinGroup. Short-circuits when the group is full.
        """
        wallet = await self.require_wallet(chat_id)

        group = await self.aggregator.get_group_metadata(group_id)
        if group.is_full:
            return CompositionResult(reason=GROUP_FULL_MESSAGE, wallet_address=wallet)

        data = encode_call(JOIN_GROUP_SIGNATURE, JOIN_GROUP_TYPES, [group_id])

        with LogContext(chat_id=chat_id, group_id=group_id):
            logger.info("Prepared joinGroup")

        return CompositionResult(
            payload=self._payload(
                to=self.registry_address,
                data=data,
                value=0,
                gas=settings.GAS_JOIN_GROUP,
                description=f"Join group #{group_id} '{group.name}'",
            ),
            wallet_address=wallet,
        )

    async def contribute(self, chat_id: str, group_id: int) -> CompositionResult:
        """
        Prepares contribute() on the group's own contract.

        Requires the wallet to be enrolled and not to have contributed in
        the current cycle; otherwise returns the reason and no payload.
        """
        wallet = await self.require_wallet(chat_id)

        group = await self.aggregator.get_group_metadata(group_id)
        status = await self.aggregator.get_user_status(group.group_contract, wallet)

        if not status.is_enrolled:
            return CompositionResult(reason=NOT_ENROLLED_MESSAGE, wallet_address=wallet)
        if status.has_contributed_this_cycle:
            return CompositionResult(reason=ALREADY_CONTRIBUTED_MESSAGE, wallet_address=wallet)

        data = encode_call(CONTRIBUTE_SIGNATURE, CONTRIBUTE_TYPES, [])

        with LogContext(chat_id=chat_id, group_id=group_id):
            logger.info("Prepared contribute")

        return CompositionResult(
            payload=self._payload(
                to=group.group_contract,
                data=data,
                value=group.contribution_amount,
                gas=settings.GAS_CONTRIBUTE,
                description=f"Contribute to group #{group_id} '{group.name}'",
            ),
            wallet_address=wallet,
        )
