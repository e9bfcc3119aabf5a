"""
app/services/chain_service.py

Purpose: Read-side integration with the ROSCA contracts

- ChainGateway: raw contract reads over JSON-RPC (web3.py, async)
- ChainViewAggregator: normalized views and multi-group aggregation
- Tolerates partial failure when composing multi-group views
"""

import asyncio
from typing import Any, Awaitable, Callable, List, Optional, Sequence, TypeVar

from web3 import AsyncWeb3, AsyncHTTPProvider

from app.core.config import settings
from app.core.exceptions import ChainQueryError, ResourceNotFoundError
from app.core.logging import get_logger
from app.schemas.chain import (
    GroupView,
    StatusView,
    CycleView,
    PayoutRecord,
    MyGroupEntry,
    GroupHistory,
)
from utils.chain_utils import is_zero_address
from utils.contract_abi import REGISTRY_ABI, GROUP_ABI
from utils.validation_utils import normalize_address

logger = get_logger(__name__)

T = TypeVar("T")


class ChainGateway:
    """
    Executes read-only contract calls.

    Every failure (transport, provider, revert, decoding) surfaces as
    ChainQueryError so callers deal with a single error type.
    """

    def __init__(self, rpc_url: Optional[str] = None, registry_address: Optional[str] = None, w3: Optional[AsyncWeb3] = None):
        self.w3 = w3 or AsyncWeb3(AsyncHTTPProvider(rpc_url or settings.RPC_URL))
        self.registry_address = AsyncWeb3.to_checksum_address(
            registry_address or settings.REGISTRY_CONTRACT_ADDRESS
        )
        self._registry = self.w3.eth.contract(address=self.registry_address, abi=REGISTRY_ABI)

    def _group(self, group_contract: str):
        return self.w3.eth.contract(address=AsyncWeb3.to_checksum_address(group_contract), abi=GROUP_ABI)

    async def _call(self, label: str, fn) -> Any:
        try:
            return await fn.call()
        except Exception as e:
            logger.error(f"Chain read {label} failed: {e}")
            raise ChainQueryError(f"Chain read {label} failed", details={"error": str(e)}) from e

    async def call_registry(self, function_name: str, *args) -> Any:
        fn = getattr(self._registry.functions, function_name)(*args)
        return await self._call(f"registry.{function_name}", fn)

    async def call_group(self, group_contract: str, function_name: str, *args) -> Any:
        try:
            contract = self._group(group_contract)
        except ValueError as e:
            raise ChainQueryError(f"Invalid group contract address: {group_contract}") from e

        fn = getattr(contract.functions, function_name)(*args)
        return await self._call(f"{normalize_address(group_contract)}.{function_name}", fn)

    async def is_connected(self) -> bool:
        try:
            return await self.w3.is_connected()
        except Exception:
            return False

    async def close(self):
        await self.w3.provider.disconnect()


def _group_from_tuple(group_id: int, raw: Sequence[Any]) -> GroupView:
    (name, description, amount, duration, current, maximum, creator, contract, created_at) = raw
    return GroupView(
        group_id=group_id,
        name=name,
        description=description,
        contribution_amount=int(amount),
        cycle_duration=int(duration),
        current_participants=int(current),
        max_participants=int(maximum),
        creator=normalize_address(creator),
        group_contract=normalize_address(contract),
        created_at=int(created_at),
    )


class ChainViewAggregator:
    """
    Composes registry and group-contract reads into views.

    Single-resource reads raise ChainQueryError. Multi-group reads drop the
    groups that fail and only raise when nothing could be fetched.
    """

    def __init__(self, gateway: ChainGateway):
        self.gateway = gateway

    async def list_active_groups(self, offset: int = 0, limit: int = 10) -> List[GroupView]:
        """
        Reads one page of active groups from the registry.

        Registry group ids are sequential, so an entry's id is its position
        in the listing.
        """
        raw_groups = await self.gateway.call_registry("getActiveGroups", offset, limit)
        return [_group_from_tuple(offset + i, raw) for i, raw in enumerate(raw_groups)]

    async def get_group_metadata(self, group_id: int) -> GroupView:
        """
        Raises:
            ResourceNotFoundError: If the registry has no group under this id
        """
        raw = await self.gateway.call_registry("getGroupMetadata", group_id)
        group = _group_from_tuple(group_id, raw)
        if is_zero_address(group.group_contract):
            raise ResourceNotFoundError(f"Group {group_id} not found")
        return group

    async def get_user_status(self, group_contract: str, wallet_address: str) -> StatusView:
        enrolled, contributed, total, received = await self.gateway.call_group(
            group_contract, "getUserStatus", AsyncWeb3.to_checksum_address(wallet_address)
        )
        return StatusView(
            is_enrolled=bool(enrolled),
            has_contributed_this_cycle=bool(contributed),
            total_contributions=int(total),
            has_received_payout=bool(received),
        )

    async def get_cycle_info(self, group_contract: str) -> CycleView:
        cycle, pool, contributions, recipient, remaining = await self.gateway.call_group(
            group_contract, "getCurrentCycleInfo"
        )
        return CycleView(
            cycle_number=int(cycle),
            pool_balance=int(pool),
            contributions_this_cycle=int(contributions),
            current_recipient=None if is_zero_address(recipient) else normalize_address(recipient),
            time_remaining=int(remaining),
        )

    async def get_participants(self, group_contract: str) -> List[str]:
        participants = await self.gateway.call_group(group_contract, "getParticipants")
        return [normalize_address(p) for p in participants]

    async def get_payout_history(self, group_contract: str) -> List[PayoutRecord]:
        payouts = await self.gateway.call_group(group_contract, "getPayoutHistory")
        return [
            PayoutRecord(recipient=normalize_address(recipient), amount=int(amount), timestamp=int(ts))
            for recipient, amount, ts in payouts
        ]

    async def _gather_tolerant(
        self,
        label: str,
        group_ids: Sequence[int],
        fetch: Callable[[int], Awaitable[T]],
    ) -> List[T]:
        """
        Runs `fetch` for every group concurrently.

        Groups that fail to load or no longer exist are logged and
        omitted. Raises a single ChainQueryError only when every fetch
        failed.
        """
        if not group_ids:
            return []

        results = await asyncio.gather(*(fetch(gid) for gid in group_ids), return_exceptions=True)

        collected: List[T] = []
        for group_id, result in zip(group_ids, results):
            if isinstance(result, (ChainQueryError, ResourceNotFoundError)):
                logger.warning(f"{label}: group {group_id} omitted ({result.message})")
                continue
            if isinstance(result, BaseException):
                raise result
            collected.append(result)

        if not collected:
            raise ChainQueryError(f"Could not load {label} for any group")

        return collected

    async def list_my_groups(self, group_ids: Sequence[int], wallet_address: str) -> List[MyGroupEntry]:
        """
        Resolves memberships into group metadata plus the wallet's status.
        """
        async def fetch(group_id: int) -> MyGroupEntry:
            group = await self.get_group_metadata(group_id)
            status = await self.get_user_status(group.group_contract, wallet_address)
            return MyGroupEntry(group=group, status=status)

        return await self._gather_tolerant("my groups", group_ids, fetch)

    async def get_history(self, group_ids: Sequence[int]) -> List[GroupHistory]:
        """
        Payout history for each group, in contract order.
        """
        async def fetch(group_id: int) -> GroupHistory:
            group = await self.get_group_metadata(group_id)
            payouts = await self.get_payout_history(group.group_contract)
            return GroupHistory(group=group, payouts=payouts)

        return await self._gather_tolerant("history", group_ids, fetch)
