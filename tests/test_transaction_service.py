"""Tests for unsigned transaction preparation."""

from decimal import Decimal

import pytest
from eth_abi import decode
from eth_utils import decode_hex, function_signature_to_4byte_selector

from app.core.exceptions import NotLinkedError
from utils import constants
from utils.contract_abi import (
    CONTRIBUTE_SIGNATURE,
    CREATE_GROUP_SIGNATURE,
    CREATE_GROUP_TYPES,
    JOIN_GROUP_SIGNATURE,
)

from tests.conftest import GROUP_CONTRACTS, ONE, REGISTRY, raw_group

CHAT = "12345"
WALLET = "0x" + "ee" * 20


def split_call(data: str):
    raw = decode_hex(data)
    return raw[:4], raw[4:]


@pytest.fixture
async def linked(users):
    await users.link_wallet(CHAT, WALLET)


@pytest.fixture
def groups(gateway):
    gateway.add_group(
        raw_group("Alpha", GROUP_CONTRACTS[0], amount=ONE // 4),
        statuses={WALLET: (True, False, 0, False)},
    )
    gateway.add_group(raw_group("Full", GROUP_CONTRACTS[1], current=4, maximum=4))
    gateway.add_group(
        raw_group("Paid", GROUP_CONTRACTS[2]),
        statuses={WALLET: (True, True, 1, False)},
    )
    return gateway


class TestCreateGroup:
    async def test_encodes_registry_call(self, composer, linked):
        result = await composer.create_group(CHAT, Decimal("0.1"), 2592000, 10, "Savings Circle", "monthly pool")

        assert result.ok
        payload = result.payload
        assert payload.to == REGISTRY
        assert payload.value == 0
        assert payload.chain_id == 296

        selector, args = split_call(payload.data)
        assert selector == function_signature_to_4byte_selector(CREATE_GROUP_SIGNATURE)
        assert decode(CREATE_GROUP_TYPES, args) == (ONE // 10, 2592000, 10, "Savings Circle", "monthly pool")

    async def test_requires_link(self, composer):
        with pytest.raises(NotLinkedError):
            await composer.create_group(CHAT, Decimal("1"), 86400, 5, "x", "y")


class TestJoinGroup:
    async def test_encodes_group_id(self, composer, linked, groups):
        result = await composer.join_group(CHAT, 0)

        selector, args = split_call(result.payload.data)
        assert selector == function_signature_to_4byte_selector(JOIN_GROUP_SIGNATURE)
        assert decode(["uint256"], args) == (0,)
        assert result.payload.to == REGISTRY
        assert result.payload.value == 0
        assert result.wallet_address == WALLET

    async def test_full_group_short_circuits(self, composer, linked, groups):
        result = await composer.join_group(CHAT, 1)

        assert not result.ok
        assert result.reason == constants.GROUP_FULL_MESSAGE

    async def test_requires_link_before_chain_read(self, composer, gateway):
        with pytest.raises(NotLinkedError):
            await composer.join_group(CHAT, 0)
        assert gateway.calls == []


class TestContribute:
    async def test_value_is_contribution_amount(self, composer, linked, groups):
        result = await composer.contribute(CHAT, 0)

        payload = result.payload
        assert payload.to == GROUP_CONTRACTS[0]
        assert payload.value == ONE // 4
        assert payload.value_eth == Decimal("0.25")
        assert decode_hex(payload.data) == function_signature_to_4byte_selector(CONTRIBUTE_SIGNATURE)

    async def test_already_contributed(self, composer, linked, groups):
        result = await composer.contribute(CHAT, 2)
        assert result.reason == constants.ALREADY_CONTRIBUTED_MESSAGE

    async def test_not_enrolled(self, composer, linked, groups):
        result = await composer.contribute(CHAT, 1)
        assert result.reason == constants.NOT_ENROLLED_MESSAGE
