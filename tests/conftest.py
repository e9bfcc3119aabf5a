"""Pytest configuration and fixtures."""

import json
from typing import Any, Dict, List

import httpx
import pytest
from mongomock_motor import AsyncMongoMockClient

from app.core.config import Settings
from app.core.exceptions import ChainQueryError
from app.flow.conversation_store import ConversationStore
from app.services.chain_service import ChainViewAggregator
from app.services.container import ServiceContainer
from app.services.identity_service import IdentityLinker
from app.services.notification_service import NotificationDispatcher
from app.services.telegram_service import TelegramService
from app.services.transaction_service import TransactionComposer
from app.services.user_service import UserService

REGISTRY = "0x" + "ab" * 20
GROUP_CONTRACTS = ["0x" + f"{i:02x}" * 20 for i in range(1, 6)]
CREATOR = "0x" + "cd" * 20
ONE = 10 ** 18


def raw_group(name, contract, amount=ONE // 10, duration=2592000, current=3, maximum=10, created_at=1700000000):
    """Registry tuple in ABI order."""
    return (name, f"{name} description", amount, duration, current, maximum, CREATOR, contract, created_at)


class FakeGateway:
    """
    In-memory stand-in for ChainGateway.

    `groups` is the registry listing; `contracts` maps a lowercase group
    contract address to its read results. Any group id or contract listed
    in `failing` raises ChainQueryError.
    """

    def __init__(self):
        self.registry_address = REGISTRY
        self.groups: List[tuple] = []
        self.contracts: Dict[str, Dict[str, Any]] = {}
        self.failing = set()
        self.calls: List[tuple] = []

    def add_group(self, raw: tuple, statuses=None, cycle=None, participants=None, payouts=None) -> int:
        self.groups.append(raw)
        self.contracts[raw[7].lower()] = {
            "getUserStatus": statuses or {},
            "getCurrentCycleInfo": cycle or (1, 0, 0, "0x" + "00" * 20, 86400),
            "getParticipants": participants or [],
            "getPayoutHistory": payouts or [],
        }
        return len(self.groups) - 1

    async def call_registry(self, function_name: str, *args):
        self.calls.append(("registry", function_name, args))
        if function_name == "getActiveGroups":
            offset, limit = args
            return self.groups[offset:offset + limit]
        if function_name == "getGroupMetadata":
            (group_id,) = args
            if group_id in self.failing or group_id >= len(self.groups):
                raise ChainQueryError(f"registry.getGroupMetadata({group_id}) failed")
            return self.groups[group_id]
        raise ChainQueryError(f"unexpected registry call {function_name}")

    async def call_group(self, group_contract: str, function_name: str, *args):
        address = group_contract.lower()
        self.calls.append((address, function_name, args))
        if address in self.failing or address not in self.contracts:
            raise ChainQueryError(f"{address}.{function_name} failed")
        result = self.contracts[address][function_name]
        if function_name == "getUserStatus":
            return result.get(args[0].lower(), (False, False, 0, False))
        return result

    async def is_connected(self) -> bool:
        return True

    async def close(self):
        pass


@pytest.fixture
def test_settings():
    return Settings(
        ENVIRONMENT="development",
        TELEGRAM_BOT_TOKEN="test-token",
        TELEGRAM_API_BASE="https://telegram.test",
        REGISTRY_CONTRACT_ADDRESS=REGISTRY,
        APP_URL="https://rosca.example.com",
        CHAIN_ID=296,
    )


@pytest.fixture
def database():
    return AsyncMongoMockClient()["roscabot_test"]


@pytest.fixture
def users(database):
    return UserService(database)


@pytest.fixture
def telegram_requests():
    """Bot API calls captured by the mock transport, as (method, json body)."""
    return []


@pytest.fixture
def telegram_handler(telegram_requests):
    def handler(request: httpx.Request) -> httpx.Response:
        method = request.url.path.rsplit("/", 1)[-1]
        body = json.loads(request.content or b"{}")
        telegram_requests.append((method, body))
        return httpx.Response(200, json={"ok": True, "result": {"message_id": len(telegram_requests)}})

    return handler


@pytest.fixture
def telegram(test_settings, telegram_handler):
    return TelegramService(
        token=test_settings.TELEGRAM_BOT_TOKEN,
        api_base=test_settings.TELEGRAM_API_BASE,
        client=httpx.AsyncClient(transport=httpx.MockTransport(telegram_handler)),
    )


@pytest.fixture
def notifier(telegram):
    return NotificationDispatcher(telegram)


@pytest.fixture
def linker(users, notifier, test_settings):
    return IdentityLinker(
        users,
        notifier,
        app_url=test_settings.APP_URL,
        deep_link_base=test_settings.WALLET_DEEP_LINK_BASE,
    )


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def aggregator(gateway):
    return ChainViewAggregator(gateway)


@pytest.fixture
def composer(users, aggregator, test_settings):
    return TransactionComposer(
        users,
        aggregator,
        registry_address=test_settings.REGISTRY_CONTRACT_ADDRESS,
        chain_id=test_settings.CHAIN_ID,
    )


@pytest.fixture
def services(test_settings, users, telegram, notifier, linker, gateway, aggregator, composer):
    return ServiceContainer(
        settings=test_settings,
        users=users,
        telegram=telegram,
        notifier=notifier,
        linker=linker,
        gateway=gateway,
        aggregator=aggregator,
        composer=composer,
        conversations=ConversationStore(),
    )


@pytest.fixture
def wallet():
    """A fresh local signing account."""
    from eth_account import Account

    return Account.create()
