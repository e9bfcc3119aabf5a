"""Tests for action routing through the dispatcher."""

from unittest.mock import AsyncMock

import pytest

from app.flow import actions
from app.flow.dispatcher import HANDLERS, dispatch_message
from app.schemas.telegram import IncomingMessage
from utils import constants

from tests.conftest import GROUP_CONTRACTS, ONE, raw_group

CHAT = "12345"
WALLET = "0x" + "ee" * 20


def command(value: str) -> IncomingMessage:
    return IncomingMessage(chat_id=CHAT, text=value)


def press(data: str, query_id: str = "q1") -> IncomingMessage:
    return IncomingMessage(chat_id=CHAT, callback_data=data, callback_query_id=query_id)


def last_message(telegram_requests):
    sends = [body for method, body in telegram_requests if method == "sendMessage"]
    return sends[-1]


def buttons(body):
    return [button for row in body.get("reply_markup", {}).get("inline_keyboard", []) for button in row]


@pytest.fixture
async def linked(users):
    await users.link_wallet(CHAT, WALLET)


@pytest.fixture
def two_groups(gateway):
    gateway.add_group(
        raw_group("Alpha", GROUP_CONTRACTS[0]),
        statuses={WALLET: (True, False, 2, False)},
        cycle=(3, 5 * ONE, 4, "0x" + "aa" * 20, 90061),
        participants=["0x" + "aa" * 20, WALLET],
        payouts=[("0x" + "aa" * 20, ONE, 1700000000)],
    )
    gateway.add_group(
        raw_group("Beta", GROUP_CONTRACTS[1], current=10, maximum=10),
        statuses={WALLET: (True, True, 1, False)},
    )
    return gateway


def test_every_action_type_has_a_handler():
    assert set(HANDLERS) == set(actions.ALL_ACTION_TYPES)


class TestWelcome:
    async def test_start_registers_user_and_offers_link(self, services, users, telegram_requests):
        await dispatch_message(services, command("/start"))

        assert await users.get_user(CHAT) is not None
        body = last_message(telegram_requests)
        assert "Link this wallet to Telegram ID: 12345" in body["text"]
        urls = [b["url"] for b in buttons(body) if "url" in b]
        assert urls == [f"https://rosca.example.com/auth-redirect/{CHAT}"]

    async def test_start_when_linked_shows_wallet(self, services, linked, telegram_requests):
        await dispatch_message(services, command("/start"))

        body = last_message(telegram_requests)
        assert WALLET in body["text"]
        assert all("url" not in b for b in buttons(body))

    async def test_help(self, services, telegram_requests):
        await dispatch_message(services, press(constants.ACTION_HELP))
        assert last_message(telegram_requests)["text"] == constants.HELP_MESSAGE

    async def test_callback_is_acknowledged(self, services, telegram_requests):
        await dispatch_message(services, press(constants.ACTION_HELP, query_id="abc"))

        assert ("answerCallbackQuery", {"callback_query_id": "abc"}) in telegram_requests

    async def test_unknown_callback(self, services, telegram_requests):
        await dispatch_message(services, press("join_group_x"))
        assert last_message(telegram_requests)["text"] == constants.UNKNOWN_ACTION_MESSAGE

    async def test_unknown_command(self, services, telegram_requests):
        await dispatch_message(services, command("/frobnicate"))
        assert last_message(telegram_requests)["text"] == constants.UNKNOWN_ACTION_MESSAGE


class TestBrowseAndJoin:
    async def test_browse_lists_groups_with_buttons(self, services, two_groups, telegram_requests):
        await dispatch_message(services, press(constants.ACTION_BROWSE_GROUPS))

        body = last_message(telegram_requests)
        assert "Alpha" in body["text"] and "Beta" in body["text"]
        data = [b["callback_data"] for b in buttons(body)]
        assert data == ["join_group_0", "group_details_0", "join_group_1", "group_details_1"]

    async def test_browse_empty(self, services, telegram_requests):
        await dispatch_message(services, command("/browse"))
        assert last_message(telegram_requests)["text"] == constants.NO_GROUPS_MESSAGE

    async def test_details(self, services, two_groups, telegram_requests):
        await dispatch_message(services, press("group_details_0"))

        body = last_message(telegram_requests)
        assert "Alpha description" in body["text"]
        assert GROUP_CONTRACTS[0] in body["text"]
        assert [b["callback_data"] for b in buttons(body)] == ["join_group_0"]

    async def test_join_prepares_payload_and_records_membership(self, services, users, linked, two_groups, telegram_requests):
        await dispatch_message(services, press("join_group_0"))

        body = last_message(telegram_requests)
        assert "Transaction ready to sign" in body["text"]
        assert "0x" + "ab" * 20 in body["text"]

        membership = await users.get_membership(CHAT, 0)
        assert membership is not None
        assert membership.wallet_address == WALLET

    async def test_join_reads_wallet_once(self, services, users, linked, two_groups):
        get_wallet = AsyncMock(wraps=users.get_wallet)
        users.get_wallet = get_wallet

        await dispatch_message(services, press("join_group_0"))

        get_wallet.assert_awaited_once_with(CHAT)
        assert (await users.get_membership(CHAT, 0)).wallet_address == WALLET

    async def test_join_full_group_records_nothing(self, services, users, linked, two_groups, telegram_requests):
        await dispatch_message(services, press("join_group_1"))

        assert last_message(telegram_requests)["text"] == constants.GROUP_FULL_MESSAGE
        assert await users.get_membership(CHAT, 1) is None

    async def test_join_requires_link(self, services, users, two_groups, telegram_requests):
        await dispatch_message(services, press("join_group_0"))

        assert last_message(telegram_requests)["text"] == constants.NOT_LINKED_MESSAGE
        assert await users.list_memberships(CHAT) == []

    async def test_chain_failure_is_reported(self, services, linked, two_groups, telegram_requests):
        two_groups.failing.add(0)

        await dispatch_message(services, press("group_details_0"))

        assert last_message(telegram_requests)["text"] == constants.CHAIN_ERROR_MESSAGE


class TestMembershipViews:
    @pytest.fixture
    async def joined(self, users, two_groups):
        await users.add_membership(CHAT, 0, WALLET)
        await users.add_membership(CHAT, 1, WALLET)

    async def test_my_groups_without_memberships(self, services, linked, telegram_requests):
        await dispatch_message(services, command("/mygroups"))
        assert last_message(telegram_requests)["text"] == constants.NO_MEMBERSHIPS_MESSAGE

    async def test_my_groups_requires_link(self, services, telegram_requests):
        await dispatch_message(services, command("/mygroups"))
        assert last_message(telegram_requests)["text"] == constants.NOT_LINKED_MESSAGE

    async def test_my_groups_omits_failed_group(self, services, linked, joined, two_groups, telegram_requests):
        two_groups.failing.add(GROUP_CONTRACTS[1])

        await dispatch_message(services, press(constants.ACTION_MY_GROUPS))

        body = last_message(telegram_requests)
        assert "Alpha" in body["text"]
        assert "Beta" not in body["text"]

    async def test_my_groups_all_failed(self, services, linked, joined, two_groups, telegram_requests):
        two_groups.failing.update({0, 1})

        await dispatch_message(services, command("/mygroups"))

        assert last_message(telegram_requests)["text"] == constants.CHAIN_ERROR_MESSAGE

    async def test_status(self, services, linked, joined, telegram_requests):
        await dispatch_message(services, command("/status"))

        text = last_message(telegram_requests)["text"]
        assert text.startswith(constants.STATUS_HEADER)
        assert "Alpha" in text and "Beta" in text

    async def test_group_status_shows_cycle(self, services, linked, joined, telegram_requests):
        await dispatch_message(services, press("group_status_0"))

        body = last_message(telegram_requests)
        assert "1d 1h 1m" in body["text"]
        assert "5 HBAR" in body["text"]
        assert [b["callback_data"] for b in buttons(body)] == ["contribute_0"]

    async def test_history(self, services, linked, joined, telegram_requests):
        await dispatch_message(services, command("/history"))

        text = last_message(telegram_requests)["text"]
        assert "1 HBAR" in text
        assert constants.NO_PAYOUTS_MESSAGE in text


class TestContribute:
    async def test_menu_lists_memberships(self, services, users, linked, two_groups, telegram_requests):
        await users.add_membership(CHAT, 0, WALLET)

        await dispatch_message(services, command("/contribute"))

        body = last_message(telegram_requests)
        assert body["text"] == constants.CONTRIBUTE_MENU_HEADER
        assert [b["callback_data"] for b in buttons(body)] == ["contribute_0"]

    async def test_contribute_payload_targets_group_contract(self, services, linked, two_groups, telegram_requests):
        await dispatch_message(services, press("contribute_0"))

        text = last_message(telegram_requests)["text"]
        assert GROUP_CONTRACTS[0] in text
        assert "0.1 HBAR" in text

    async def test_already_contributed(self, services, linked, two_groups, telegram_requests):
        await dispatch_message(services, press("contribute_1"))
        assert last_message(telegram_requests)["text"] == constants.ALREADY_CONTRIBUTED_MESSAGE


async def test_missing_group_details(services, gateway, telegram_requests):
    gateway.add_group(raw_group("Ghost", "0x" + "00" * 20))

    await dispatch_message(services, press("group_details_0"))

    assert last_message(telegram_requests)["text"] == constants.GROUP_NOT_FOUND_MESSAGE
