"""Tests for wallet linking."""

import pytest
from eth_account import Account
from eth_account.messages import encode_defunct
from eth_utils import to_hex

from app.core.exceptions import BadRequestError, InvalidSignatureError, SignatureMismatchError
from app.services.identity_service import (
    build_challenge_message,
    is_mobile_user_agent,
    recover_signer,
)

IPHONE_AGENT = "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) AppleWebKit/605.1.15 Mobile/15E148"
DESKTOP_AGENT = "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 Chrome/120.0 Safari/537.36"


def sign(account, message: str) -> str:
    return to_hex(account.sign_message(encode_defunct(text=message)).signature)


class TestChallenge:
    def test_message_embeds_chat_id(self):
        assert build_challenge_message("12345") == "Link this wallet to Telegram ID: 12345"

    def test_mobile_agents(self):
        assert is_mobile_user_agent(IPHONE_AGENT)
        assert is_mobile_user_agent("Mozilla/5.0 (Linux; Android 14; Pixel 8)")
        assert not is_mobile_user_agent(DESKTOP_AGENT)
        assert not is_mobile_user_agent(None)

    def test_desktop_target_is_auth_page(self, linker):
        target = linker.build_challenge_target("12345", DESKTOP_AGENT)
        assert target == "https://rosca.example.com/auth/12345"

    def test_mobile_target_is_wallet_deep_link(self, linker):
        target = linker.build_challenge_target("12345", IPHONE_AGENT)
        assert target == "https://metamask.app.link/dapp/rosca.example.com/auth/12345"

    def test_missing_agent_gets_auth_page(self, linker):
        assert linker.build_challenge_target("7", None).endswith("/auth/7")


class TestRecoverSigner:
    def test_round_trip(self, wallet):
        message = build_challenge_message("12345")
        assert recover_signer(message, sign(wallet, message)) == wallet.address

    def test_other_message_recovers_other_address(self, wallet):
        signature = sign(wallet, build_challenge_message("12345"))
        assert recover_signer(build_challenge_message("99999"), signature) != wallet.address

    @pytest.mark.parametrize("signature", ["not-hex", "0x1234", "0x" + "00" * 64])
    def test_malformed_signature(self, signature):
        with pytest.raises(InvalidSignatureError):
            recover_signer("hello", signature)


class TestVerifyLink:
    async def test_links_wallet_lowercase(self, linker, users, wallet, telegram_requests):
        message = build_challenge_message("12345")

        result = await linker.verify_link("12345", wallet.address, sign(wallet, message), message)

        assert result.success
        assert result.wallet_address == wallet.address.lower()
        assert result.notified
        assert await users.get_wallet("12345") == wallet.address.lower()

        sessions = await users.list_auth_sessions("12345")
        assert len(sessions) == 1
        assert sessions[0].message == message
        assert sessions[0].expires_at > sessions[0].created_at

        assert telegram_requests[-1][0] == "sendMessage"
        assert telegram_requests[-1][1]["chat_id"] == "12345"

    async def test_claimed_address_casing_is_ignored(self, linker, wallet):
        message = build_challenge_message("12345")
        result = await linker.verify_link("12345", wallet.address.upper().replace("0X", "0x"), sign(wallet, message), message)
        assert result.wallet_address == wallet.address.lower()

    async def test_mismatch_writes_nothing(self, linker, users, wallet):
        other = Account.create()
        message = build_challenge_message("12345")

        with pytest.raises(SignatureMismatchError):
            await linker.verify_link("12345", other.address, sign(wallet, message), message)

        assert await users.get_user("12345") is None
        assert await users.list_auth_sessions("12345") == []

    async def test_message_for_other_chat_is_rejected(self, linker, users, wallet):
        message = build_challenge_message("99999")

        with pytest.raises(BadRequestError):
            await linker.verify_link("12345", wallet.address, sign(wallet, message), message)

        assert await users.get_user("12345") is None

    @pytest.mark.parametrize("position", [0, 31, 32, 63])
    async def test_tampered_signature_keeps_existing_link(self, linker, users, wallet, position):
        message = build_challenge_message("12345")
        await linker.verify_link("12345", wallet.address, sign(wallet, message), message)

        other = Account.create()
        tampered = bytearray(bytes.fromhex(sign(other, message)[2:]))
        tampered[position] ^= 0x01

        with pytest.raises((SignatureMismatchError, InvalidSignatureError)):
            await linker.verify_link("12345", other.address, to_hex(bytes(tampered)), message)

        assert await users.get_wallet("12345") == wallet.address.lower()
        assert len(await users.list_auth_sessions("12345")) == 1

    @pytest.mark.parametrize("missing", ["chat_id", "claimed_address", "signature", "message"])
    async def test_missing_field(self, linker, wallet, missing):
        message = build_challenge_message("12345")
        fields = {
            "chat_id": "12345",
            "claimed_address": wallet.address,
            "signature": sign(wallet, message),
            "message": message,
        }
        fields[missing] = None

        with pytest.raises(BadRequestError):
            await linker.verify_link(**fields)

    async def test_bad_address(self, linker, wallet):
        message = build_challenge_message("12345")
        with pytest.raises(BadRequestError):
            await linker.verify_link("12345", "0x1234", sign(wallet, message), message)

    async def test_garbage_signature(self, linker, wallet):
        message = build_challenge_message("12345")
        with pytest.raises(InvalidSignatureError):
            await linker.verify_link("12345", wallet.address, "0xdeadbeef", message)

    async def test_relink_last_write_wins(self, linker, users, wallet):
        second = Account.create()
        message = build_challenge_message("12345")

        await linker.verify_link("12345", wallet.address, sign(wallet, message), message)
        await linker.verify_link("12345", second.address, sign(second, message), message)

        assert await users.get_wallet("12345") == second.address.lower()
        assert len(await users.list_auth_sessions("12345")) == 2

    async def test_link_survives_failed_notification(self, users, wallet, test_settings):
        import httpx
        from app.services.identity_service import IdentityLinker
        from app.services.notification_service import NotificationDispatcher
        from app.services.telegram_service import TelegramService

        def failing(request):
            return httpx.Response(403, json={"ok": False, "description": "Forbidden: bot was blocked by the user"})

        telegram = TelegramService(
            token="test-token",
            api_base="https://telegram.test",
            client=httpx.AsyncClient(transport=httpx.MockTransport(failing)),
        )
        linker = IdentityLinker(users, NotificationDispatcher(telegram), app_url=test_settings.APP_URL)
        message = build_challenge_message("12345")

        result = await linker.verify_link("12345", wallet.address, sign(wallet, message), message)

        assert result.success
        assert not result.notified
        assert await users.get_wallet("12345") == wallet.address.lower()
        await telegram.close()
