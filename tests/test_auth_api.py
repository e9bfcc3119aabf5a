"""Tests for the wallet-linking HTTP endpoints."""

import pytest
from eth_account import Account
from eth_account.messages import encode_defunct
from eth_utils import to_hex
from fastapi.testclient import TestClient

from app.api.deps import get_linker
from app.main import app
from app.services.identity_service import build_challenge_message


@pytest.fixture
def client(linker):
    app.dependency_overrides[get_linker] = lambda: linker
    yield TestClient(app)
    app.dependency_overrides.clear()


def signed_body(account, chat_id="12345", message=None):
    message = message or build_challenge_message(chat_id)
    signature = to_hex(account.sign_message(encode_defunct(text=message)).signature)
    return {"chatId": chat_id, "account": account.address, "signature": signature, "message": message}


def test_auth_page_has_challenge_and_writes_nothing(client, database):
    response = client.get("/auth/12345")

    assert response.status_code == 200
    assert "text/html" in response.headers["content-type"]
    assert "Link this wallet to Telegram ID: 12345" in response.text
    assert "personal_sign" in response.text
    assert "/auth/callback" in response.text


async def test_auth_page_does_not_create_user(client, users):
    client.get("/auth/12345")
    assert await users.get_user("12345") is None


def test_auth_page_escapes_chat_id(client):
    response = client.get("/auth/%3Cscript%3E")
    assert response.status_code == 200
    assert "<script>alert" not in response.text
    assert "&lt;script&gt;" in response.text


def test_redirect_desktop(client):
    response = client.get(
        "/auth-redirect/12345",
        headers={"user-agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) Chrome/120.0"},
        follow_redirects=False,
    )
    assert response.status_code == 302
    assert response.headers["location"] == "https://rosca.example.com/auth/12345"


def test_redirect_mobile(client):
    response = client.get(
        "/auth-redirect/12345",
        headers={"user-agent": "Mozilla/5.0 (Linux; Android 14; Pixel 8) Mobile Safari/537.36"},
        follow_redirects=False,
    )
    assert response.status_code == 302
    assert response.headers["location"] == "https://metamask.app.link/dapp/rosca.example.com/auth/12345"


async def test_callback_links_wallet(client, users, telegram_requests):
    account = Account.create()

    response = client.post("/auth/callback", json=signed_body(account))

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["chat_id"] == "12345"
    assert data["wallet_address"] == account.address.lower()
    assert await users.get_wallet("12345") == account.address.lower()
    assert any(method == "sendMessage" for method, _ in telegram_requests)


def test_callback_accepts_numeric_chat_id(client):
    account = Account.create()
    body = signed_body(account)
    body["chatId"] = 12345

    response = client.post("/auth/callback", json=body)
    assert response.status_code == 200


async def test_callback_signature_mismatch(client, users):
    signer, claimed = Account.create(), Account.create()
    body = signed_body(signer)
    body["account"] = claimed.address

    response = client.post("/auth/callback", json=body)

    assert response.status_code == 400
    assert response.json()["code"] == "SIGNATURE_MISMATCH"
    assert await users.get_user("12345") is None


def test_callback_missing_signature(client):
    body = signed_body(Account.create())
    del body["signature"]

    response = client.post("/auth/callback", json=body)

    assert response.status_code == 400
    assert response.json()["code"] == "BAD_REQUEST"


def test_callback_malformed_signature(client):
    body = signed_body(Account.create())
    body["signature"] = "0xnothex"

    response = client.post("/auth/callback", json=body)

    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_SIGNATURE"


def test_callback_message_for_other_chat(client):
    account = Account.create()
    body = signed_body(account, chat_id="12345", message=build_challenge_message("555"))

    response = client.post("/auth/callback", json=body)

    assert response.status_code == 400
