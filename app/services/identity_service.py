"""
app/services/identity_service.py

Purpose: Wallet-linking challenge/response

- Builds the challenge target (mobile deep link or web page)
- Verifies personal-sign signatures over the fixed challenge message
- Persists the link and its audit record
- Sends a best-effort confirmation
"""

import re
from typing import Optional
from urllib.parse import urlparse

from eth_account import Account
from eth_account.messages import encode_defunct
from eth_utils import decode_hex

from app.core.config import settings
from app.core.exceptions import BadRequestError, InvalidSignatureError, SignatureMismatchError
from app.core.logging import get_logger, LogContext
from app.models.user import AuthSession
from app.schemas.auth import LinkResult
from app.services.notification_service import NotificationDispatcher
from app.services.user_service import UserService
from utils.constants import LINK_MESSAGE_TEMPLATE, MOBILE_USER_AGENT_PATTERN, WALLET_LINKED_MESSAGE
from utils.telegram_utils import create_text_message
from utils.validation_utils import is_hex_address, normalize_address, addresses_equal

logger = get_logger(__name__)

SIGNATURE_LENGTH = 65

_mobile_agent = re.compile(MOBILE_USER_AGENT_PATTERN, re.IGNORECASE)


def build_challenge_message(chat_id: str) -> str:
    """The exact text a wallet must sign to link itself to `chat_id`."""
    return LINK_MESSAGE_TEMPLATE.format(chat_id=chat_id)


def is_mobile_user_agent(user_agent: Optional[str]) -> bool:
    return bool(user_agent) and bool(_mobile_agent.search(user_agent))


def recover_signer(message: str, signature: str) -> str:
    """
    Recovers the address that produced a personal-sign signature.

    The message is prefixed with "\\x19Ethereum Signed Message:\\n" and its
    UTF-8 byte length before hashing.

    Raises:
        InvalidSignatureError: If the signature cannot be parsed or recovered
    """
    try:
        signature_bytes = decode_hex(signature.strip())
    except (ValueError, TypeError) as e:
        raise InvalidSignatureError("Signature is not valid hex") from e

    if len(signature_bytes) != SIGNATURE_LENGTH:
        raise InvalidSignatureError(
            f"Signature must be {SIGNATURE_LENGTH} bytes, got {len(signature_bytes)}"
        )

    try:
        return Account.recover_message(encode_defunct(text=message), signature=signature_bytes)
    except Exception as e:
        raise InvalidSignatureError("Signature could not be recovered") from e


class IdentityLinker:
    """Links a chat identity to the wallet that signs its challenge."""

    def __init__(
        self,
        users: UserService,
        notifier: NotificationDispatcher,
        app_url: Optional[str] = None,
        deep_link_base: Optional[str] = None,
        session_ttl_minutes: Optional[int] = None,
    ):
        self.users = users
        self.notifier = notifier
        self.app_url = (app_url or settings.APP_URL).rstrip("/")
        self.deep_link_base = (deep_link_base or settings.WALLET_DEEP_LINK_BASE).rstrip("/")
        self.session_ttl_minutes = session_ttl_minutes or settings.AUTH_SESSION_TTL_MINUTES

    def auth_page_url(self, chat_id: str) -> str:
        return f"{self.app_url}/auth/{chat_id}"

    def redirect_url(self, chat_id: str) -> str:
        """Link sent in chat; resolves per device through /auth-redirect."""
        return f"{self.app_url}/auth-redirect/{chat_id}"

    def build_challenge_target(self, chat_id: str, user_agent: Optional[str]) -> str:
        """
        Chooses where to send the user to sign the challenge.

        Mobile agents get a wallet deep link that opens the signing page in
        the wallet's in-app browser; everything else gets the page directly.
        """
        if is_mobile_user_agent(user_agent):
            parsed = urlparse(self.app_url)
            host_and_path = f"{parsed.netloc}{parsed.path}".rstrip("/")
            return f"{self.deep_link_base}/{host_and_path}/auth/{chat_id}"

        return self.auth_page_url(chat_id)

    async def verify_link(
        self,
        chat_id: Optional[str],
        claimed_address: Optional[str],
        signature: Optional[str],
        message: Optional[str],
    ) -> LinkResult:
        """
        Verifies a signed challenge and links the wallet.

        Raises:
            BadRequestError: Missing field, malformed address or unexpected message
            InvalidSignatureError: Signature cannot be parsed
            SignatureMismatchError: Recovered signer differs from claimed address
            PersistenceError: Store write failed
        """
        if not all(value and str(value).strip() for value in (chat_id, claimed_address, signature, message)):
            raise BadRequestError("Missing required fields: chatId, account, signature, message")

        chat_id = str(chat_id).strip()

        with LogContext(chat_id=chat_id):
            if not is_hex_address(claimed_address):
                raise BadRequestError("Account is not a valid address")

            if message != build_challenge_message(chat_id):
                logger.warning("Signed message does not match the challenge")
                raise BadRequestError("Message does not match the challenge for this chat")

            recovered = recover_signer(message, signature)

            if not addresses_equal(recovered, claimed_address):
                logger.warning(
                    f"Signature mismatch: recovered {normalize_address(recovered)}, "
                    f"claimed {normalize_address(claimed_address)}"
                )
                raise SignatureMismatchError()

            user = await self.users.link_wallet(chat_id, claimed_address)
            await self.users.record_auth_session(
                AuthSession.issue(
                    user_id=chat_id,
                    message=message,
                    signature=signature,
                    ttl_minutes=self.session_ttl_minutes,
                )
            )

            outcome = await self.notifier.notify(
                chat_id,
                create_text_message(WALLET_LINKED_MESSAGE.format(wallet=user.wallet_address)),
            )

            logger.info(f"Wallet link verified (notified={outcome.delivered})")

            return LinkResult(
                chat_id=chat_id,
                wallet_address=user.wallet_address,
                notified=outcome.delivered,
            )
