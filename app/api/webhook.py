"""
app/api/webhook.py

Purpose: Telegram webhook endpoint

- Verifies the secret token header when one is configured
- Parses updates into IncomingMessage
- Acknowledges immediately and dispatches in the background
"""

import hmac

from fastapi import APIRouter, BackgroundTasks, Depends, Header, HTTPException, Request
from typing import Optional

from app.api.deps import get_container
from app.core.logging import get_logger
from app.flow.dispatcher import dispatch_message
from app.schemas.telegram import parse_telegram_update
from app.services.container import ServiceContainer

logger = get_logger(__name__)
router = APIRouter()

SECRET_HEADER = "X-Telegram-Bot-Api-Secret-Token"


def _check_secret(expected: Optional[str], received: Optional[str]):
    if not expected:
        return
    if not received or not hmac.compare_digest(expected, received):
        logger.warning("Webhook call with a missing or wrong secret token")
        raise HTTPException(status_code=403, detail="Invalid webhook secret")


@router.post("/webhook")
async def webhook_handler(
    request: Request,
    background_tasks: BackgroundTasks,
    services: ServiceContainer = Depends(get_container),
    secret_token: Optional[str] = Header(None, alias=SECRET_HEADER),
):
    """
    Receives one Telegram update.

    Telegram retries any non-2xx answer, so everything past the secret
    check answers 200; the work itself runs after the response.
    """
    _check_secret(services.settings.TELEGRAM_WEBHOOK_SECRET, secret_token)

    try:
        payload = await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid webhook payload")

    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail="Invalid webhook payload")

    message = parse_telegram_update(payload)
    if message is None:
        logger.debug(f"Ignoring update {payload.get('update_id')}")
        return {"ok": True, "status": "ignored"}

    logger.info(
        f"Update {message.update_id} from chat {message.chat_id}",
        extra={"chat_id": message.chat_id}
    )

    background_tasks.add_task(dispatch_message, services, message)
    return {"ok": True, "status": "accepted"}


@router.get("/webhook")
async def webhook_verification():
    """
    Liveness check for the webhook route.
    """
    return {"status": "ok", "message": "Webhook endpoint is active"}
