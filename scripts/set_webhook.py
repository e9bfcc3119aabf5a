"""
Registers the bot's webhook with Telegram.

    python scripts/set_webhook.py                  # uses APP_URL + API_PREFIX
    python scripts/set_webhook.py https://host/api/v1/webhook
"""

import asyncio
import sys
from pathlib import Path
from dotenv import load_dotenv

sys.path.insert(0, str(Path(__file__).parent.parent))

load_dotenv()

from app.core.config import settings
from app.core.exceptions import DeliveryError
from app.core.logging import setup_logging, get_logger
from app.services.telegram_service import TelegramService

setup_logging()
logger = get_logger("scripts.set_webhook")


async def main(url: str) -> int:
    telegram = TelegramService()

    if not telegram.is_configured():
        logger.error("❌ TELEGRAM_BOT_TOKEN is not set")
        return 1

    try:
        await telegram.set_webhook(url, secret_token=settings.TELEGRAM_WEBHOOK_SECRET)
        logger.info(f"✅ Webhook set to {url}")
        return 0
    except DeliveryError as e:
        logger.error(f"❌ Could not set webhook: {e.message}")
        return 1
    finally:
        await telegram.close()


if __name__ == "__main__":
    default_url = f"{settings.APP_URL.rstrip('/')}{settings.API_PREFIX}/webhook"
    target = sys.argv[1] if len(sys.argv) > 1 else default_url
    sys.exit(asyncio.run(main(target)))
