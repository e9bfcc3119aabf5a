"""
app/services/container.py

Purpose: Explicit service wiring

- Builds every service once, at startup, from the database handle and settings
- Passed to the dispatcher and exposed to routes through FastAPI dependencies
- Tests construct it directly with fakes
"""

from dataclasses import dataclass

from motor.motor_asyncio import AsyncIOMotorDatabase

from app.core.config import Settings, settings as default_settings
from app.flow.conversation_store import ConversationStore
from app.services.chain_service import ChainGateway, ChainViewAggregator
from app.services.identity_service import IdentityLinker
from app.services.notification_service import NotificationDispatcher
from app.services.telegram_service import TelegramService
from app.services.transaction_service import TransactionComposer
from app.services.user_service import UserService


@dataclass
class ServiceContainer:
    settings: Settings
    users: UserService
    telegram: TelegramService
    notifier: NotificationDispatcher
    linker: IdentityLinker
    gateway: ChainGateway
    aggregator: ChainViewAggregator
    composer: TransactionComposer
    conversations: ConversationStore

    async def close(self):
        await self.telegram.close()
        await self.gateway.close()


def build_container(database: AsyncIOMotorDatabase, settings: Settings = default_settings) -> ServiceContainer:
    users = UserService(database)
    telegram = TelegramService(
        token=settings.TELEGRAM_BOT_TOKEN,
        api_base=settings.TELEGRAM_API_BASE,
        timeout=settings.TELEGRAM_TIMEOUT,
    )
    notifier = NotificationDispatcher(telegram)
    linker = IdentityLinker(
        users,
        notifier,
        app_url=settings.APP_URL,
        deep_link_base=settings.WALLET_DEEP_LINK_BASE,
        session_ttl_minutes=settings.AUTH_SESSION_TTL_MINUTES,
    )
    gateway = ChainGateway(rpc_url=settings.RPC_URL, registry_address=settings.REGISTRY_CONTRACT_ADDRESS)
    aggregator = ChainViewAggregator(gateway)
    composer = TransactionComposer(
        users,
        aggregator,
        registry_address=settings.REGISTRY_CONTRACT_ADDRESS,
        chain_id=settings.CHAIN_ID,
    )

    return ServiceContainer(
        settings=settings,
        users=users,
        telegram=telegram,
        notifier=notifier,
        linker=linker,
        gateway=gateway,
        aggregator=aggregator,
        composer=composer,
        conversations=ConversationStore(),
    )
