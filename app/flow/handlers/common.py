"""
app/flow/handlers/common.py

Shared reply builders used by several handlers:

- Main menu and link-wallet prompts
- Transaction payload rendering
- Group, status, cycle and payout rendering
"""

from typing import Dict, Any, List, Optional

from app.schemas.chain import GroupView, StatusView, CycleView, PayoutRecord, TransactionPayload
from app.services.container import ServiceContainer
from app.services.identity_service import build_challenge_message
from utils import constants
from utils.chain_utils import format_amount, short_address
from utils.telegram_utils import (
    create_text_message,
    create_keyboard_message,
    callback_button,
    url_button,
    escape,
)
from utils.time_utils import format_remaining_time, format_unix_timestamp, seconds_to_days


def main_menu_rows() -> List[List[Dict[str, str]]]:
    return [
        [
            callback_button(constants.BUTTON_BROWSE, constants.ACTION_BROWSE_GROUPS),
            callback_button(constants.BUTTON_CREATE, constants.ACTION_CREATE_GROUP),
        ],
        [
            callback_button(constants.BUTTON_MY_GROUPS, constants.ACTION_MY_GROUPS),
            callback_button(constants.BUTTON_CONTRIBUTE, constants.ACTION_CONTRIBUTE_MENU),
        ],
        [
            callback_button(constants.BUTTON_STATUS, constants.ACTION_STATUS),
            callback_button(constants.BUTTON_HELP, constants.ACTION_HELP),
        ],
    ]


def link_wallet_reply(services: ServiceContainer, chat_id: str, text: Optional[str] = None) -> Dict[str, Any]:
    """Prompt with a button to the device-aware signing link."""
    if text is None:
        text = constants.LINK_WALLET_PROMPT.format(message=escape(build_challenge_message(chat_id)))
    return create_keyboard_message(
        text,
        [[url_button(constants.BUTTON_LINK_WALLET, services.linker.redirect_url(chat_id))]],
    )


def not_linked_reply(services: ServiceContainer, chat_id: str) -> Dict[str, Any]:
    return link_wallet_reply(services, chat_id, constants.NOT_LINKED_MESSAGE)


def amount_text(services: ServiceContainer, value: int) -> str:
    return format_amount(value, symbol=services.settings.NATIVE_SYMBOL)


def render_transaction(services: ServiceContainer, payload: TransactionPayload) -> Dict[str, Any]:
    return create_text_message(
        constants.TRANSACTION_READY_MESSAGE.format(
            description=escape(payload.description),
            to=payload.to,
            value=amount_text(services, payload.value),
            gas=payload.gas,
            chain_id=payload.chain_id,
            data=payload.data,
        )
    )


def render_group_line(services: ServiceContainer, group: GroupView) -> str:
    return constants.GROUP_LINE.format(
        group_id=group.group_id,
        name=escape(group.name),
        amount=amount_text(services, group.contribution_amount),
        days=seconds_to_days(group.cycle_duration),
        current=group.current_participants,
        max=group.max_participants,
    )


def render_group_details(services: ServiceContainer, group: GroupView) -> str:
    return constants.GROUP_DETAILS_MESSAGE.format(
        group_id=group.group_id,
        name=escape(group.name),
        description=escape(group.description),
        amount=amount_text(services, group.contribution_amount),
        days=seconds_to_days(group.cycle_duration),
        current=group.current_participants,
        max=group.max_participants,
        creator=group.creator,
        contract=group.group_contract,
        created=format_unix_timestamp(group.created_at),
    )


def _yes_no(flag: bool) -> str:
    return "✅" if flag else "❌"


def render_status_line(group: GroupView, status: StatusView) -> str:
    return constants.STATUS_LINE.format(
        group_id=group.group_id,
        name=escape(group.name),
        enrolled=_yes_no(status.is_enrolled),
        contributed=_yes_no(status.has_contributed_this_cycle),
        total=status.total_contributions,
        received=_yes_no(status.has_received_payout),
    )


def render_cycle(services: ServiceContainer, cycle: CycleView, participants: int) -> str:
    recipient = (
        f"<code>{short_address(cycle.current_recipient)}</code>"
        if cycle.current_recipient else constants.RECIPIENT_PENDING
    )
    return constants.CYCLE_INFO_MESSAGE.format(
        cycle=cycle.cycle_number,
        pool=amount_text(services, cycle.pool_balance),
        contributions=cycle.contributions_this_cycle,
        participants=participants,
        recipient=recipient,
        remaining=format_remaining_time(cycle.time_remaining),
    )


def render_payout(services: ServiceContainer, payout: PayoutRecord) -> str:
    return constants.PAYOUT_LINE.format(
        date=format_unix_timestamp(payout.timestamp),
        amount=amount_text(services, payout.amount),
        recipient=short_address(payout.recipient),
    )
