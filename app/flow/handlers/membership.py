"""
app/flow/handlers/membership.py

Handles: my groups, status, per-group status, payout history

All views start from the chat's recorded memberships and read the chain
for the rest. Groups whose reads fail are left out of the list.
"""

from typing import Dict, Any, List

from app.flow.actions import MyGroups, Status, GroupStatus, History
from app.flow.handlers.common import (
    main_menu_rows,
    render_group_line,
    render_status_line,
    render_cycle,
    render_payout,
)
from app.services.container import ServiceContainer
from utils import constants
from utils.telegram_utils import create_keyboard_message, create_text_message, callback_button, escape


async def _membership_ids(services: ServiceContainer, chat_id: str) -> List[int]:
    memberships = await services.users.list_memberships(chat_id)
    return [m.group_id for m in memberships]


async def handle_my_groups(services: ServiceContainer, chat_id: str, action: MyGroups) -> Dict[str, Any]:
    wallet = await services.composer.require_wallet(chat_id)
    group_ids = await _membership_ids(services, chat_id)

    if not group_ids:
        return create_keyboard_message(constants.NO_MEMBERSHIPS_MESSAGE, main_menu_rows())

    entries = await services.aggregator.list_my_groups(group_ids, wallet)

    lines = [constants.MY_GROUPS_HEADER, ""]
    rows = []
    for entry in entries:
        lines.append(render_group_line(services, entry.group))
        lines.append("")
        rows.append([
            callback_button(
                constants.BUTTON_GROUP_STATUS.format(group_id=entry.group.group_id),
                f"{constants.PREFIX_GROUP_STATUS}{entry.group.group_id}",
            ),
            callback_button(
                constants.BUTTON_CONTRIBUTE_TO.format(group_id=entry.group.group_id),
                f"{constants.PREFIX_CONTRIBUTE}{entry.group.group_id}",
            ),
        ])

    return create_keyboard_message("\n".join(lines).strip(), rows)


async def handle_status(services: ServiceContainer, chat_id: str, action: Status) -> Dict[str, Any]:
    """
    One status line per joined group: enrollment, this cycle's
    contribution, total contributions, payout received.
    """
    wallet = await services.composer.require_wallet(chat_id)
    group_ids = await _membership_ids(services, chat_id)

    if not group_ids:
        return create_keyboard_message(constants.NO_MEMBERSHIPS_MESSAGE, main_menu_rows())

    entries = await services.aggregator.list_my_groups(group_ids, wallet)

    lines = [constants.STATUS_HEADER, ""]
    for entry in entries:
        lines.append(render_status_line(entry.group, entry.status))
        lines.append("")

    return create_text_message("\n".join(lines).strip())


async def handle_group_status(services: ServiceContainer, chat_id: str, action: GroupStatus) -> Dict[str, Any]:
    """
    Detailed view of one group: the wallet's status plus the current cycle.
    """
    wallet = await services.composer.require_wallet(chat_id)

    group = await services.aggregator.get_group_metadata(action.group_id)
    status = await services.aggregator.get_user_status(group.group_contract, wallet)
    cycle = await services.aggregator.get_cycle_info(group.group_contract)
    participants = await services.aggregator.get_participants(group.group_contract)

    text = "\n\n".join([
        render_status_line(group, status),
        render_cycle(services, cycle, len(participants)),
    ])

    rows = []
    if status.is_enrolled and not status.has_contributed_this_cycle:
        rows.append([
            callback_button(
                constants.BUTTON_CONTRIBUTE_TO.format(group_id=group.group_id),
                f"{constants.PREFIX_CONTRIBUTE}{group.group_id}",
            )
        ])

    return create_keyboard_message(text, rows)


async def handle_history(services: ServiceContainer, chat_id: str, action: History) -> Dict[str, Any]:
    await services.composer.require_wallet(chat_id)
    group_ids = await _membership_ids(services, chat_id)

    if not group_ids:
        return create_keyboard_message(constants.NO_MEMBERSHIPS_MESSAGE, main_menu_rows())

    histories = await services.aggregator.get_history(group_ids)

    lines = [constants.HISTORY_HEADER, ""]
    for history in histories:
        lines.append(f"<b>#{history.group.group_id} {escape(history.group.name)}</b>")
        if history.payouts:
            lines.extend(render_payout(services, payout) for payout in history.payouts)
        else:
            lines.append(constants.NO_PAYOUTS_MESSAGE)
        lines.append("")

    return create_text_message("\n".join(lines).strip())
