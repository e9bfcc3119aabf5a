"""
app/flow/handlers/create_group.py

Handles: the create_group conversation

- name -> description -> amount -> duration -> participants -> submit
- Invalid input re-prompts the same step without advancing
- Submit hands the collected fields to the transaction composer once and
  ends the flow whatever the outcome
"""

from typing import Dict, Any, Optional, Callable, Tuple

from app.core.exceptions import NotLinkedError, ValidationError
from app.flow.actions import CreateGroup, Cancel
from app.flow.handlers.common import render_transaction, not_linked_reply, amount_text
from app.flow.states import (
    FlowAction,
    CreateGroupStep,
    ConversationState,
    get_step_metadata,
    next_step,
)
from app.services.container import ServiceContainer
from utils import constants
from utils.chain_utils import to_base_units
from utils.telegram_utils import create_text_message, escape
from utils.time_utils import days_to_seconds, seconds_to_days
from utils.validation_utils import (
    parse_amount,
    parse_duration_days,
    parse_participants,
    validate_group_name,
    validate_group_description,
)
from app.core.logging import get_logger, LogContext

logger = get_logger(__name__)


def _parse_duration(text: str) -> Optional[int]:
    days = parse_duration_days(text)
    return days_to_seconds(days) if days is not None else None


# Step -> (data key, parser). Parsers return None on invalid input.
STEP_INPUTS: Dict[CreateGroupStep, Tuple[str, Callable[[str], Any]]] = {
    CreateGroupStep.NAME: ("name", validate_group_name),
    CreateGroupStep.DESCRIPTION: ("description", validate_group_description),
    CreateGroupStep.AMOUNT: ("amount", parse_amount),
    CreateGroupStep.DURATION: ("duration_seconds", _parse_duration),
    CreateGroupStep.PARTICIPANTS: ("max_participants", parse_participants),
}


def _prompt_text(services: ServiceContainer, step: CreateGroupStep) -> str:
    return get_step_metadata(step).prompt.format(symbol=services.settings.NATIVE_SYMBOL)


async def handle_create_group(services: ServiceContainer, chat_id: str, action: CreateGroup) -> Dict[str, Any]:
    """
    Starts the create_group flow, replacing any flow already in progress.
    """
    with LogContext(chat_id=chat_id, step=CreateGroupStep.NAME.value):
        services.conversations.create(chat_id, FlowAction.CREATE_GROUP, CreateGroupStep.NAME)
        logger.info("Group creation started")
        return create_text_message(_prompt_text(services, CreateGroupStep.NAME))


async def handle_cancel(services: ServiceContainer, chat_id: str, action: Cancel) -> Dict[str, Any]:
    if services.conversations.delete(chat_id):
        return create_text_message(constants.GROUP_CREATION_CANCELLED_MESSAGE)
    return create_text_message(constants.NOTHING_TO_CANCEL_MESSAGE)


async def handle_flow_input(services: ServiceContainer, chat_id: str, text: str) -> Optional[Dict[str, Any]]:
    """
    Feeds a plain-text message to the chat's active flow.

    Returns:
        Reply payload, or None when the chat has no active flow
    """
    state = services.conversations.get(chat_id)
    if state is None:
        return None

    with LogContext(chat_id=chat_id, step=state.step.value):
        if state.step not in STEP_INPUTS:
            # Stale state left at SUBMIT
            services.conversations.delete(chat_id)
            return None

        key, parser = STEP_INPUTS[state.step]
        value = parser(text)

        if value is None:
            logger.info("Invalid input, re-prompting")
            metadata = get_step_metadata(state.step)
            return create_text_message(
                metadata.invalid_message + "\n\n" + _prompt_text(services, state.step)
            )

        step = next_step(state.step)
        state = services.conversations.update(chat_id, step=step, data={key: value})

        if step == CreateGroupStep.SUBMIT:
            return await _submit(services, state)

        return create_text_message(_prompt_text(services, step))


def _summary(services: ServiceContainer, data: Dict[str, Any]) -> str:
    return constants.GROUP_SUMMARY_MESSAGE.format(
        name=escape(data["name"]),
        description=escape(data["description"]),
        amount=amount_text(services, to_base_units(data["amount"])),
        days=seconds_to_days(data["duration_seconds"]),
        participants=data["max_participants"],
    )


async def _submit(services: ServiceContainer, state: ConversationState) -> Dict[str, Any]:
    # Ended before the composer call; a /create arriving meanwhile starts a new flow
    services.conversations.delete(state.chat_id)

    data = state.data
    try:
        result = await services.composer.create_group(
            state.chat_id,
            data["amount"],
            data["duration_seconds"],
            data["max_participants"],
            data["name"],
            data["description"],
        )
    except NotLinkedError:
        return not_linked_reply(services, state.chat_id)
    except ValidationError as e:
        return create_text_message(f"❌ {e.message}")

    logger.info("Group creation submitted")

    if not result.ok:
        return create_text_message(result.reason)

    reply = render_transaction(services, result.payload)
    reply["text"] = _summary(services, data) + "\n\n" + reply["text"]
    return reply
