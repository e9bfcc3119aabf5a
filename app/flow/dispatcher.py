"""
app/flow/dispatcher.py

Purpose: Central message dispatcher

- Receives normalized messages from the webhook
- Decodes commands and button presses into typed actions
- Feeds plain text to the chat's active conversation, if any
- Sends the reply through the notification dispatcher
- Turns service errors into plain-language replies
"""

from typing import Dict, Any, Optional, Callable, Awaitable, Type

from app.core.exceptions import (
    RoscaBotError,
    NotLinkedError,
    ChainQueryError,
    PersistenceError,
    ResourceNotFoundError,
    ValidationError,
)
from app.flow import actions
from app.flow.actions import Action, parse_action, parse_command
from app.flow.handlers import contribute, create_group, groups, membership, welcome
from app.flow.handlers.common import not_linked_reply
from app.schemas.telegram import IncomingMessage
from app.services.container import ServiceContainer
from utils import constants
from utils.telegram_utils import create_text_message
from app.core.logging import get_logger, LogContext

logger = get_logger(__name__)

Handler = Callable[[ServiceContainer, str, Any], Awaitable[Dict[str, Any]]]


async def _handle_unknown(services: ServiceContainer, chat_id: str, action: actions.UnknownAction) -> Dict[str, Any]:
    logger.info(f"Unknown action: {action.raw!r}")
    return create_text_message(constants.UNKNOWN_ACTION_MESSAGE)


# One entry per action type
HANDLERS: Dict[Type, Handler] = {
    actions.Start: welcome.handle_start,
    actions.Help: welcome.handle_help,
    actions.BrowseGroups: groups.handle_browse,
    actions.GroupDetails: groups.handle_group_details,
    actions.JoinGroup: groups.handle_join,
    actions.CreateGroup: create_group.handle_create_group,
    actions.Cancel: create_group.handle_cancel,
    actions.MyGroups: membership.handle_my_groups,
    actions.Status: membership.handle_status,
    actions.GroupStatus: membership.handle_group_status,
    actions.History: membership.handle_history,
    actions.ContributeMenu: contribute.handle_contribute_menu,
    actions.Contribute: contribute.handle_contribute,
    actions.UnknownAction: _handle_unknown,
}


def decode_message(message: IncomingMessage) -> Optional[Action]:
    """
    Returns the action for a button press or command, or None for plain text.
    """
    if message.is_callback:
        return parse_action(message.callback_data)
    return parse_command(message.text)


async def _guarded(services: ServiceContainer, chat_id: str, label: str, call: Awaitable) -> Optional[Dict[str, Any]]:
    """
    Awaits a handler call, turning service errors into replies.
    Anything unexpected propagates.
    """
    try:
        return await call
    except NotLinkedError:
        return not_linked_reply(services, chat_id)
    except ResourceNotFoundError:
        return create_text_message(constants.GROUP_NOT_FOUND_MESSAGE)
    except ValidationError as e:
        return create_text_message(f"❌ {e.message}")
    except ChainQueryError as e:
        logger.warning(f"Chain read failed for {label}: {e.message}")
        return create_text_message(constants.CHAIN_ERROR_MESSAGE)
    except PersistenceError as e:
        logger.error(f"Store failure for {label}: {e.message}")
        return create_text_message(constants.STORAGE_ERROR_MESSAGE)


async def route_to_handler(services: ServiceContainer, chat_id: str, action: Action) -> Dict[str, Any]:
    """
    Runs the handler registered for the action's type.
    """
    handler = HANDLERS[type(action)]
    return await _guarded(services, chat_id, type(action).__name__, handler(services, chat_id, action))


async def dispatch_message(services: ServiceContainer, message: IncomingMessage) -> Dict[str, Any]:
    """
    Main dispatcher for incoming chat events.

    Args:
        services: Service container
        message: Normalized message

    Returns:
        Status dict
    """
    chat_id = message.chat_id

    with LogContext(chat_id=chat_id):
        if message.is_callback:
            await services.notifier.acknowledge(message.callback_query_id)

        try:
            action = decode_message(message)

            if action is None:
                response = await _guarded(
                    services,
                    chat_id,
                    "flow input",
                    create_group.handle_flow_input(services, chat_id, message.text or ""),
                )
            else:
                logger.info(f"Dispatching {type(action).__name__}")
                response = await route_to_handler(services, chat_id, action)
        except RoscaBotError as e:
            logger.error(f"Dispatcher error: {e.message}", exc_info=True)
            response = create_text_message(constants.GENERIC_ERROR_MESSAGE)
        except Exception as e:
            logger.error(f"Unexpected dispatcher error: {e}", exc_info=True)
            await services.notifier.notify(chat_id, constants.GENERIC_ERROR_MESSAGE)
            return {"status": "error", "error": str(e)}

        if response is None:
            logger.debug("Plain text outside a conversation, ignored")
            return {"status": "ignored"}

        outcome = await services.notifier.notify(chat_id, response)
        return {"status": "success", "delivered": outcome.delivered}
