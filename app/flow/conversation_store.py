"""
app/flow/conversation_store.py

Purpose: Holds active conversation flows

- Keyed by chat identity, one active flow per chat
- Only create/get/update/delete accessors, so a shared cache can replace
  the in-process dict without touching call sites
"""

from dataclasses import replace
from datetime import datetime
from typing import Dict, Any, Optional

from app.flow.states import ConversationState, FlowAction, CreateGroupStep
from app.core.logging import get_logger

logger = get_logger(__name__)


class ConversationStore:
    """
    Process-local store. Not durable across restarts and not shared between
    processes.
    """

    def __init__(self):
        self._states: Dict[str, ConversationState] = {}

    def create(self, chat_id: str, action: FlowAction, step: CreateGroupStep) -> ConversationState:
        """
        Starts a flow, silently replacing any unfinished one.
        """
        if chat_id in self._states:
            logger.info(
                f"Discarding unfinished {self._states[chat_id].action.value} flow",
                extra={"chat_id": chat_id}
            )
        state = ConversationState(chat_id=chat_id, action=action, step=step)
        self._states[chat_id] = state
        return state

    def get(self, chat_id: str) -> Optional[ConversationState]:
        return self._states.get(chat_id)

    def update(
        self,
        chat_id: str,
        step: Optional[CreateGroupStep] = None,
        data: Optional[Dict[str, Any]] = None,
    ) -> ConversationState:
        """
        Moves the flow to `step` and merges `data` into the collected fields.

        Raises:
            KeyError: If the chat has no active flow
        """
        current = self._states[chat_id]
        updated = replace(
            current,
            step=step or current.step,
            data={**current.data, **(data or {})},
            updated_at=datetime.utcnow(),
        )
        self._states[chat_id] = updated
        return updated

    def delete(self, chat_id: str) -> bool:
        return self._states.pop(chat_id, None) is not None

    def __len__(self) -> int:
        return len(self._states)
