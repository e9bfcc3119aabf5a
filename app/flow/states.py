"""
app/flow/states.py

Purpose: Defines conversation flows and their steps

- Enum for each flow action and each step of the create_group flow
- Single source of truth for step order
- Metadata for each step (prompt, progress number)
- The transient ConversationState record
"""

from enum import Enum
from typing import Dict, Any, List, Optional
from dataclasses import dataclass, field
from datetime import datetime

from utils import constants


class FlowAction(str, Enum):
    """Multi-step flows a chat can be in."""
    CREATE_GROUP = "create_group"


class CreateGroupStep(str, Enum):
    """
    Steps of the create_group flow, in order.
    SUBMIT is terminal: reaching it hands the fields to the composer.
    """
    NAME = "name"
    DESCRIPTION = "description"
    AMOUNT = "amount"
    DURATION = "duration"
    PARTICIPANTS = "participants"
    SUBMIT = "submit"


@dataclass
class StepMetadata:
    """
    Metadata associated with each step.
    """
    name: CreateGroupStep
    step_number: int
    prompt: str
    invalid_message: str = ""
    total_steps: int = 5


STEP_METADATA: Dict[CreateGroupStep, StepMetadata] = {
    CreateGroupStep.NAME: StepMetadata(
        name=CreateGroupStep.NAME,
        step_number=1,
        prompt=constants.ASK_GROUP_NAME_MESSAGE,
        invalid_message=constants.INVALID_NAME_MESSAGE,
    ),
    CreateGroupStep.DESCRIPTION: StepMetadata(
        name=CreateGroupStep.DESCRIPTION,
        step_number=2,
        prompt=constants.ASK_GROUP_DESCRIPTION_MESSAGE,
        invalid_message=constants.INVALID_DESCRIPTION_MESSAGE,
    ),
    CreateGroupStep.AMOUNT: StepMetadata(
        name=CreateGroupStep.AMOUNT,
        step_number=3,
        prompt=constants.ASK_AMOUNT_MESSAGE,
        invalid_message=constants.INVALID_AMOUNT_MESSAGE,
    ),
    CreateGroupStep.DURATION: StepMetadata(
        name=CreateGroupStep.DURATION,
        step_number=4,
        prompt=constants.ASK_DURATION_MESSAGE,
        invalid_message=constants.INVALID_DURATION_MESSAGE,
    ),
    CreateGroupStep.PARTICIPANTS: StepMetadata(
        name=CreateGroupStep.PARTICIPANTS,
        step_number=5,
        prompt=constants.ASK_PARTICIPANTS_MESSAGE,
        invalid_message=constants.INVALID_PARTICIPANTS_MESSAGE,
    ),
}


CREATE_GROUP_STEPS: List[CreateGroupStep] = list(CreateGroupStep)


def next_step(step: CreateGroupStep) -> CreateGroupStep:
    """
    The step after `step`. SUBMIT has no successor.

    Raises:
        ValueError: If called with SUBMIT
    """
    index = CREATE_GROUP_STEPS.index(step)
    if index + 1 >= len(CREATE_GROUP_STEPS):
        raise ValueError("submit is the final step")
    return CREATE_GROUP_STEPS[index + 1]


def get_step_metadata(step: CreateGroupStep) -> Optional[StepMetadata]:
    return STEP_METADATA.get(step)


@dataclass
class ConversationState:
    """
    In-memory state of one chat's active flow. Never persisted.
    """
    chat_id: str
    action: FlowAction
    step: CreateGroupStep
    data: Dict[str, Any] = field(default_factory=dict)
    started_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)
