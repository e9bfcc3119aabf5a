"""
app/flow/actions.py

Purpose: Typed chat actions

- Decodes inline-button callback data and slash commands once, at the
  boundary, into a closed set of action types
- Each action carries its own payload (group index / group id)
"""

import re
from dataclasses import dataclass
from typing import Optional, Union

from utils import constants


@dataclass(frozen=True)
class Start:
    pass


@dataclass(frozen=True)
class Help:
    pass


@dataclass(frozen=True)
class BrowseGroups:
    pass


@dataclass(frozen=True)
class CreateGroup:
    pass


@dataclass(frozen=True)
class MyGroups:
    pass


@dataclass(frozen=True)
class ContributeMenu:
    pass


@dataclass(frozen=True)
class Status:
    pass


@dataclass(frozen=True)
class History:
    pass


@dataclass(frozen=True)
class Cancel:
    pass


@dataclass(frozen=True)
class JoinGroup:
    index: int


@dataclass(frozen=True)
class GroupDetails:
    index: int


@dataclass(frozen=True)
class Contribute:
    group_id: int


@dataclass(frozen=True)
class GroupStatus:
    group_id: int


@dataclass(frozen=True)
class UnknownAction:
    raw: str


Action = Union[
    Start, Help, BrowseGroups, CreateGroup, MyGroups, ContributeMenu, Status,
    History, Cancel, JoinGroup, GroupDetails, Contribute, GroupStatus, UnknownAction,
]

ALL_ACTION_TYPES = (
    Start, Help, BrowseGroups, CreateGroup, MyGroups, ContributeMenu, Status,
    History, Cancel, JoinGroup, GroupDetails, Contribute, GroupStatus, UnknownAction,
)

_SIMPLE_ACTIONS = {
    constants.ACTION_BROWSE_GROUPS: BrowseGroups,
    constants.ACTION_CREATE_GROUP: CreateGroup,
    constants.ACTION_MY_GROUPS: MyGroups,
    constants.ACTION_CONTRIBUTE_MENU: ContributeMenu,
    constants.ACTION_STATUS: Status,
    constants.ACTION_HELP: Help,
    constants.ACTION_HISTORY: History,
}

# Longest prefix first: "contribute_menu" must not reach the contribute_ rule
_PARAMETERIZED_ACTIONS = (
    (constants.PREFIX_JOIN_GROUP, JoinGroup),
    (constants.PREFIX_GROUP_DETAILS, GroupDetails),
    (constants.PREFIX_GROUP_STATUS, GroupStatus),
    (constants.PREFIX_CONTRIBUTE, Contribute),
)

_COMMANDS = {
    constants.CMD_START: Start,
    constants.CMD_HELP: Help,
    constants.CMD_BROWSE: BrowseGroups,
    constants.CMD_CREATE: CreateGroup,
    constants.CMD_MY_GROUPS: MyGroups,
    constants.CMD_CONTRIBUTE: ContributeMenu,
    constants.CMD_STATUS: Status,
    constants.CMD_HISTORY: History,
    constants.CMD_CANCEL: Cancel,
}

_INDEX_PATTERN = re.compile(r"^[0-9]+$")
_COMMAND_PATTERN = re.compile(r"^/([A-Za-z_]+)(?:@\w+)?(?:\s|$)")


def parse_action(raw: Optional[str]) -> Action:
    """
    Decodes inline-button callback data.

    Examples:
        "browse_groups"     -> BrowseGroups()
        "join_group_3"      -> JoinGroup(index=3)
        "contribute_7"      -> Contribute(group_id=7)
        "contribute_menu"   -> ContributeMenu()
        "join_group_x"      -> UnknownAction("join_group_x")
    """
    raw = (raw or "").strip()

    simple = _SIMPLE_ACTIONS.get(raw)
    if simple is not None:
        return simple()

    for prefix, action_type in _PARAMETERIZED_ACTIONS:
        if raw.startswith(prefix):
            suffix = raw[len(prefix):]
            if _INDEX_PATTERN.match(suffix):
                return action_type(int(suffix))
            return UnknownAction(raw)

    return UnknownAction(raw)


def parse_command(text: Optional[str]) -> Optional[Action]:
    """
    Decodes a slash command ("/browse", "/start@MyBot").

    Returns:
        The action, UnknownAction for unrecognized commands, or None when
        the text is not a command at all
    """
    if not text:
        return None

    match = _COMMAND_PATTERN.match(text.strip())
    if not match:
        return None

    command = match.group(1).lower()
    action_type = _COMMANDS.get(command)
    return action_type() if action_type else UnknownAction(text.strip())
