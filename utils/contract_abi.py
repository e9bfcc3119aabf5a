"""
utils/contract_abi.py

Purpose: Fixed interface of the external ROSCA contracts

- Registry: paginated group listing, metadata, createGroup, joinGroup
- Group contract: status/cycle/participant/payout views, contribute
- Canonical function signatures used for calldata selectors

(Only the functions this service reads or prepares calls for are listed.)
"""

from typing import Any, Dict, List


def _param(name: str, type_: str, components: List[Dict[str, Any]] = None) -> Dict[str, Any]:
    param = {"name": name, "type": type_}
    if components:
        param["components"] = components
        param["internalType"] = "struct"
    return param


def _function(name: str, inputs: list, outputs: list, mutability: str = "view") -> Dict[str, Any]:
    return {
        "type": "function",
        "name": name,
        "inputs": inputs,
        "outputs": outputs,
        "stateMutability": mutability,
    }


GROUP_INFO_COMPONENTS = [
    _param("name", "string"),
    _param("description", "string"),
    _param("contributionAmount", "uint256"),
    _param("cycleDuration", "uint256"),
    _param("currentParticipants", "uint256"),
    _param("maxParticipants", "uint256"),
    _param("creator", "address"),
    _param("groupContract", "address"),
    _param("createdAt", "uint256"),
]

PAYOUT_COMPONENTS = [
    _param("recipient", "address"),
    _param("amount", "uint256"),
    _param("timestamp", "uint256"),
]


REGISTRY_ABI = [
    _function(
        "getActiveGroups",
        [_param("offset", "uint256"), _param("limit", "uint256")],
        [_param("groups", "tuple[]", GROUP_INFO_COMPONENTS)],
    ),
    _function(
        "getGroupMetadata",
        [_param("groupId", "uint256")],
        [_param("group", "tuple", GROUP_INFO_COMPONENTS)],
    ),
    _function(
        "createGroup",
        [
            _param("contributionAmount", "uint256"),
            _param("cycleDuration", "uint256"),
            _param("maxParticipants", "uint256"),
            _param("name", "string"),
            _param("description", "string"),
        ],
        [_param("groupId", "uint256")],
        mutability="nonpayable",
    ),
    _function(
        "joinGroup",
        [_param("groupId", "uint256")],
        [],
        mutability="payable",
    ),
]


GROUP_ABI = [
    _function(
        "getUserStatus",
        [_param("user", "address")],
        [
            _param("isEnrolled", "bool"),
            _param("hasContributedThisCycle", "bool"),
            _param("totalContributions", "uint256"),
            _param("hasReceivedPayout", "bool"),
        ],
    ),
    _function(
        "getCurrentCycleInfo",
        [],
        [
            _param("cycleNumber", "uint256"),
            _param("poolBalance", "uint256"),
            _param("contributionsThisCycle", "uint256"),
            _param("currentRecipient", "address"),
            _param("timeRemaining", "uint256"),
        ],
    ),
    _function(
        "getParticipants",
        [],
        [_param("participants", "address[]")],
    ),
    _function(
        "getPayoutHistory",
        [],
        [_param("payouts", "tuple[]", PAYOUT_COMPONENTS)],
    ),
    _function(
        "contribute",
        [],
        [],
        mutability="payable",
    ),
]


# Signatures of the state-changing entry points, in canonical form
CREATE_GROUP_SIGNATURE = "createGroup(uint256,uint256,uint256,string,string)"
CREATE_GROUP_TYPES = ["uint256", "uint256", "uint256", "string", "string"]

JOIN_GROUP_SIGNATURE = "joinGroup(uint256)"
JOIN_GROUP_TYPES = ["uint256"]

CONTRIBUTE_SIGNATURE = "contribute()"
CONTRIBUTE_TYPES: List[str] = []
