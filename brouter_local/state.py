"""
Purpose: Lifecycle states of a local BRouter server.

UNINSTALLED -> INSTALLED -> RUNNING <-> STOPPED
STOPPED -> INSTALLED (the install directory vanished and is fetched again)

There is no uninstall, so nothing ever goes back to UNINSTALLED.
Staying in the same state is always allowed (install/start/stop are idempotent).
"""

from enum import Enum
from typing import Dict, FrozenSet

from .errors import ServerStateError


class ServerState(str, Enum):
    UNINSTALLED = "uninstalled"
    INSTALLED = "installed"
    RUNNING = "running"
    STOPPED = "stopped"


ALLOWED_TRANSITIONS: Dict[ServerState, FrozenSet[ServerState]] = {
    ServerState.UNINSTALLED: frozenset({ServerState.INSTALLED}),
    ServerState.INSTALLED: frozenset({ServerState.RUNNING}),
    ServerState.RUNNING: frozenset({ServerState.STOPPED}),
    ServerState.STOPPED: frozenset({ServerState.RUNNING, ServerState.INSTALLED}),
}


def can_transition(current: ServerState, target: ServerState) -> bool:
    return current == target or target in ALLOWED_TRANSITIONS[current]


def check_transition(current: ServerState, target: ServerState) -> ServerState:
    """
    Validate a move between lifecycle states and return the new state.

    Raises:
        ServerStateError: the state machine has no such edge
        (e.g. UNINSTALLED -> RUNNING: start() before install()).
    """
    if not can_transition(current, target):
        raise ServerStateError(f"Cannot move BRouter server from {current.value} to {target.value}")
    return target
