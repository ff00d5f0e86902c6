"""
Recovery State Machine

States over (trust_recovery_active, trust_recovery_completed):
- INITIAL:   (False, False) no recovery in progress
- ACTIVE:    (True, False)  entered by the recalculation service on a score drop
- COMPLETED: (False, True)  entered only through an explicit completion

The engine only ever performs the ->COMPLETED transition itself. Completion
is accepted from any state; the progress gate is optional (see trust_service).
"""
from enum import Enum
from typing import Any, Dict, List, Tuple


class RecoveryState(str, Enum):
    INITIAL = "INITIAL"
    ACTIVE = "RECOVERY_ACTIVE"
    COMPLETED = "RECOVERY_COMPLETED"


# =============================================================================
# STATE CONFIGURATION
# =============================================================================

RECOVERY_STATE_CONFIG: Dict[RecoveryState, Dict[str, Any]] = {
    RecoveryState.INITIAL: {
        "description": "No recovery program in progress",
        "flags": (False, False),
        "allowed_transitions": [RecoveryState.ACTIVE, RecoveryState.COMPLETED],
        "entry_authority": "SYSTEM",
    },
    RecoveryState.ACTIVE: {
        "description": "Recovery program in progress after a score drop",
        "flags": (True, False),
        "allowed_transitions": [RecoveryState.COMPLETED],
        "entry_authority": "SYSTEM",  # Recalculation service detects the drop
    },
    RecoveryState.COMPLETED: {
        "description": "Recovery program completed",
        "flags": (False, True),
        "allowed_transitions": [RecoveryState.ACTIVE, RecoveryState.COMPLETED],
        "entry_authority": "VENDOR",  # Explicit completion only
    },
}


def derive_recovery_state(active: bool, completed: bool) -> RecoveryState:
    """
    Map the two persisted flags to a state.

    (True, True) should not occur at rest; completion is sticky so it wins.
    """
    if completed:
        return RecoveryState.COMPLETED
    if active:
        return RecoveryState.ACTIVE
    return RecoveryState.INITIAL


def flags_for(state: RecoveryState) -> Tuple[bool, bool]:
    """(active, completed) to persist for a state."""
    return RECOVERY_STATE_CONFIG[state]["flags"]


def can_transition(from_state: RecoveryState, to_state: RecoveryState) -> Tuple[bool, str]:
    allowed = RECOVERY_STATE_CONFIG[from_state]["allowed_transitions"]
    if to_state in allowed:
        return True, "Transition allowed"
    return False, f"Cannot transition from {from_state.value} to {to_state.value}"


def next_states(state: RecoveryState) -> List[RecoveryState]:
    return list(RECOVERY_STATE_CONFIG[state]["allowed_transitions"])


def completion_offered(active: bool, completed: bool, progress: float) -> bool:
    """Whether the 'Mark as complete' action should be shown."""
    return derive_recovery_state(active, completed) is RecoveryState.ACTIVE and progress >= 100
