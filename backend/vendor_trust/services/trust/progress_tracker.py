"""
Recovery Progress Tracker

Progress is always recomputed over the whole goal list. Reaching 100% does not
complete the recovery program; that is a separate explicit action.
"""
from dataclasses import replace
from typing import List, Sequence, Tuple

from ...models.trust import RecoveryGoal
from .errors import InvalidGoalIndexError


def is_goal_met(goal: RecoveryGoal) -> bool:
    return goal.current_value >= goal.target_value


def compute_progress(goals: Sequence[RecoveryGoal]) -> float:
    """Percentage of completed goals; 0.0 for an empty list."""
    if not goals:
        return 0.0
    completed = sum(1 for goal in goals if goal.completed)
    return 100.0 * completed / len(goals)


def apply_goal_update(
    goals: Sequence[RecoveryGoal],
    goal_index: int,
    new_value: float,
) -> Tuple[List[RecoveryGoal], float]:
    """
    Set one goal's current value and recompute progress.

    Returns (new goal list, new progress). The input list is not modified.
    Raises InvalidGoalIndexError for any index outside [0, len(goals)).
    """
    if not isinstance(goal_index, int) or isinstance(goal_index, bool):
        raise InvalidGoalIndexError(goal_index, len(goals))
    if goal_index < 0 or goal_index >= len(goals):
        raise InvalidGoalIndexError(goal_index, len(goals))

    updated = list(goals)
    goal = replace(updated[goal_index], current_value=new_value)
    updated[goal_index] = replace(goal, completed=is_goal_met(goal))

    return updated, compute_progress(updated)
