"""
Competency state machine.

DRAFT -> ACTIVE -> DEPRECATED, with DRAFT -> DEPRECATED allowed directly.
DEPRECATED is terminal. Nothing moves backward.
"""

from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Optional

from models.competency import CompetencyStatus


@dataclass(frozen=True)
class TransitionResult:
    allowed: bool
    reason: Optional[str] = None


INITIAL_STATE = CompetencyStatus.DRAFT

ALLOWED_TRANSITIONS: Dict[CompetencyStatus, FrozenSet[CompetencyStatus]] = {
    CompetencyStatus.DRAFT: frozenset({CompetencyStatus.ACTIVE, CompetencyStatus.DEPRECATED}),
    CompetencyStatus.ACTIVE: frozenset({CompetencyStatus.DEPRECATED}),
    CompetencyStatus.DEPRECATED: frozenset(),
}

# Statuses in which the reviewer may still be assigned
EDITABLE_STATES: FrozenSet[CompetencyStatus] = frozenset({CompetencyStatus.DRAFT})


def validate_transition(current: CompetencyStatus, target: CompetencyStatus) -> TransitionResult:
    if current == target:
        return TransitionResult(False, f"already_{current.value.lower()}")
    if target in ALLOWED_TRANSITIONS.get(current, frozenset()):
        return TransitionResult(True)
    return TransitionResult(False, f"disallowed_transition:{current.value}->{target.value}")


def allowed_targets(current: CompetencyStatus) -> List[CompetencyStatus]:
    return sorted(ALLOWED_TRANSITIONS.get(current, frozenset()), key=lambda s: s.value)


def is_editable(current: CompetencyStatus) -> bool:
    return current in EDITABLE_STATES


def is_terminal(current: CompetencyStatus) -> bool:
    return not ALLOWED_TRANSITIONS.get(current)
