"""Lifecycle states for soft-deletable records."""
import enum


class InvalidTransition(ValueError):
    """Raised when a record is moved to a state it cannot reach."""

    def __init__(self, current, target):
        self.current = current
        self.target = target
        super().__init__(f"Cannot change status from '{current.value}' to '{target.value}'")


class RecordState(str, enum.Enum):
    ACTIVE = "active"
    DELETED = "deleted"

    def can_transition_to(self, target: "RecordState") -> bool:
        return target in _RECORD_TRANSITIONS[self]


_RECORD_TRANSITIONS = {
    RecordState.ACTIVE: {RecordState.DELETED},
    RecordState.DELETED: set(),
}


def ensure_transition(current, target):
    """Return ``target`` if ``current`` may move to it, else raise."""
    if current == target:
        return target
    if not current.can_transition_to(target):
        raise InvalidTransition(current, target)
    return target
