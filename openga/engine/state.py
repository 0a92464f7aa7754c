from enum import Enum


class EngineStatus(str, Enum):
    NOT_STARTED = "not_started"
    RUNNING = "running"
    TERMINATED = "terminated"


VALID_TRANSITIONS: dict[EngineStatus, set[EngineStatus]] = {
    EngineStatus.NOT_STARTED: {
        EngineStatus.RUNNING,
        EngineStatus.TERMINATED,
    },
    EngineStatus.RUNNING: {
        EngineStatus.TERMINATED,
    },
    EngineStatus.TERMINATED: set(),
}


def is_valid_transition(current: EngineStatus, new: EngineStatus) -> bool:
    if current == new:
        return True
    return new in VALID_TRANSITIONS.get(current, set())


def validate_transition(current: EngineStatus, new: EngineStatus) -> None:
    if not is_valid_transition(current, new):
        valid_next = VALID_TRANSITIONS.get(current, set())
        raise ValueError(
            f"Invalid engine transition: {current.value} -> {new.value}. "
            f"Valid transitions from {current.value}: {[s.value for s in valid_next]}"
        )


def is_terminal(status: EngineStatus) -> bool:
    return not VALID_TRANSITIONS.get(status)
