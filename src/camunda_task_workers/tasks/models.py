"""Domain models for external tasks, their variables and handler runs."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class ValueType(str, Enum):
    """Kinds of variable values the workers understand."""

    NUMBER = "number"
    TEXT = "text"
    BOOLEAN = "boolean"


@dataclass(frozen=True, slots=True)
class TypedValue:
    """One variable value tagged with its kind."""

    kind: ValueType
    value: int | float | str | bool

    @classmethod
    def of(cls, value: Any) -> TypedValue:
        """Tag a plain Python value; raise TypeError for unsupported types."""

        if isinstance(value, TypedValue):
            return value
        # bool is an int subclass, check it first
        if isinstance(value, bool):
            return cls(kind=ValueType.BOOLEAN, value=value)
        if isinstance(value, int | float):
            return cls(kind=ValueType.NUMBER, value=value)
        if isinstance(value, str):
            return cls(kind=ValueType.TEXT, value=value)
        raise TypeError(f"Unsupported variable value type: {type(value).__name__}")


class Variables:
    """Keyed mapping of task variables with change tracking."""

    __slots__ = ("_dirty", "_values")

    def __init__(self, values: Mapping[str, Any] | None = None) -> None:
        self._values: dict[str, TypedValue] = {}
        self._dirty: set[str] = set()
        for name, value in (values or {}).items():
            self._values[name] = TypedValue.of(value)

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any]) -> Variables:
        """Build from engine values, dropping the ones no worker can read."""

        variables = cls()
        for name, value in raw.items():
            try:
                variables._values[name] = TypedValue.of(value)
            except TypeError:
                logger.debug("Ignoring variable %s of type %s", name, type(value).__name__)
        return variables

    def get(self, name: str) -> int | float | str | bool | None:
        typed = self._values.get(name)
        return None if typed is None else typed.value

    def get_typed(self, name: str) -> TypedValue | None:
        return self._values.get(name)

    def set(self, name: str, value: Any) -> None:
        self._values[name] = TypedValue.of(value)
        self._dirty.add(name)

    def dirty(self) -> Variables:
        """Return only the values set after construction."""

        return Variables({name: self._values[name] for name in sorted(self._dirty)})

    def to_dict(self) -> dict[str, int | float | str | bool]:
        return {name: typed.value for name, typed in self._values.items()}

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Variables):
            return NotImplemented
        return self._values == other._values

    def __repr__(self) -> str:
        return f"Variables({self.to_dict()!r})"


@dataclass(slots=True)
class Task:
    """External task as seen by a handler for the duration of one call."""

    task_id: str
    topic: str
    variables: Variables = field(default_factory=Variables)


class TaskState(str, Enum):
    """Per-invocation handler states."""

    RECEIVED = "received"
    VALIDATING = "validating"
    COMPUTING = "computing"
    BUSINESS_ERROR_REPORTED = "business_error_reported"
    COMPLETED = "completed"
    FAILED = "failed"


TERMINAL_STATES = frozenset(
    {TaskState.BUSINESS_ERROR_REPORTED, TaskState.COMPLETED, TaskState.FAILED},
)

_TRANSITIONS: dict[TaskState, frozenset[TaskState]] = {
    TaskState.RECEIVED: frozenset({TaskState.VALIDATING, TaskState.FAILED}),
    TaskState.VALIDATING: frozenset({TaskState.BUSINESS_ERROR_REPORTED, TaskState.COMPUTING}),
    TaskState.COMPUTING: frozenset({TaskState.COMPLETED, TaskState.FAILED}),
}


@dataclass(slots=True)
class TaskRun:
    """Record of one handler invocation."""

    task_id: str
    topic: str
    state: TaskState = TaskState.RECEIVED
    history: list[TaskState] = field(default_factory=lambda: [TaskState.RECEIVED])
    message: str | None = None
    output: Variables | None = None
    delivery_error: str | None = None

    def transition(self, state: TaskState) -> None:
        """Move to ``state``; raise RuntimeError on a transition the protocol forbids."""

        if state not in _TRANSITIONS.get(self.state, frozenset()):
            raise RuntimeError(
                f"Invalid task state transition {self.state.value} -> {state.value} "
                f"for task {self.task_id}",
            )
        self.state = state
        self.history.append(state)

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    @property
    def delivered(self) -> bool:
        """True when the terminal report reached the engine."""

        return self.is_terminal and self.delivery_error is None
