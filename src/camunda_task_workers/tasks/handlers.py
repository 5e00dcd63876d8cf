"""Topic handlers: one validated input variable in, one derived variable out."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from camunda_task_workers.tasks.models import Task, Variables


class TaskHandler(Protocol):
    """Decision function bound to a topic.

    ``apply`` returns the output variables to attach on completion, or
    ``None`` when it wrote its output into ``task.variables`` instead.
    """

    name: str
    field: str

    def apply(self, task: Task, value: int | float) -> Variables | None:
        """Derive output for an already validated input value."""


@dataclass(frozen=True, slots=True)
class RangeCheckHandler:
    """Flag whether the input lies strictly between two bounds."""

    name: str
    field: str
    output: str
    low: int
    high: int

    def apply(self, task: Task, value: int | float) -> Variables | None:  # noqa: ARG002
        output = Variables()
        output.set(self.output, self.low < value < self.high)
        return output


@dataclass(frozen=True, slots=True)
class DigitReverseHandler:
    """Write the reversed decimal string of the input onto the task itself."""

    name: str
    field: str
    output: str

    def apply(self, task: Task, value: int | float) -> Variables | None:
        task.variables.set(self.output, reverse_digits(value))
        return None


def reverse_digits(value: int | float) -> str:
    """Reverse the base-10 string form of ``value`` (``1000000 -> "0000001"``)."""

    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value)[::-1]


ORDER_RANGE_CHECK = RangeCheckHandler(
    name="order-range-check",
    field="orderNumber",
    output="isOkay",
    low=1_000,
    high=9_999,
)
LOCAL_ORDER_RANGE_CHECK = RangeCheckHandler(
    name="local-order-range-check",
    field="localOrderNumber",
    output="localIsOkay",
    low=1_000_000,
    high=9_999_999,
)
LOCAL_ORDER_REVERSE = DigitReverseHandler(
    name="local-order-reverse",
    field="localOrderNumber",
    output="localeVariable",
)

HANDLERS: dict[str, TaskHandler] = {
    handler.name: handler
    for handler in (ORDER_RANGE_CHECK, LOCAL_ORDER_RANGE_CHECK, LOCAL_ORDER_REVERSE)
}
