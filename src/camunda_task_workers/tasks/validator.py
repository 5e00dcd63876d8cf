"""Schema checks for handler input variables."""

from __future__ import annotations

from pydantic import FiniteFloat, StrictInt, TypeAdapter, ValidationError

from camunda_task_workers.tasks.models import Variables

_NUMBER = TypeAdapter(StrictInt | FiniteFloat)


class VariableValidationError(ValueError):
    """Required variable is missing or has the wrong type."""

    def __init__(self, field: str, expected: str) -> None:
        self.field = field
        self.expected = expected
        super().__init__(f"{field} must be {expected}")


def require_number(variables: Variables, name: str) -> int | float:
    """Return the numeric value of ``name``.

    Booleans, numeric strings, NaN and infinities are rejected, as is a
    missing variable.
    """

    typed = variables.get_typed(name)
    if typed is None:
        raise VariableValidationError(name, "a number")
    try:
        return _NUMBER.validate_python(typed.value, strict=True)
    except ValidationError as error:
        raise VariableValidationError(name, "a number") from error
