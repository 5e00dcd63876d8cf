"""Topic to handler routing."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from camunda_task_workers.config import Settings
from camunda_task_workers.tasks.handlers import HANDLERS, TaskHandler


@dataclass(slots=True)
class TopicRouter:
    """Validated topic bindings."""

    handlers: dict[str, TaskHandler]

    @classmethod
    def from_bindings(
        cls,
        bindings: Mapping[str, str],
        registry: Mapping[str, TaskHandler] = HANDLERS,
    ) -> TopicRouter:
        """Resolve ``topic -> handler name`` pairs against the handler registry."""

        if not bindings:
            raise ValueError("At least one topic binding is required.")
        handlers: dict[str, TaskHandler] = {}
        for topic, handler_name in bindings.items():
            handler = registry.get(handler_name.strip().lower())
            if handler is None:
                supported = ", ".join(sorted(registry))
                raise ValueError(
                    f"Unknown handler {handler_name!r} for topic {topic!r}. "
                    f"Supported handlers: {supported}",
                )
            handlers[topic] = handler
        return cls(handlers=handlers)

    @classmethod
    def from_settings(cls, settings: Settings) -> TopicRouter:
        return cls.from_bindings(settings.topic_bindings)

    @property
    def topics(self) -> list[str]:
        return list(self.handlers)

    def handler_for(self, topic: str) -> TaskHandler:
        try:
            return self.handlers[topic]
        except KeyError:
            raise KeyError(f"No handler bound to topic {topic!r}") from None
