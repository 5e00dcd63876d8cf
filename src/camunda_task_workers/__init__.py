"""External task workers for the Camunda BPMN engine."""

__version__ = "0.1.0"
