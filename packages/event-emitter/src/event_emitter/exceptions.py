"""Custom exceptions for the event emitter."""

from __future__ import annotations

from collections.abc import Hashable
from typing import Any


class EventEmitterError(Exception):
    """Base exception for event emitter errors."""


class SchemaError(EventEmitterError):
    """Base for emissions rejected by an attached EventSchema."""


class UnknownEventError(SchemaError):
    """Raised when an emitted key is not part of the schema."""

    def __init__(self, key: Hashable) -> None:
        super().__init__(f"Unknown event: {key!r}")
        self.key = key


class PayloadArityError(SchemaError):
    """Raised when data is passed to a void event, or missing for a non-void one."""

    def __init__(self, key: Hashable, expects_data: bool) -> None:
        if expects_data:
            message = f"Event {key!r} requires a data argument"
        else:
            message = f"Event {key!r} takes no data argument"
        super().__init__(message)
        self.key = key
        self.expects_data = expects_data


class PayloadValidationError(SchemaError):
    """Raised when a payload does not match the type declared for its event."""

    def __init__(self, key: Hashable, errors: list[dict[str, Any]]) -> None:
        summary = "; ".join(e.get("msg", "") for e in errors) or "invalid payload"
        super().__init__(f"Invalid payload for event {key!r}: {summary}")
        self.key = key
        self.errors = errors


class ListenerErrors(EventEmitterError):
    """Raised after an isolated emission in which one or more listeners failed."""

    def __init__(self, key: Hashable, errors: list[Exception]) -> None:
        super().__init__(f"{len(errors)} listener(s) failed on event {key!r}")
        self.key = key
        self.errors = errors
