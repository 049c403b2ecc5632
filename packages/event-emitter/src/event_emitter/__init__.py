"""Typed synchronous publish/subscribe with global listeners."""

from .emitter import EventEmitter
from .exceptions import (
    EventEmitterError,
    ListenerErrors,
    PayloadArityError,
    PayloadValidationError,
    SchemaError,
    UnknownEventError,
)
from .models import EmitterConfig, GlobalEvent
from .schema import EventSchema
from .types import MISSING, GlobalListener, Listener

__all__ = [
    "EventEmitter",
    "EventSchema",
    "EmitterConfig",
    "GlobalEvent",
    "GlobalListener",
    "Listener",
    "MISSING",
    "EventEmitterError",
    "ListenerErrors",
    "PayloadArityError",
    "PayloadValidationError",
    "SchemaError",
    "UnknownEventError",
]
