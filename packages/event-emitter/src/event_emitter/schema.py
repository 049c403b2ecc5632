"""Optional runtime schema: which events exist and what payload each carries."""

from __future__ import annotations

from collections.abc import Hashable, Iterator, Mapping
from typing import Any

from pydantic import ConfigDict, PydanticUserError, TypeAdapter, ValidationError

from .exceptions import PayloadArityError, PayloadValidationError, UnknownEventError
from .types import MISSING

_ADAPTER_CONFIG = ConfigDict(arbitrary_types_allowed=True)


class EventSchema:
    """Closed mapping of event key to payload type.

    A payload type of ``None`` marks a void event, emitted without data.
    Any other value is handed to pydantic, so builtins, generics, models and
    arbitrary classes (checked with ``isinstance``) all work::

        schema = EventSchema({"data": str, "loaded": None, "error": Exception})
    """

    def __init__(self, events: Mapping[Hashable, Any], *, strict: bool = False) -> None:
        self._events: dict[Hashable, Any] = dict(events)
        self._strict = strict
        self._adapters: dict[Hashable, TypeAdapter[Any]] = {}
        for key, payload_type in self._events.items():
            if payload_type is not None:
                self._adapters[key] = _adapter_for(payload_type)

    def __contains__(self, key: object) -> bool:
        return key in self._events

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self._events)

    def __len__(self) -> int:
        return len(self._events)

    def keys(self) -> list[Hashable]:
        return list(self._events)

    def payload_type(self, key: Hashable) -> Any:
        try:
            return self._events[key]
        except KeyError:
            raise UnknownEventError(key)

    def is_void(self, key: Hashable) -> bool:
        return self.payload_type(key) is None

    def validate(self, key: Hashable, data: Any = MISSING, *, strict: bool | None = None) -> Any:
        """Check an emission against the schema and return the validated payload.

        Returns ``MISSING`` for void events.
        """
        void = self.is_void(key)
        if void:
            if data is not MISSING:
                raise PayloadArityError(key, expects_data=False)
            return MISSING
        if data is MISSING:
            raise PayloadArityError(key, expects_data=True)

        strict = self._strict if strict is None else strict
        try:
            return self._adapters[key].validate_python(data, strict=strict)
        except ValidationError as exc:
            raise PayloadValidationError(key, exc.errors()) from exc


def _adapter_for(payload_type: Any) -> TypeAdapter[Any]:
    # Models, dataclasses and TypedDicts carry their own config.
    try:
        return TypeAdapter(payload_type, config=_ADAPTER_CONFIG)
    except PydanticUserError:
        return TypeAdapter(payload_type)
