"""Data models for the event emitter."""

from __future__ import annotations

import os
from collections.abc import Hashable, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict

from .types import MISSING

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off", ""}

ENV_PREFIX = "EVENT_EMITTER_"


class GlobalEvent(BaseModel):
    """Tagged record handed to global listeners.

    ``data`` is only meaningful when the emission carried a payload; whether
    it did is tracked through the fields explicitly set at construction, so
    ``GlobalEvent(key="done")`` and ``GlobalEvent(key="done", data=None)`` are
    distinguishable via :attr:`has_data`.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    key: Any
    data: Any = None

    @property
    def has_data(self) -> bool:
        return "data" in self.model_fields_set

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"key": self.key}
        if self.has_data:
            d["data"] = self.data
        return d

    @classmethod
    def build(cls, key: Hashable, data: Any = MISSING) -> GlobalEvent:
        if data is MISSING:
            return cls(key=key)
        return cls(key=key, data=data)


class EmitterConfig(BaseModel):
    """Behavioural switches for an EventEmitter.

    ``strict`` left as ``None`` defers to the attached schema's own setting.
    """

    model_config = ConfigDict(frozen=True)

    validate_payloads: bool = True
    strict: bool | None = None
    coerce_payloads: bool = False
    isolate_errors: bool = False

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> EmitterConfig:
        """Build a config from ``EVENT_EMITTER_*`` variables, defaults for the rest."""
        environ = os.environ if environ is None else environ
        values: dict[str, bool] = {}
        for name in cls.model_fields:
            raw = environ.get(ENV_PREFIX + name.upper())
            if raw is None:
                continue
            flag = raw.strip().lower()
            if flag in _TRUTHY:
                values[name] = True
            elif flag in _FALSY:
                values[name] = False
            else:
                raise ValueError(f"{ENV_PREFIX}{name.upper()}: not a boolean: {raw!r}")
        return cls(**values)
