"""Listener type aliases shared across the package."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Hashable
from typing import TYPE_CHECKING, Any, Final, TypeVar

if TYPE_CHECKING:
    from .models import GlobalEvent

K = TypeVar("K", bound=Hashable)

# Called as listener(context) for void events, listener(context, data) otherwise.
Listener = Callable[..., "Awaitable[None] | None"]

GlobalListener = Callable[[Any, "GlobalEvent"], "Awaitable[None] | None"]


class _Missing:
    """Marks an emission made without a data argument."""

    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Final = _Missing()
