"""Typed, synchronous event emitter with per-event and global listeners."""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Hashable
from typing import Any, Generic, Self

from .exceptions import ListenerErrors
from .models import EmitterConfig, GlobalEvent
from .schema import EventSchema
from .types import MISSING, GlobalListener, K, Listener

logger = logging.getLogger(__name__)


def _name(fn: Any) -> str:
    return getattr(fn, "__qualname__", None) or repr(fn)


class _ByIdentity:
    """Registry key for listeners that cannot be hashed."""

    __slots__ = ("listener",)

    def __init__(self, listener: Any) -> None:
        self.listener = listener

    def __hash__(self) -> int:
        return id(self.listener)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, _ByIdentity) and other.listener is self.listener


def _registry_key(listener: Any) -> Hashable:
    try:
        hash(listener)
    except TypeError:
        return _ByIdentity(listener)
    return listener


class EventEmitter(Generic[K]):
    """Registry and synchronous dispatcher for keyed events.

    Listeners are called with the emitter's *context* as first argument,
    followed by the payload when the emission carries one::

        emitter = EventEmitter[str]()
        emitter.on("data", lambda ctx, data: print("got", data))
        emitter.on("loaded", lambda ctx: print("loaded"))
        emitter.on_all(lambda ctx, event: print(event.to_dict()))

        emitter.emit("data", "x").emit("loaded")

    The context is the emitter itself, or the ``context`` object given at
    construction. The latter lets a class own an emitter and still be the
    object its listeners see.

    Each key holds an ordered set: registering the same listener twice keeps
    one entry, and listeners run in registration order. Listeners that cannot
    be hashed are tracked by identity. Every dispatch pass works on a
    snapshot, so listeners may register, remove or emit while being called.
    Listeners added during a pass wait for the next emission; listeners
    removed before their turn are skipped.
    """

    def __init__(
        self,
        *,
        context: Any = None,
        schema: EventSchema | None = None,
        config: EmitterConfig | None = None,
    ) -> None:
        self._listeners: dict[K, dict[Hashable, Listener]] = {}
        self._global_listeners: dict[Hashable, GlobalListener] = {}
        self._context = context
        self.schema = schema
        self.config = config or EmitterConfig()
        self._tasks: set[asyncio.Future[Any]] = set()
        self._task_error: BaseException | None = None

    @property
    def context(self) -> Any:
        """Object passed as the first argument to every listener."""
        return self if self._context is None else self._context

    # ── Registration ──

    def on(self, key: K, listener: Listener) -> Self:
        """Register a listener for an event."""
        self._listeners.setdefault(key, {}).setdefault(_registry_key(listener), listener)
        logger.debug("Registered %s on %r", _name(listener), key)
        return self

    def off(self, key: K, listener: Listener) -> Self:
        """Remove a listener. Unknown keys and listeners are ignored."""
        listeners = self._listeners.get(key)
        if listeners is None or listeners.pop(_registry_key(listener), MISSING) is MISSING:
            return self
        if not listeners:
            del self._listeners[key]
        logger.debug("Removed %s from %r", _name(listener), key)
        return self

    def on_all(self, listener: GlobalListener) -> Self:
        """Register a listener called for every emitted event."""
        self._global_listeners.setdefault(_registry_key(listener), listener)
        logger.debug("Registered global listener %s", _name(listener))
        return self

    def off_all(self, listener: GlobalListener) -> Self:
        """Remove a global listener. Unknown listeners are ignored."""
        if self._global_listeners.pop(_registry_key(listener), MISSING) is not MISSING:
            logger.debug("Removed global listener %s", _name(listener))
        return self

    def clear(self) -> Self:
        """Remove every listener, per-event and global."""
        self._listeners.clear()
        self._global_listeners.clear()
        logger.debug("Cleared all listeners")
        return self

    register = on
    unregister = off
    register_global = on_all
    unregister_global = off_all
    reset = clear

    # ── Emission ──

    def emit(self, key: K, data: Any = MISSING) -> Self:
        """Call the listeners of ``key``, then the global listeners.

        Omit ``data`` for void events. A listener exception propagates at
        once and the remaining listeners are skipped, unless the config asks
        for isolation, in which case failures are collected and raised
        together as :class:`ListenerErrors` once both passes are done.

        With a schema attached, listeners get the caller's ``data`` object
        unchanged; set ``coerce_payloads`` to hand them pydantic's validated
        value instead.
        """
        if self.schema is not None and self.config.validate_payloads:
            validated = self.schema.validate(key, data, strict=self.config.strict)
            if self.config.coerce_payloads:
                data = validated

        errors: list[Exception] | None = [] if self.config.isolate_errors else None
        context = self.context
        args = (context,) if data is MISSING else (context, data)

        snapshot = list(self._listeners.get(key, {}).items())
        logger.debug(
            "Emitting %r to %d listener(s) and %d global listener(s)",
            key,
            len(snapshot),
            len(self._global_listeners),
        )
        for entry, listener in snapshot:
            if entry in self._listeners.get(key, ()):
                self._invoke(key, listener, args, errors)

        event = GlobalEvent.build(key, data)
        for entry, listener in list(self._global_listeners.items()):
            if entry in self._global_listeners:
                self._invoke(key, listener, (context, event), errors)

        if errors:
            raise ListenerErrors(key, errors)
        return self

    def _invoke(
        self,
        key: Hashable,
        listener: Any,
        args: tuple[Any, ...],
        errors: list[Exception] | None,
    ) -> None:
        if errors is None:
            result = listener(*args)
        else:
            try:
                result = listener(*args)
            except Exception as exc:
                logger.exception("Listener %s failed on %r", _name(listener), key)
                errors.append(exc)
                return
        if inspect.isawaitable(result):
            self._schedule(key, listener, result)

    # ── Async listeners ──

    def _schedule(self, key: Hashable, listener: Any, awaitable: Awaitable[Any]) -> None:
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            logger.warning(
                "Listener %s on %r returned an awaitable outside an event loop; discarded",
                _name(listener),
                key,
            )
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            return

        task = asyncio.ensure_future(awaitable)
        self._tasks.add(task)
        task.add_done_callback(lambda t: self._task_done(key, listener, t))

    def _task_done(self, key: Hashable, listener: Any, task: asyncio.Future[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Async listener %s failed on %r", _name(listener), key, exc_info=exc)
            if self._task_error is None:
                self._task_error = exc

    def pending_tasks(self) -> list[asyncio.Future[Any]]:
        """Tasks started for async listeners that have not finished yet."""
        return [t for t in self._tasks if not t.done()]

    async def wait_pending(self) -> None:
        """Wait for every async listener started by :meth:`emit`.

        Tasks scheduled while waiting are waited for too. Raises the first
        failure recorded since the last call; later ones are only logged.
        """
        while self._tasks:
            await asyncio.wait(set(self._tasks))
        if self._task_error is not None:
            exc, self._task_error = self._task_error, None
            raise exc

    # ── Introspection ──

    def listener_count(self, key: K | None = None) -> int:
        """Listeners for ``key``, or across all keys when no key is given."""
        if key is None:
            return sum(len(listeners) for listeners in self._listeners.values())
        return len(self._listeners.get(key, ()))

    def global_listener_count(self) -> int:
        return len(self._global_listeners)

    def event_keys(self) -> list[K]:
        """Keys with at least one listener, in first-registration order."""
        return list(self._listeners)
