"""Framework event dataclasses + any-subscriber dispatch.

Handlers receive ``(name, payload)`` for every event. Handler exceptions
are isolated: counted in ``handler_exceptions_total{event}`` and never
propagated to the emitter.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from threading import RLock
from time import time
from typing import Any, Callable, Dict, List, Tuple

from autoboot import metrics as _metrics

EventHandler = Callable[[str, Dict[str, Any]], None]


@dataclass(slots=True)
class BaseEvent:
    def to_event(self) -> Dict[str, Any]:  # noqa: D401
        data = asdict(self)
        data["ts"] = time()
        return data


@dataclass(slots=True)
class ModulesResolved(BaseEvent):
    candidates: Tuple[str, ...]
    activated: Tuple[str, ...]
    excluded: Tuple[str, ...] = field(default_factory=tuple)
    skipped: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(slots=True)
class StartupPhaseBroadcast(BaseEvent):
    phase: str
    listeners: int
    duration_ms: int = 0


@dataclass(slots=True)
class FailedHandlerError(BaseEvent):
    listener: str
    message: str
    suppressed: bool


_SUBS: List[EventHandler] = []
_LOCK = RLock()


def emit(ev: BaseEvent) -> None:
    name = ev.__class__.__name__
    payload = ev.to_event()
    with _LOCK:
        subs = list(_SUBS)
    _metrics.inc("events_emitted_total", {"event": name})
    for h in subs:
        try:
            h(name, dict(payload))
        except Exception:  # noqa: BLE001
            _metrics.inc("handler_exceptions_total", {"event": name})


def on(handler: EventHandler) -> Callable[[], None]:
    """Register ``handler`` for every event; returns an unsubscribe hook."""
    with _LOCK:
        _SUBS.append(handler)

    def _unsub() -> None:
        with _LOCK:
            try:
                _SUBS.remove(handler)
            except ValueError:
                pass

    return _unsub


def reset_listeners_for_tests() -> None:  # pragma: no cover
    with _LOCK:
        _SUBS.clear()


__all__ = [
    "emit",
    "on",
    "reset_listeners_for_tests",
    "BaseEvent",
    "ModulesResolved",
    "StartupPhaseBroadcast",
    "FailedHandlerError",
]
