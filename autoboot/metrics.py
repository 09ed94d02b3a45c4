"""Minimal in-memory metrics collector.

Purpose:
    - Counters and latency samples for module activation and startup phases.
    - Zero external deps; can be swapped by an exporter later.

Core API:
    inc(name, labels=None, value=1)
    observe(name, value, labels=None)
    snapshot() -> dict (copy for safe reading)

Metric names used by the framework (documented for discoverability):
    - activation_candidates_total
    - activation_excluded_total
    - activation_condition_skipped_total{module}
    - activation_activated_total
    - activation_resolve_ms                      (histogram)
    - startup_phase_total{phase}
    - startup_phase_latency_ms{phase}            (histogram)
    - listener_errors_total{phase,error_type}
    - failed_handler_errors_total{suppressed}
    - env_override_total{path}
    - handler_exceptions_total{event}
"""
from __future__ import annotations

from threading import RLock
from time import time
from typing import Any, Dict, Tuple

_LabelKey = Tuple[str, Tuple[Tuple[str, str], ...]]

_COUNTERS: Dict[_LabelKey, float] = {}
_HIST: Dict[_LabelKey, list] = {}
_LOCK = RLock()


def _norm_labels(labels: dict[str, Any] | None) -> Tuple[Tuple[str, str], ...]:
    if not labels:
        return tuple()
    return tuple(sorted((str(k), str(v)) for k, v in labels.items()))


def _render(name: str, labels: Tuple[Tuple[str, str], ...]) -> str:
    if not labels:
        return name
    return name + "{" + ",".join(f"{k}={v}" for k, v in labels) + "}"


def inc(
    name: str,
    labels: dict[str, Any] | None = None,
    value: float = 1.0,
) -> None:
    key = (name, _norm_labels(labels))
    with _LOCK:
        _COUNTERS[key] = _COUNTERS.get(key, 0.0) + value


def observe(
    name: str,
    value: float,
    labels: dict[str, Any] | None = None,
) -> None:
    key = (name, _norm_labels(labels))
    with _LOCK:
        _HIST.setdefault(key, []).append(value)


def counter(name: str, labels: dict[str, Any] | None = None) -> float:
    """Current value of a single counter (0.0 when never incremented)."""
    with _LOCK:
        return _COUNTERS.get((name, _norm_labels(labels)), 0.0)


def snapshot() -> dict[str, Any]:
    with _LOCK:
        counters = {
            _render(name, labels): v
            for (name, labels), v in _COUNTERS.items()
        }
        hist = {}
        for (name, labels), vals in _HIST.items():
            if not vals:
                continue
            ordered = sorted(vals)
            hist[_render(name, labels)] = {
                "count": len(vals),
                "min": ordered[0],
                "max": ordered[-1],
                "p50": ordered[len(ordered) // 2],
                "last": vals[-1],
            }
        return {"ts": time(), "counters": counters, "histograms": hist}


def reset_for_tests() -> None:  # pragma: no cover
    with _LOCK:
        _COUNTERS.clear()
        _HIST.clear()


__all__ = [
    "inc",
    "observe",
    "counter",
    "snapshot",
    "reset_for_tests",
]
