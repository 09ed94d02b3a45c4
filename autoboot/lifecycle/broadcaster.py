"""StartupBroadcaster: notify listeners through the phases of one run.

Failure policy:
  - starting .. running: fail-fast. The first listener error aborts the
    phase (later listeners are not called) and propagates unchanged.
  - failed: each listener runs under its own guard. A listener error is
    logged and swallowed so it never masks the startup failure, unless no
    cause was supplied; then the listener error is the only diagnostic
    and is re-raised.

Phase order is a contract of the caller and is not re-validated here.
"""
from __future__ import annotations

import logging
from time import perf_counter
from typing import Any, Iterable, Optional, Tuple

from autoboot import metrics
from autoboot.errors import error_type_of
from autoboot.events import FailedHandlerError, StartupPhaseBroadcast, emit

from .listener import StartupPhase

_DEFAULT_LOGGER = logging.getLogger("autoboot.lifecycle")


def _listener_name(listener: Any) -> str:
    cls = type(listener)
    return f"{cls.__module__}.{cls.__qualname__}"


class StartupBroadcaster:
    def __init__(
        self,
        listeners: Iterable[Any],
        logger: Optional[logging.Logger] = None,
    ):
        self._listeners: Tuple[Any, ...] = tuple(listeners)
        self._log = logger or _DEFAULT_LOGGER
        self._phase: Optional[StartupPhase] = None

    @property
    def listeners(self) -> Tuple[Any, ...]:
        return self._listeners

    @property
    def phase(self) -> Optional[StartupPhase]:
        """Last phase broadcast (informational only)."""
        return self._phase

    def starting(self) -> None:
        self._broadcast(StartupPhase.STARTING)

    def environment_prepared(self, environment: Any) -> None:
        self._broadcast(StartupPhase.ENV_PREPARED, environment)

    def context_prepared(self, context: Any) -> None:
        self._broadcast(StartupPhase.CONTEXT_PREPARED, context)

    def context_loaded(self, context: Any) -> None:
        self._broadcast(StartupPhase.CONTEXT_LOADED, context)

    def started(self, context: Any) -> None:
        self._broadcast(StartupPhase.STARTED, context)

    def running(self, context: Any) -> None:
        self._broadcast(StartupPhase.RUNNING, context)

    def failed(
        self, context: Optional[Any], cause: Optional[BaseException]
    ) -> None:
        t0 = perf_counter()
        self._phase = StartupPhase.FAILED
        for listener in self._listeners:
            self._call_failed_listener(listener, context, cause)
        self._record(StartupPhase.FAILED, t0)

    # --- internals ---------------------------------------------------------
    def _broadcast(self, phase: StartupPhase, *args: Any) -> None:
        t0 = perf_counter()
        for listener in self._listeners:
            hook = getattr(listener, phase.value, None)
            if hook is None:
                continue
            try:
                hook(*args)
            except Exception as ex:
                metrics.inc(
                    "listener_errors_total",
                    {"phase": phase.value, "error_type": error_type_of(ex)},
                )
                raise
        self._phase = phase
        self._record(phase, t0)

    def _call_failed_listener(
        self,
        listener: Any,
        context: Optional[Any],
        cause: Optional[BaseException],
    ) -> None:
        hook = getattr(listener, StartupPhase.FAILED.value, None)
        if hook is None:
            return
        try:
            hook(context, cause)
        except Exception as ex:
            suppressed = cause is not None
            metrics.inc(
                "failed_handler_errors_total",
                {"suppressed": str(suppressed).lower()},
            )
            emit(
                FailedHandlerError(
                    listener=_listener_name(listener),
                    message=str(ex),
                    suppressed=suppressed,
                )
            )
            if not suppressed:
                raise
            if self._log.isEnabledFor(logging.DEBUG):
                self._log.error("Error handling failed", exc_info=ex)
            else:
                message = str(ex) or "no error message"
                self._log.warning("Error handling failed (%s)", message)

    def _record(self, phase: StartupPhase, t0: float) -> None:
        elapsed_ms = (perf_counter() - t0) * 1000
        metrics.inc("startup_phase_total", {"phase": phase.value})
        metrics.observe(
            "startup_phase_latency_ms", elapsed_ms, {"phase": phase.value}
        )
        emit(
            StartupPhaseBroadcast(
                phase=phase.value,
                listeners=len(self._listeners),
                duration_ms=int(elapsed_ms),
            )
        )


__all__ = ["StartupBroadcaster"]
