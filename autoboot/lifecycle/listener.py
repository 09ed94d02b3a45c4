"""Startup phases and the listener capability interface."""
from __future__ import annotations

from enum import Enum
from typing import Any, Optional


class StartupPhase(str, Enum):
    STARTING = "starting"
    ENV_PREPARED = "environment_prepared"
    CONTEXT_PREPARED = "context_prepared"
    CONTEXT_LOADED = "context_loaded"
    STARTED = "started"
    RUNNING = "running"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (StartupPhase.RUNNING, StartupPhase.FAILED)


class StartupListener:
    """Observer of one application run.

    Every hook is a no-op; subclasses override the phases they care about.
    Hooks run synchronously on the bootstrap thread. Work a listener starts
    in the background is neither awaited nor cancelled by the broadcaster.
    """

    def starting(self) -> None:
        pass

    def environment_prepared(self, environment: Any) -> None:
        pass

    def context_prepared(self, context: Any) -> None:
        pass

    def context_loaded(self, context: Any) -> None:
        pass

    def started(self, context: Any) -> None:
        pass

    def running(self, context: Any) -> None:
        pass

    def failed(self, context: Optional[Any], cause: Optional[BaseException]) -> None:
        pass


__all__ = ["StartupPhase", "StartupListener"]
