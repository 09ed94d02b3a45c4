"""Startup lifecycle: phases, listener interface and broadcaster."""
from __future__ import annotations

from .broadcaster import StartupBroadcaster  # noqa: F401
from .listener import StartupListener, StartupPhase  # noqa: F401
from .loader import (  # noqa: F401
    broadcaster_from_config,
    discover_listeners,
    import_listener_class,
    load_listeners,
)

__all__ = [
    "StartupBroadcaster",
    "StartupListener",
    "StartupPhase",
    "broadcaster_from_config",
    "discover_listeners",
    "import_listener_class",
    "load_listeners",
]
