"""Discovery sources (factories files) for modules and startup listeners."""
from __future__ import annotations

from .factories import (  # noqa: F401
    ACTIVATION_KEY,
    FACTORIES_FILE,
    LISTENER_KEY,
    load_factories,
    load_factory_names,
    parse_factories,
)

__all__ = [
    "ACTIVATION_KEY",
    "LISTENER_KEY",
    "FACTORIES_FILE",
    "parse_factories",
    "load_factories",
    "load_factory_names",
]
