"""Instantiate startup listeners named by discovery sources."""
from __future__ import annotations

import importlib
from pathlib import Path
from typing import Any, Iterable, List

from autoboot.config import get_config
from autoboot.discovery import LISTENER_KEY, load_factory_names
from autoboot.errors import ListenerLoadError

from .broadcaster import StartupBroadcaster


def import_listener_class(name: str) -> type:
    """Import ``pkg.module:Class`` or ``pkg.module.Class``."""
    if ":" in name:
        module_name, _, attr = name.partition(":")
    else:
        module_name, _, attr = name.rpartition(".")
    if not module_name or not attr:
        raise ListenerLoadError(f"Invalid listener name: {name!r}")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ListenerLoadError(
            f"Cannot import listener module '{module_name}': {e}"
        ) from e
    target: Any = module
    for part in attr.split("."):
        try:
            target = getattr(target, part)
        except AttributeError as e:
            raise ListenerLoadError(
                f"Listener '{name}' not found in '{module_name}'"
            ) from e
    if not isinstance(target, type):
        raise ListenerLoadError(f"Listener '{name}' is not a class")
    return target


def load_listeners(names: Iterable[str], *args: Any) -> List[Any]:
    """Instantiate listeners in discovered order (never re-sorted)."""
    listeners = []
    for name in names:
        cls = import_listener_class(name)
        try:
            listeners.append(cls(*args))
        except Exception as e:  # noqa: BLE001
            raise ListenerLoadError(
                f"Cannot instantiate listener '{name}': {e}"
            ) from e
    return listeners


def discover_listeners(
    factories: Iterable[str | Path],
    *args: Any,
    key: str = LISTENER_KEY,
) -> List[Any]:
    return load_listeners(load_factory_names(key, factories), *args)


def broadcaster_from_config(*args: Any, cfg=None) -> StartupBroadcaster:
    """Discover listeners from the configured factories sources.

    ``cfg`` defaults to the loaded aggregated config.
    """
    if cfg is None:
        cfg = get_config()
    return StartupBroadcaster(
        discover_listeners(
            cfg.activation.factories, *args, key=cfg.lifecycle.listeners_key
        )
    )


__all__ = [
    "import_listener_class",
    "load_listeners",
    "discover_listeners",
    "broadcaster_from_config",
]
