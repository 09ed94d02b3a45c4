"""Manifest loader: reads all module YAML manifests of a directory."""
from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Dict, Iterator

import yaml
from yaml import YAMLError

from autoboot.errors import ManifestError

from .descriptor import ModuleDescriptor

logger = logging.getLogger("autoboot.activation")

_manifest_lock = threading.Lock()
_manifest_cache: Dict[Path, Dict[str, ModuleDescriptor]] = {}


def _iter_manifest_files(manifests_dir: Path) -> Iterator[Path]:
    for pattern in ("*.yaml", "*.yml"):
        for path in sorted(manifests_dir.glob(pattern)):
            if path.is_file():
                yield path


def _load_manifest_file(path: Path) -> ModuleDescriptor:
    """Load a single manifest.

    YAML with tab indentation is retried after replacing tabs with two
    spaces so one hand-edited file does not take the whole catalog down.
    """
    raw_text = path.read_text(encoding="utf-8")
    try:
        data = yaml.safe_load(raw_text) or {}
    except YAMLError as e:
        if "\t" not in raw_text:
            raise ManifestError(f"Invalid manifest {path.name}: {e}") from e
        logger.warning("re-parsing manifest tabs->spaces: %s", path.name)
        try:
            data = yaml.safe_load(raw_text.replace("\t", "  ")) or {}
        except YAMLError as e2:
            raise ManifestError(f"Invalid manifest {path.name}: {e2}") from e2
    if not isinstance(data, dict):
        raise ManifestError(f"Invalid manifest {path.name}: not a mapping")
    try:
        return ModuleDescriptor.model_validate(data)
    except Exception as e:  # noqa: BLE001
        raise ManifestError(f"Invalid manifest {path.name}: {e}") from e


def load_manifests(manifests_dir: str | Path) -> Dict[str, ModuleDescriptor]:
    """Index manifests by module id (thread-safe cache per directory)."""
    root = Path(manifests_dir).resolve()
    with _manifest_lock:
        if root in _manifest_cache:
            return _manifest_cache[root]
        index: Dict[str, ModuleDescriptor] = {}
        if root.is_dir():
            for mf in _iter_manifest_files(root):
                descriptor = _load_manifest_file(mf)
                if descriptor.id in index:
                    raise ManifestError(
                        f"Duplicate module id in manifests: {descriptor.id}"
                    )
                index[descriptor.id] = descriptor
        _manifest_cache[root] = index
        return index


def clear_manifest_cache(manifests_dir: str | Path | None = None) -> None:
    """Clear cached manifest index.

    If manifests_dir provided, clear only that entry; else clear all.
    """
    with _manifest_lock:
        if manifests_dir is None:
            _manifest_cache.clear()
        else:
            _manifest_cache.pop(Path(manifests_dir).resolve(), None)


__all__ = ["load_manifests", "clear_manifest_cache"]
