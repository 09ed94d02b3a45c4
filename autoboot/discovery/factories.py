"""Factories file reader: key → ordered list of identities.

File format (line-oriented properties, compatible with existing
deployments)::

    # comment
    ! comment
    autoboot.activation.EnableActivation=\\
      acme.web.ServerModule,\\
      acme.db.PoolModule

- key and value separated by the first unescaped ``=``, ``:`` or blank
- a line ending in an odd number of backslashes continues on the next one
  (leading blanks of the continuation are dropped)
- values are comma separated; items are stripped and empty items dropped

Several sources aggregate by concatenation in source order. No
deduplication happens here; the resolver keeps the first occurrence.
"""
from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, Iterator, List

from autoboot.errors import FactoriesError

ACTIVATION_KEY = "autoboot.activation.EnableActivation"
LISTENER_KEY = "autoboot.lifecycle.StartupListener"

FACTORIES_FILE = "autoboot.factories"

_ESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}


def _logical_lines(text: str) -> Iterator[str]:
    buf = ""
    continuing = False
    for raw in text.splitlines():
        line = raw.lstrip(" \t\f")
        if not continuing and (not line or line[0] in "#!"):
            continue
        trailing = len(line) - len(line.rstrip("\\"))
        if trailing % 2 == 1:
            buf += line[:-1]
            continuing = True
            continue
        buf += line
        continuing = False
        yield buf
        buf = ""
    if buf:
        yield buf


def _unescape(s: str, line: str) -> str:
    out: List[str] = []
    i = 0
    while i < len(s):
        ch = s[i]
        if ch != "\\":
            out.append(ch)
            i += 1
            continue
        i += 1
        if i >= len(s):
            break
        nxt = s[i]
        if nxt == "u":
            code = s[i + 1:i + 5]
            try:
                out.append(chr(int(code, 16)))
            except ValueError as e:
                raise FactoriesError(
                    f"Malformed \\uxxxx escape in line: {line!r}"
                ) from e
            i += 5
            continue
        out.append(_ESCAPES.get(nxt, nxt))
        i += 1
    return "".join(out)


def _split_key(line: str) -> tuple[str, str]:
    i = 0
    while i < len(line):
        ch = line[i]
        if ch == "\\":
            i += 2
            continue
        if ch in "=: \t\f":
            break
        i += 1
    key = line[:i]
    rest = line[i:].lstrip(" \t\f")
    if rest[:1] in ("=", ":") and (i == len(line) or line[i] in " \t\f"):
        rest = rest[1:].lstrip(" \t\f")
    elif i < len(line) and line[i] in "=:":
        rest = line[i + 1:].lstrip(" \t\f")
    return key, rest


def parse_factories(text: str) -> Dict[str, List[str]]:
    """Parse one factories source; repeated keys append in file order."""
    result: Dict[str, List[str]] = {}
    for line in _logical_lines(text):
        raw_key, raw_value = _split_key(line)
        key = _unescape(raw_key, line).strip()
        if not key:
            continue
        items = [
            item.strip()
            for item in _unescape(raw_value, line).split(",")
        ]
        result.setdefault(key, []).extend(i for i in items if i)
    return result


def load_factories(paths: Iterable[str | Path]) -> Dict[str, List[str]]:
    """Aggregate factories sources by concatenation in source order.

    Missing files are skipped (a source may be optional).
    """
    merged: Dict[str, List[str]] = {}
    for p in paths:
        path = Path(p)
        if path.is_dir():
            path = path / FACTORIES_FILE
        if not path.is_file():
            continue
        try:
            text = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise FactoriesError(f"Unreadable factories file {path}: {e}") from e
        for key, values in parse_factories(text).items():
            merged.setdefault(key, []).extend(values)
    return merged


def load_factory_names(key: str, paths: Iterable[str | Path]) -> List[str]:
    return list(load_factories(paths).get(key, []))


__all__ = [
    "ACTIVATION_KEY",
    "LISTENER_KEY",
    "FACTORIES_FILE",
    "parse_factories",
    "load_factories",
    "load_factory_names",
]
