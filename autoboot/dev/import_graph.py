"""Build the internal import graph of a package (architecture guardrail).

Parses every ``.py`` file under a package directory with ``ast`` and
collects edges between project-internal modules. Tests use it to enforce:
  - no import cycles between subpackages
  - no forbidden edges (activation and lifecycle stay independent)
"""
from __future__ import annotations

import ast
from pathlib import Path
from typing import Dict, List, Set, Tuple


def _module_name(package: str, root: Path, py: Path) -> str:
    rel = py.relative_to(root).with_suffix("")
    parts = [package, *rel.parts]
    if parts[-1] == "__init__":
        parts = parts[:-1]
    return ".".join(parts)


def _resolve_relative(current: str, is_pkg: bool, level: int, module: str | None) -> str:
    base = current.split(".")
    if not is_pkg:
        base = base[:-1]
    if level > 1:
        base = base[: len(base) - (level - 1)]
    return ".".join(base + ([module] if module else []))


def build_import_graph(root: str | Path, package: str | None = None) -> Dict[str, Set[str]]:
    root_path = Path(root)
    package = package or root_path.name
    edges: Dict[str, Set[str]] = {}
    for py in root_path.rglob("*.py"):
        if "__pycache__" in py.parts:
            continue
        src = _module_name(package, root_path, py)
        is_pkg = py.name == "__init__.py"
        tree = ast.parse(py.read_text(encoding="utf-8"))
        for node in ast.walk(tree):
            targets: List[str] = []
            if isinstance(node, ast.Import):
                targets = [n.name for n in node.names]
            elif isinstance(node, ast.ImportFrom):
                if node.level:
                    targets = [
                        _resolve_relative(src, is_pkg, node.level, node.module)
                    ]
                elif node.module:
                    targets = [node.module]
            for tgt in targets:
                if tgt == package or tgt.startswith(package + "."):
                    edges.setdefault(src, set()).add(tgt)
        edges.setdefault(src, set())
    return edges


def _subpackage(module: str, depth: int) -> str:
    return ".".join(module.split(".")[:depth])


def collapse(graph: Dict[str, Set[str]], depth: int = 2) -> Dict[str, Set[str]]:
    """Collapse module edges to subpackage edges (``autoboot.activation``)."""
    out: Dict[str, Set[str]] = {}
    for src, targets in graph.items():
        s = _subpackage(src, depth)
        out.setdefault(s, set())
        for t in targets:
            d = _subpackage(t, depth)
            if d != s:
                out[s].add(d)
                out.setdefault(d, set())
    return out


def detect_cycles(graph: Dict[str, Set[str]]) -> List[List[str]]:
    visited: Set[str] = set()
    stack: Set[str] = set()
    cycles: List[List[str]] = []

    def dfs(node: str, path: List[str]) -> None:
        if node in stack:
            idx = path.index(node)
            cycles.append(path[idx:] + [node])
            return
        if node in visited:
            return
        visited.add(node)
        stack.add(node)
        for nxt in sorted(graph.get(node, ())):
            dfs(nxt, path + [node])
        stack.remove(node)

    for n in sorted(graph):
        if n not in visited:
            dfs(n, [])
    return cycles


def forbidden_edges(
    graph: Dict[str, Set[str]], rules: List[Tuple[str, str]]
) -> List[Tuple[str, str]]:
    return [
        (src, dst)
        for src, targets in graph.items()
        for dst in targets
        for a, b in rules
        if src.startswith(a) and dst.startswith(b)
    ]


__all__ = ["build_import_graph", "collapse", "detect_cycles", "forbidden_edges"]
