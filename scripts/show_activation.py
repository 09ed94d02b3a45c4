"""Print the activation order for the configured (or given) sources.

Usage:
    python scripts/show_activation.py
    python scripts/show_activation.py --factories a/autoboot.factories \
        --manifests modules --exclude acme.web.ServerModule -p acme.web.enabled=false

Conditions are evaluated against the running interpreter (library
presence) and the ``-p`` properties; no components are registered.
"""
from __future__ import annotations

import argparse
import os
import sys

# Ensure project root on path when executed directly
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from autoboot.activation import (  # noqa: E402
    ActivationResolver,
    ExclusionRequest,
    RuntimeContext,
    load_catalog,
)
from autoboot.config import configure_logging, get_config  # noqa: E402
from autoboot.errors import ConfigurationError  # noqa: E402


def _parse_props(items):
    props = {}
    for item in items or ():
        key, sep, value = item.partition("=")
        if not sep:
            raise SystemExit(f"invalid property (expected key=value): {item}")
        props[key.strip()] = value.strip()
    return props


def main(argv=None) -> int:
    ap = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    ap.add_argument("--factories", action="append", default=None)
    ap.add_argument("--manifests", default=None, help="default: config")
    ap.add_argument("--exclude", action="append", default=[])
    ap.add_argument("-p", "--property", action="append", default=[])
    ap.add_argument("--report", action="store_true", help="show outcomes")
    args = ap.parse_args(argv)

    cfg = get_config()
    configure_logging(cfg.logging)
    factories = args.factories or cfg.activation.factories
    catalog = load_catalog(
        factories, args.manifests or cfg.activation.manifests_dir
    )
    exclusions = ExclusionRequest(names=tuple(args.exclude)).merged_with(
        cfg.activation.exclude
    )
    ctx = RuntimeContext(properties=_parse_props(args.property))
    try:
        result = ActivationResolver(cfg.activation.enabled).resolve(
            catalog, exclusions, ctx
        )
    except ConfigurationError as e:
        print(f"[activation-error] type={e.error_type} {e}")
        return 1
    print(f"CANDIDATES: {len(catalog)}  ACTIVATED: {len(result)}")
    for pos, ident in enumerate(result, 1):
        print(f"{pos:3d}. {ident}")
    if args.report:
        for ident in result.excluded:
            print(f"  excluded  {ident}")
        for ident, outcome in result.report.outcomes.items():
            status = "match   " if outcome.match else "no-match"
            print(f"  {status}  {ident}: {outcome.message}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
