#!/usr/bin/env python3
"""Normalize KEGG module definitions into canonical ``&``/``|`` expressions.

Usage:
    python3 scripts/normalize_definition.py "(K00844,K12407) K01810+K06859"
    cut -f3 modules.tsv | python3 scripts/normalize_definition.py --stdin --detailed

Structured JSON output goes to stdout; human messages go to stderr.
Exit status is 1 when any definition was rejected.
"""
from __future__ import annotations

import argparse
import logging
import sys
from typing import Any

from keggmod.definition import (
    StructuralError,
    canonical_definition_to_dict,
    normalize_module_definition_detailed,
)
from keggmod.io_utils import dumps_json

log = logging.getLogger("normalize_definition")


def dump_json(obj: Any) -> None:
    sys.stdout.buffer.write(dumps_json(obj))
    sys.stdout.buffer.write(b"\n")


def normalize_many(definitions: list[str], *, detailed: bool = False) -> list[dict[str, Any]]:
    """Normalize each definition; rejected ones carry an ``error`` entry."""
    rows: list[dict[str, Any]] = []
    for definition in definitions:
        try:
            result = normalize_module_definition_detailed(definition)
        except StructuralError as exc:
            log.warning("Rejected %r: %s", definition, exc)
            rows.append({"raw_text": definition, "expression": None, "error": str(exc)})
            continue
        if detailed:
            row = canonical_definition_to_dict(result)
        else:
            row = {"raw_text": result.raw_text, "expression": result.expression}
        row["error"] = None
        rows.append(row)
    return rows


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Normalize KEGG module definitions into logical expressions.",
    )
    parser.add_argument(
        "definitions",
        nargs="*",
        help="Module definitions to normalize",
    )
    parser.add_argument(
        "--stdin",
        action="store_true",
        help="Also read one definition per line from stdin (blank lines skipped)",
    )
    parser.add_argument(
        "--detailed",
        action="store_true",
        help="Emit preprocessing flags and per-block trace",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose logging",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(message)s",
        stream=sys.stderr,
    )

    definitions = list(args.definitions)
    if args.stdin:
        definitions.extend(line.rstrip("\r\n") for line in sys.stdin if line.strip())
    if not definitions:
        parser.error("no definitions given (pass them as arguments or use --stdin)")

    rows = normalize_many(definitions, detailed=args.detailed)
    rejected = sum(1 for row in rows if row["error"] is not None)
    log.debug("Normalized %d definitions, %d rejected", len(rows) - rejected, rejected)
    dump_json(rows)
    return 1 if rejected else 0


if __name__ == "__main__":
    sys.exit(main())
