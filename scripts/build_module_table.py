#!/usr/bin/env python3
"""Build the KEGG module reference table with canonical definitions.

Reads the module flat file (extracting ``module/module`` from
``module.tar.gz`` under the KEGG root when needed), normalizes every
DEFINITION and writes the rows to DuckDB and/or JSON Lines.

Usage:
    python3 scripts/build_module_table.py --kegg-path /data/kegg \
        --output output/module_reference_table.duckdb
    python3 scripts/build_module_table.py --module-file module/module \
        --jsonl output/module_reference_table.jsonl --verbose

Structured JSON summary goes to stdout; human messages go to stderr.
"""
from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Any

from keggmod.flatfile import read_flatfile, resolve_module_file
from keggmod.io_utils import dumps_json, save_jsonl
from keggmod.reference_table import build_module_rows, write_module_table

log = logging.getLogger("build_module_table")


def dump_json(obj: Any) -> None:
    sys.stdout.buffer.write(dumps_json(obj))
    sys.stdout.buffer.write(b"\n")


def build_table(
    module_file: Path,
    *,
    output: Path | None = None,
    jsonl: Path | None = None,
    force: bool = False,
) -> dict[str, Any]:
    """Parse ``module_file``, write the requested outputs, return a summary."""
    t0 = time.time()
    records = read_flatfile(module_file)
    log.info("Read %d records from %s", len(records), module_file)

    rows = build_module_rows(records)
    rejected = sum(1 for row in rows if row["ERROR"] is not None)

    if output is not None:
        if output.exists() and force:
            log.info("Removing existing %s", output)
            output.unlink()
        written = write_module_table(rows, output)
        log.info("Wrote %d rows to %s", written, output)
    if jsonl is not None:
        save_jsonl(rows, jsonl)
        log.info("Wrote %d rows to %s", len(rows), jsonl)

    elapsed = time.time() - t0
    log.info("Completed in %.2fs (%d rejected definitions)", elapsed, rejected)
    return {
        "module_file": str(module_file),
        "modules": len(rows),
        "normalized": len(rows) - rejected,
        "rejected": rejected,
        "rejected_ids": [row["ID"] for row in rows if row["ERROR"] is not None],
        "output": str(output) if output is not None else None,
        "jsonl": str(jsonl) if jsonl is not None else None,
    }


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Build a KEGG module reference table with logical definitions.",
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--kegg-path",
        type=Path,
        help="KEGG database root holding module/module or module.tar.gz",
    )
    source.add_argument(
        "--module-file",
        type=Path,
        help="Path to a module flat file",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Path to output DuckDB file",
    )
    parser.add_argument(
        "--jsonl",
        type=Path,
        default=None,
        help="Path to output JSON Lines file",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Overwrite output DuckDB file if it exists",
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

    if args.output is None and args.jsonl is None:
        parser.error("at least one of --output or --jsonl is required")
    if args.output is not None and args.output.exists() and not args.force:
        parser.error(f"{args.output} exists (use --force to overwrite)")

    if args.kegg_path is not None:
        if not args.kegg_path.is_dir():
            parser.error(f"--kegg-path {args.kegg_path} is not a directory")
        try:
            module_file = resolve_module_file(args.kegg_path)
        except FileNotFoundError as exc:
            log.error("%s", exc)
            return 1
    else:
        module_file = args.module_file
        if not module_file.is_file():
            parser.error(f"--module-file {module_file} does not exist")

    summary = build_table(
        module_file,
        output=args.output,
        jsonl=args.jsonl,
        force=args.force,
    )
    dump_json(summary)
    return 0


if __name__ == "__main__":
    sys.exit(main())
