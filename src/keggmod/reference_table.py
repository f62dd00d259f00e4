"""Module reference table built from KEGG module flat-file records.

One row per module. Multi-valued columns are ``;``-joined. Rows can be
persisted to a DuckDB file:

Tables:
    modules         — one row per module (ID primary key)
    _schema_version — schema version tracking
"""
from __future__ import annotations

import importlib
import logging
import re
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from keggmod.definition import StructuralError, normalize_module_definition_detailed
from keggmod.flatfile import FlatFileRecord

# Dynamic DuckDB import for pyright compatibility
_duckdb = importlib.import_module("duckdb")

log = logging.getLogger(__name__)


SCHEMA_VERSION = "0.1.0"

MODULE_COLUMNS: tuple[str, ...] = (
    "ID",
    "NAME",
    "DEFINITION",
    "DEFINITION_LOGICAL",
    "BLOCK_COUNT",
    "CLASS",
    "ORTHOLOGY",
    "ERROR",
)

_QUOTED_COLUMNS = ", ".join(f'"{col}"' for col in MODULE_COLUMNS)

_KO_RE = re.compile(r"\bK\d{5}\b")

_SCHEMA_DDL = f"""\
CREATE TABLE _schema_version (
    table_name VARCHAR PRIMARY KEY,
    version VARCHAR NOT NULL,
    created_at TIMESTAMP DEFAULT current_timestamp
);

INSERT INTO _schema_version VALUES ('modules', '{SCHEMA_VERSION}', current_timestamp);

CREATE TABLE modules (
    "ID" VARCHAR PRIMARY KEY,
    "NAME" VARCHAR,
    "DEFINITION" VARCHAR,
    "DEFINITION_LOGICAL" VARCHAR,
    "BLOCK_COUNT" INTEGER,
    "CLASS" VARCHAR,
    "ORTHOLOGY" VARCHAR,
    "ERROR" VARCHAR
)
"""


class SchemaVersionError(RuntimeError):
    """Raised when a module table schema version does not match expected."""


def _orthology_ids(record: FlatFileRecord) -> str:
    seen: dict[str, None] = {}
    for line in record.fields.get("ORTHOLOGY", []):
        for ko in _KO_RE.findall(line):
            seen.setdefault(ko, None)
    return ";".join(seen)


def build_module_row(record: FlatFileRecord) -> dict[str, Any]:
    """Build a reference row for one module record.

    A definition that cannot be normalized leaves ``DEFINITION_LOGICAL`` and
    ``BLOCK_COUNT`` empty and stores the message in ``ERROR``.
    """

    definition = record.joined("DEFINITION")
    row: dict[str, Any] = {
        "ID": record.entry_id,
        "NAME": record.joined("NAME", sep="; "),
        "DEFINITION": definition,
        "DEFINITION_LOGICAL": None,
        "BLOCK_COUNT": None,
        "CLASS": record.first("CLASS"),
        "ORTHOLOGY": _orthology_ids(record),
        "ERROR": None,
    }
    try:
        result = normalize_module_definition_detailed(definition)
    except StructuralError as exc:
        log.warning("Module %s: definition rejected: %s", record.entry_id, exc)
        row["ERROR"] = str(exc)
        return row
    row["DEFINITION_LOGICAL"] = result.expression
    row["BLOCK_COUNT"] = result.block_count
    return row


def build_module_rows(records: Iterable[FlatFileRecord]) -> list[dict[str, Any]]:
    """Build reference rows, skipping records that have no ENTRY id."""
    rows: list[dict[str, Any]] = []
    for record in records:
        if not record.entry_id:
            log.warning("Skipping record without ENTRY (fields: %s)", sorted(record.fields))
            continue
        rows.append(build_module_row(record))
    log.debug("Built %d module rows", len(rows))
    return rows


def write_module_table(rows: list[dict[str, Any]], db_path: Path) -> int:
    """Create a DuckDB file holding ``rows``; return the number written.

    The file must not exist yet. Schema and rows are written in one
    transaction; on failure the file is removed before the error propagates.
    """

    if db_path.exists():
        raise FileExistsError(f"{db_path} already exists")
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn: Any = _duckdb.connect(str(db_path))
    try:
        conn.begin()
        for stmt in _SCHEMA_DDL.split(";"):
            stmt = stmt.strip()
            if stmt:
                conn.execute(stmt)
        if rows:
            placeholders = ", ".join("?" for _ in MODULE_COLUMNS)
            conn.executemany(
                f"INSERT INTO modules ({_QUOTED_COLUMNS}) VALUES ({placeholders})",
                [tuple(row[col] for col in MODULE_COLUMNS) for row in rows],
            )
        conn.commit()
    except Exception:
        conn.rollback()
        conn.close()
        log.error("Writing %s failed; removing partial file", db_path)
        db_path.unlink(missing_ok=True)
        db_path.with_name(db_path.name + ".wal").unlink(missing_ok=True)
        raise
    conn.close()
    return len(rows)


def load_module_table(db_path: Path) -> list[dict[str, Any]]:
    """Read all module rows back, ordered by ID.

    Raises SchemaVersionError when the file was written by another schema.
    """

    conn: Any = _duckdb.connect(str(db_path), read_only=True)
    try:
        result = conn.execute(
            "SELECT version FROM _schema_version WHERE table_name = 'modules'"
        ).fetchone()
        actual = str(result[0]) if result else "unknown"
        if actual != SCHEMA_VERSION:
            raise SchemaVersionError(
                f"Schema version mismatch in {db_path}: expected {SCHEMA_VERSION}, got {actual}"
            )
        fetched = conn.execute(
            f'SELECT {_QUOTED_COLUMNS} FROM modules ORDER BY "ID"'
        ).fetchall()
    finally:
        conn.close()
    return [dict(zip(MODULE_COLUMNS, values, strict=True)) for values in fetched]
