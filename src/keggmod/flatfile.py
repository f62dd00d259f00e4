"""Reader for KEGG flat-file databases (module, compound, ...).

A KEGG flat file is a sequence of records terminated by ``///``. Each line
holds a keyword in columns 0-11 and its value from column 12 on; a line with
a blank keyword column continues the previous keyword::

    ENTRY       M00001            Pathway   Module
    NAME        Glycolysis (Embden-Meyerhof pathway), glucose => pyruvate
    DEFINITION  (K00844,K12407,K00845) (K01810,K06859)
    CLASS       Pathway modules; Carbohydrate metabolism
    ///

The reader keeps every value line; callers decide how to join them.
"""
from __future__ import annotations

import tarfile
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path


RECORD_TERMINATOR = "///"
KEYWORD_WIDTH = 12

MODULE_FILE = Path("module") / "module"
MODULE_ARCHIVE = "module.tar.gz"


@dataclass(frozen=True, slots=True)
class FlatFileRecord:
    """One ``///``-terminated record, values grouped by keyword."""

    entry_id: str
    fields: dict[str, list[str]] = field(default_factory=dict)

    def joined(self, keyword: str, sep: str = " ") -> str:
        """All value lines of ``keyword`` joined with ``sep`` ("" if absent)."""
        return sep.join(self.fields.get(keyword, []))

    def first(self, keyword: str) -> str:
        values = self.fields.get(keyword)
        return values[0] if values else ""


def _finish_record(fields: dict[str, list[str]]) -> FlatFileRecord:
    entry = fields.get("ENTRY", [""])[0].split()
    return FlatFileRecord(entry_id=entry[0] if entry else "", fields=fields)


def iter_flatfile_records(lines: Iterable[str]) -> Iterator[FlatFileRecord]:
    """Yield records from flat-file lines.

    A trailing record without ``///`` is still emitted. Blank lines are
    ignored.
    """

    fields: dict[str, list[str]] = {}
    keyword = ""
    for raw_line in lines:
        line = raw_line.rstrip("\r\n")
        if line.strip() == RECORD_TERMINATOR:
            if fields:
                yield _finish_record(fields)
            fields = {}
            keyword = ""
            continue
        if not line.strip():
            continue

        head = line[:KEYWORD_WIDTH].strip()
        value = line[KEYWORD_WIDTH:].strip()
        if head:
            # Sub-keywords such as "  AUTHORS" inside REFERENCE stay distinct.
            keyword = head
        elif not keyword:
            continue
        fields.setdefault(keyword, []).append(value)

    if fields:
        yield _finish_record(fields)


def read_flatfile(path: Path) -> list[FlatFileRecord]:
    """Read all records of a flat file; undecodable bytes are replaced."""
    text = path.read_text(encoding="utf-8", errors="replace")
    return list(iter_flatfile_records(text.splitlines()))


def resolve_module_file(kegg_root: Path) -> Path:
    """Locate ``<kegg_root>/module/module``, extracting it from the archive if needed.

    Raises FileNotFoundError when neither the file nor ``module.tar.gz``
    exists, or the archive has no ``module/module`` member.
    """

    target = kegg_root / MODULE_FILE
    if target.exists():
        return target

    archive = kegg_root / MODULE_ARCHIVE
    if not archive.exists():
        raise FileNotFoundError(
            f"Neither {target} nor {archive} exists",
        )
    member_name = MODULE_FILE.as_posix()
    with tarfile.open(archive, "r:gz") as tar:
        try:
            member = tar.getmember(member_name)
        except KeyError as exc:
            raise FileNotFoundError(
                f"{archive} has no member {member_name!r}",
            ) from exc
        tar.extractall(kegg_root, members=[member], filter="data")
    return target
