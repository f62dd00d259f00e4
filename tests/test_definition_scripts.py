"""Tests for normalize_definition.py and build_module_table.py."""
from __future__ import annotations

import importlib.util
import io
import sys
import tarfile
from pathlib import Path
from typing import Any

import orjson
import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from keggmod.reference_table import load_module_table


def _load_jsonl(path: Path) -> list[dict[str, Any]]:
    return [orjson.loads(line) for line in path.read_bytes().splitlines() if line.strip()]


def _load_script(name: str) -> Any:
    script_path = ROOT / "scripts" / f"{name}.py"
    spec = importlib.util.spec_from_file_location(name, script_path)
    assert spec is not None
    module = importlib.util.module_from_spec(spec)
    assert spec.loader is not None
    spec.loader.exec_module(module)
    return module


MODULE_TEXT = (
    "ENTRY       M00007            Pathway   Module\n"
    "NAME        Pentose phosphate pathway, non-oxidative phase\n"
    "DEFINITION  K00615 (K00616,K13810) K01783 (K01807,K01808)\n"
    "///\n"
    "ENTRY       M00099            Pathway   Module\n"
    "NAME        Unbalanced\n"
    "DEFINITION  K00001) K00002\n"
    "///\n"
)


class TestNormalizeDefinitionScript:
    def test_normalize_many_marks_rejections(self) -> None:
        mod = _load_script("normalize_definition")
        rows = mod.normalize_many(["K00001+K00002", "(K00001 K00002"])
        assert rows[0] == {"raw_text": "K00001+K00002", "expression": "K00001&K00002", "error": None}
        assert rows[1]["expression"] is None
        assert "unclosed" in rows[1]["error"]

    def test_main_detailed_output(self, capsys: pytest.CaptureFixture[str]) -> None:
        mod = _load_script("normalize_definition")
        exit_code = mod.main(["--detailed", "(K00001,K00002) K00003"])
        assert exit_code == 0
        payload = orjson.loads(capsys.readouterr().out)
        assert payload[0]["expression"] == "K00001|K00002 K00003"
        assert payload[0]["block_count"] == 2
        assert payload[0]["error"] is None

    def test_main_reads_stdin_and_fails_on_rejection(
        self,
        capsys: pytest.CaptureFixture[str],
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        mod = _load_script("normalize_definition")
        monkeypatch.setattr(sys, "stdin", io.StringIO("K00001 ,K00002\n\nK1&K2\n"))
        exit_code = mod.main(["--stdin"])
        assert exit_code == 1
        payload = orjson.loads(capsys.readouterr().out)
        assert [row["expression"] for row in payload] == ["K00001|K00002", None]

    def test_main_strips_crlf_line_endings(
        self,
        capsys: pytest.CaptureFixture[str],
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        mod = _load_script("normalize_definition")
        monkeypatch.setattr(sys, "stdin", io.StringIO("K00001\r\nK00002+K00003\r\n"))
        assert mod.main(["--stdin"]) == 0
        payload = orjson.loads(capsys.readouterr().out)
        assert [row["raw_text"] for row in payload] == ["K00001", "K00002+K00003"]
        assert [row["expression"] for row in payload] == ["K00001", "K00002&K00003"]

    def test_main_requires_input(self) -> None:
        mod = _load_script("normalize_definition")
        with pytest.raises(SystemExit) as excinfo:
            mod.main([])
        assert excinfo.value.code == 2


class TestBuildModuleTableScript:
    def test_build_from_archive(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        mod = _load_script("build_module_table")
        payload = MODULE_TEXT.encode("utf-8")
        with tarfile.open(tmp_path / "module.tar.gz", "w:gz") as tar:
            info = tarfile.TarInfo("module/module")
            info.size = len(payload)
            tar.addfile(info, io.BytesIO(payload))

        db_path = tmp_path / "out" / "modules.duckdb"
        jsonl_path = tmp_path / "out" / "modules.jsonl"
        exit_code = mod.main([
            "--kegg-path", str(tmp_path),
            "--output", str(db_path),
            "--jsonl", str(jsonl_path),
        ])
        assert exit_code == 0

        summary = orjson.loads(capsys.readouterr().out)
        assert summary["modules"] == 2
        assert summary["normalized"] == 1
        assert summary["rejected_ids"] == ["M00099"]

        rows = {row["ID"]: row for row in load_module_table(db_path)}
        assert rows["M00007"]["DEFINITION_LOGICAL"] == "K00615 K00616|K13810 K01783 K01807|K01808"
        assert rows["M00099"]["ERROR"] is not None
        assert [row["ID"] for row in _load_jsonl(jsonl_path)] == ["M00007", "M00099"]

    def test_force_overwrites_existing_db(self, tmp_path: Path) -> None:
        mod = _load_script("build_module_table")
        module_file = tmp_path / "module"
        module_file.write_text(MODULE_TEXT, encoding="utf-8")
        db_path = tmp_path / "modules.duckdb"

        mod.build_table(module_file, output=db_path)
        with pytest.raises(SystemExit):
            mod.main(["--module-file", str(module_file), "--output", str(db_path)])
        summary = mod.build_table(module_file, output=db_path, force=True)
        assert summary["modules"] == 2
        assert len(load_module_table(db_path)) == 2

    def test_requires_an_output(self, tmp_path: Path) -> None:
        mod = _load_script("build_module_table")
        module_file = tmp_path / "module"
        module_file.write_text(MODULE_TEXT, encoding="utf-8")
        with pytest.raises(SystemExit):
            mod.main(["--module-file", str(module_file)])

    def test_missing_database_returns_error(self, tmp_path: Path) -> None:
        mod = _load_script("build_module_table")
        exit_code = mod.main(["--kegg-path", str(tmp_path), "--jsonl", str(tmp_path / "x.jsonl")])
        assert exit_code == 1
