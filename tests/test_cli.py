"""Tests for the tracegen CLI."""

from __future__ import annotations

import json
from pathlib import Path

from typer.testing import CliRunner

from tracegen.cli import app
from tracegen.constants import MAX_APP_COUNT

runner = CliRunner()


def _generate(tmp_path: Path, name: str = "landscape.json", *extra: str) -> Path:
    output = tmp_path / name
    result = runner.invoke(app, ["generate", "--app-count", "2", "--seed", "7", "--output", str(output), *extra])
    assert result.exit_code == 0, result.output
    return output


class TestGenerate:
    """Tests for the generate command."""

    def test_writes_cleaned_landscape(self, tmp_path: Path) -> None:
        data = json.loads(_generate(tmp_path).read_text())
        assert len(data) == 2
        assert {"name", "rootPackages", "entryPointFqn"} <= set(data[0])

    def test_seeded_output_reproducible(self, tmp_path: Path) -> None:
        first = _generate(tmp_path, "a.json").read_text()
        second = _generate(tmp_path, "b.json").read_text()
        assert first == second

    def test_params_file_with_override(self, tmp_path: Path) -> None:
        params = tmp_path / "gen.yaml"
        params.write_text("appCount: 5\nminClassCount: 2\nmaxClassCount: 3\nseed: 1\n")
        output = tmp_path / "out.json"
        result = runner.invoke(
            app, ["generate", "--params", str(params), "--app-count", "3", "--output", str(output)]
        )
        assert result.exit_code == 0, result.output
        data = json.loads(output.read_text())
        assert len(data) == 3
        assert all(2 <= len(a["classes"]) <= 3 for a in data)

    def test_ceiling_enforced(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["generate", "--app-count", str(MAX_APP_COUNT + 1)])
        assert result.exit_code != 0

    def test_inconsistent_range_rejected(self, tmp_path: Path) -> None:
        result = runner.invoke(
            app, ["generate", "--min-classes", "9", "--max-classes", "3", "--output", str(tmp_path / "x.json")]
        )
        assert result.exit_code != 0
        assert not (tmp_path / "x.json").exists()


class TestSimulate:
    """Tests for the simulate command."""

    def test_writes_trace(self, tmp_path: Path) -> None:
        landscape = _generate(tmp_path)
        output = tmp_path / "trace.json"
        result = runner.invoke(app, [
            "simulate",
            "--landscape", str(landscape),
            "--call-count", "12",
            "--style", "cohesive",
            "--attribute", "deployment.environment=test",
            "--attribute", "team=core",
            "--seed", "3",
            "--output", str(output),
        ])
        assert result.exit_code == 0, result.output
        trace = json.loads(output.read_text())
        assert len(trace) == 1
        assert trace[0]["attributes"]["deployment.environment"] == "test"
        assert trace[0]["attributes"]["team"] == "core"

    def test_params_file(self, tmp_path: Path) -> None:
        landscape = _generate(tmp_path)
        params = tmp_path / "trace.yaml"
        params.write_text("callCount: 1\nmaxConnectionDepth: 1\nallowCyclicCalls: true\nseed: 2\n")
        output = tmp_path / "trace.json"
        result = runner.invoke(app, [
            "simulate", "--landscape", str(landscape), "--params", str(params), "--output", str(output),
        ])
        assert result.exit_code == 0, result.output
        trace = json.loads(output.read_text())
        assert len(trace[0]["children"]) == 1

    def test_bad_attribute(self, tmp_path: Path) -> None:
        landscape = _generate(tmp_path)
        result = runner.invoke(app, ["simulate", "--landscape", str(landscape), "--attribute", "novalue"])
        assert result.exit_code != 0

    def test_missing_landscape(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["simulate", "--landscape", str(tmp_path / "missing.json")])
        assert result.exit_code != 0


class TestConvertAndInspect:
    """Tests for the convert and inspect commands."""

    def _structure_file(self, tmp_path: Path) -> Path:
        path = tmp_path / "structure.json"
        path.write_text(json.dumps({
            "landscapeToken": "token",
            "nodes": [{
                "ipAddress": "10.0.0.1",
                "hostName": "node",
                "applications": [{
                    "name": "inventory",
                    "language": "java",
                    "instanceId": "0",
                    "packages": [{
                        "name": "stock",
                        "subPackages": [],
                        "classes": [{"name": "StockService", "methods": [{"name": "reserve"}]}],
                    }],
                }],
            }],
        }))
        return path

    def test_convert(self, tmp_path: Path) -> None:
        output = tmp_path / "converted.json"
        result = runner.invoke(
            app, ["convert", "--input", str(self._structure_file(tmp_path)), "--output", str(output)]
        )
        assert result.exit_code == 0, result.output
        data = json.loads(output.read_text())
        assert data[0]["entryPointFqn"] == "stock.StockService"

    def test_convert_rejects_cleaned_input(self, tmp_path: Path) -> None:
        landscape = _generate(tmp_path)
        result = runner.invoke(app, ["convert", "--input", str(landscape)])
        assert result.exit_code != 0

    def test_inspect(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["inspect", "--landscape", str(self._structure_file(tmp_path))])
        assert result.exit_code == 0, result.output
        assert "inventory" in result.output
        assert "stock.StockService" in result.output

    def test_verbose_flag(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["-v", "inspect", "--landscape", str(self._structure_file(tmp_path))])
        assert result.exit_code == 0, result.output
