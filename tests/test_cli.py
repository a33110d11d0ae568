from pathlib import Path

import orjson
from typer.testing import CliRunner

from repform.cli import app

runner = CliRunner()

RECORDS = [{"customer": "Alice", "amount": 12.5}, {"customer": "Bob", "amount": 7.25}]


def _layout(tmp_path: Path) -> Path:
    layout = tmp_path / "layout.yaml"
    result = runner.invoke(app, ["sample-layout", str(layout)])
    assert result.exit_code == 0
    return layout


def test_render_to_file_and_read_back(tmp_path: Path) -> None:
    layout = _layout(tmp_path)
    records = tmp_path / "records.json"
    records.write_bytes(orjson.dumps(RECORDS))
    report = tmp_path / "report.txt"

    result = runner.invoke(app, ["render", str(layout), str(records), "-o", str(report)])
    assert result.exit_code == 0
    lines = report.read_text().splitlines()
    assert lines[0] == "Invoices                 page  1"
    assert lines[1] == "Alice        $     12.50"
    assert len(lines) == 20

    result = runner.invoke(app, ["read", str(layout), str(report)])
    assert result.exit_code == 0
    assert orjson.loads(result.stdout) == RECORDS


def test_render_jsonl_to_stdout(tmp_path: Path) -> None:
    layout = _layout(tmp_path)
    records = tmp_path / "records.jsonl"
    records.write_bytes(b"\n".join(orjson.dumps(r) for r in RECORDS))
    result = runner.invoke(
        app, ["render", str(layout), str(records), "--no-finish", "--page-length", "5"]
    )
    assert result.exit_code == 0
    assert result.stdout.splitlines() == [
        "Invoices                 page  1",
        "Alice        $     12.50",
        "Bob          $      7.25",
    ]


def test_read_to_arrow(tmp_path: Path) -> None:
    layout = _layout(tmp_path)
    report = tmp_path / "report.txt"
    report.write_text("Bob          $      7.25\n")
    out = tmp_path / "out.arrow"
    result = runner.invoke(app, ["read", str(layout), str(report), "-f", "arrow", "-o", str(out)])
    assert result.exit_code == 0
    assert out.exists()


def test_read_rejects_unknown_format(tmp_path: Path) -> None:
    layout = _layout(tmp_path)
    result = runner.invoke(app, ["read", str(layout), str(layout), "-f", "csv"])
    assert result.exit_code != 0


def test_missing_layout(tmp_path: Path) -> None:
    result = runner.invoke(app, ["inspect", str(tmp_path / "nope.yaml")])
    assert result.exit_code != 0


def test_inspect_with_verbose_logging(tmp_path: Path) -> None:
    layout = _layout(tmp_path)
    result = runner.invoke(app, ["--verbose", "inspect", str(layout)])
    assert result.exit_code == 0
    assert "detail" in result.stdout
