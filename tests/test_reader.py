import itertools
from pathlib import Path

import orjson
import pyarrow as pa

from repform.picture.compiler import compile_spec
from repform.reader import (
    build_matcher,
    parse_number,
    read,
    records_to_arrow,
    records_to_jsonl,
)
from repform.renderer import Renderer
from repform.sinks import ListSink


def test_round_trip_render_then_read():
    renderer = Renderer()
    form = renderer.compile("Name: @<<<<<<<< Amount: @####.##\nname, amount\n")
    sink = ListSink()
    records = [{"name": "Alice", "amount": 12.5}, {"name": "Bob", "amount": 1234.567}]
    renderer.render_all(form, records, sink, finish=False)
    assert sink.lines[1] == "Name: Bob       Amount:  1234.57"

    recovered = list(read(build_matcher(form), sink.lines))
    assert recovered == [{"name": "Alice", "amount": 12.5}, {"name": "Bob", "amount": 1234.57}]


def test_repeat_lines_accumulate_chomped_text():
    renderer = Renderer()
    form = renderer.compile("^<<<<~~\ntext\n")
    sink = ListSink()
    renderer.render_all(form, [{"text": "the quick brown fox"}], sink, finish=False)
    assert sink.lines == ["the", "quick", "brown", "fox"]

    assert list(read(build_matcher(form), sink.text())) == [{"text": "the quick brown fox"}]


def test_unmatched_lines_are_skipped():
    matcher = build_matcher(compile_spec("Total: @###\ntotal\n"))
    lines = ["garbage", "Total:   42", "more", "Total: abc"]
    assert list(read(matcher, lines)) == [{"total": 42}, {"total": "abc"}]


def test_centered_and_right_fields_are_stripped():
    matcher = build_matcher(compile_spec("[@|||||] [@>>>>]\ntitle, code\n"))
    assert list(read(matcher, "[ a  b ] [   7a]\r\n")) == [{"title": "a b", "code": "7a"}]


def test_parse_number():
    assert parse_number("   ", False) is None
    assert parse_number(" 12 ", False) == 12
    assert parse_number("12.50", True) == 12.5
    assert parse_number("1.2E+02", False) == 120
    assert parse_number("n/a", True) == "n/a"


def test_records_to_jsonl(tmp_path: Path) -> None:
    out = tmp_path / "out" / "records.jsonl"
    records_to_jsonl([{"a": 1}, {"a": None}], out)
    rows = [orjson.loads(line) for line in out.read_bytes().splitlines()]
    assert rows == [{"a": 1}, {"a": None}]


def test_records_to_arrow_stores_mixed_columns_as_text(tmp_path: Path) -> None:
    out = tmp_path / "records.arrow"
    records_to_arrow([{"a": 1, "b": "x"}, {"a": "oops", "b": None}], out)
    with pa.memory_map(str(out), "r") as source:
        table = pa.ipc.open_file(source).read_all()
    assert table.column("a").to_pylist() == ["1", "oops"]
    assert table.column("b").to_pylist() == ["x", None]


def test_read_pulls_lines_lazily():
    matcher = build_matcher(compile_spec("Total: @###\ntotal\n"))
    endless = (f"Total: {n}" for n in itertools.count())
    records = read(matcher, endless)
    assert next(records) == {"total": 0}
    assert next(records) == {"total": 1}
