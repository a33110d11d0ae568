"""Read rendered text back into variable values using the same picture.

Each picture line becomes a regular expression: literal text is matched as
is and every field captures its declared width, except the last field on
the line which captures to the end (whole parts of numbers may have
overflowed their picture). Repeat lines keep matching consecutive input
lines; chomp fields glue the pieces back together with single spaces, so
``abc``/``def`` printed by ``^<<`` reads back as ``"abc def"``.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import orjson
import pyarrow as pa

from repform.form import Form
from repform.picture.compiler import CompiledForm, PictureLine
from repform.picture.fields import Field, FixedPoint, Justify, Literal, PageNumber, Scientific, is_numeric

logger = logging.getLogger(__name__)


@dataclass
class LinePattern:
    regex: re.Pattern[str]
    bindings: list[tuple[Field, str]]
    repeat: bool
    source: str


@dataclass
class Matcher:
    patterns: list[LinePattern]


def build_line_pattern(line: PictureLine) -> LinePattern:
    bindings = line.bindings()
    segments = line.segments
    field_positions = [idx for idx, seg in enumerate(segments) if not isinstance(seg, Literal)]
    last_field = field_positions[-1] if field_positions else -1
    parts: list[str] = []
    for idx, segment in enumerate(segments):
        if isinstance(segment, Literal):
            text = segment.text
            if idx == len(segments) - 1:
                text = text.rstrip()  # rendered lines are right-trimmed
            parts.append(re.escape(text))
        elif idx == last_field:
            parts.append("(.*)")
        else:
            parts.append(f"(.{{{segment.width}}})")
    return LinePattern(
        regex=re.compile("".join(parts)),
        bindings=bindings,
        repeat=line.repeat_until_blank,
        source=line.source,
    )


def build_matcher(form: Form | CompiledForm) -> Matcher:
    compiled = form.compiled if isinstance(form, Form) else form
    return Matcher(patterns=[build_line_pattern(line) for line in compiled.lines])


def _has_radix(field: Field) -> bool:
    return isinstance(field, (FixedPoint, Scientific)) and field.has_radix


def parse_number(text: str, as_float: bool) -> int | float | str | None:
    stripped = text.strip()
    if not stripped:
        return None
    try:
        return float(stripped) if as_float else int(stripped)
    except ValueError:
        pass
    try:
        number = float(stripped)
    except ValueError:
        logger.debug("%r is not numeric, keeping the text", stripped)
        return stripped
    return number if as_float else int(number)


def field_value(field: Field, text: str) -> Any:
    """Undo the padding a field added and guess the value's type."""
    if is_numeric(field):
        return parse_number(text, _has_radix(field))
    if isinstance(field, PageNumber):
        return parse_number(text, False)
    if isinstance(field, Justify):
        if field.align == "left":
            return text.rstrip(" ")
        if field.align == "right":
            return text.lstrip(" ")
        return " ".join(text.split())
    return text


def _save(values: dict[str, Any], field: Field, name: str, text: str) -> None:
    value = field_value(field, text)
    if field.chomp and not is_numeric(field):
        current = values.get(name) or ""
        value = f"{current} {value}" if current and value else current + value
    values[name] = value


def match_line(pattern: LinePattern, line: str, values: dict[str, Any]) -> bool:
    match = pattern.regex.search(line)
    if match is None:
        return False
    for (field, name), text in zip(pattern.bindings, match.groups()):
        _save(values, field, name, text)
    return True


def read(matcher: Matcher, lines: Iterable[str] | str) -> Iterator[dict[str, Any]]:
    """Yield one name -> value mapping per record found in ``lines``.

    Lines are pulled one at a time, so ``lines`` may be an open file or any
    other lazy iterable. When no picture line matches the current input line
    it is skipped so the scan always advances.
    """
    if isinstance(lines, str):
        lines = lines.splitlines()
    stream = (line.rstrip("\r\n") for line in lines)
    current = next(stream, None)
    while current is not None:
        values: dict[str, Any] = {}
        matched = False
        for pattern in matcher.patterns:
            while current is not None and match_line(pattern, current, values):
                matched = True
                current = next(stream, None)
                if not pattern.repeat:
                    break
        if not matched:
            logger.debug("no picture line matches %r, skipping it", current)
            current = next(stream, None)
            continue
        yield values


def records_to_jsonl(records: Iterable[dict[str, Any]], path: Path) -> None:
    """Write recovered records as JSONL."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("wb") as f:
        for record in records:
            f.write(orjson.dumps(record) + b"\n")


def _arrow_column(values: list[Any]) -> list[Any]:
    kinds = {type(v) for v in values if v is not None}
    if len(kinds) > 1:
        # mixed types (e.g. int and unparsable text) are stored as text
        return [None if v is None else str(v) for v in values]
    return values


def records_to_arrow(records: list[dict[str, Any]], path: Path) -> None:
    """Write recovered records to Arrow IPC, one column per variable."""
    path.parent.mkdir(parents=True, exist_ok=True)
    names: dict[str, None] = {}
    for record in records:
        for name in record:
            names.setdefault(name, None)
    table = pa.table(
        {name: _arrow_column([record.get(name) for record in records]) for name in names}
    )
    with pa.OSFile(str(path), "wb") as sink:
        with pa.ipc.new_file(sink, table.schema) as writer:
            writer.write_table(table)


def records_to_json(records: list[dict[str, Any]], path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(orjson.dumps(records, option=orjson.OPT_INDENT_2))
