"""Compile picture specifications into line/field descriptors.

A spec is a sequence of lines (or one multi-line string):
- ``#`` at the start of a line marks a comment
- a picture line holds literal text and ``@``/``^`` fields
- a picture line with fields is followed by a comma-separated line naming
  one variable per field
- ``~`` anywhere in a picture line suppresses it when every field is blank,
  ``~~`` repeats it until it would be suppressed
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from repform.errors import ArityMismatchError
from repform.picture.fields import Field, FieldSpec, Literal
from repform.picture.lexer import REPEAT_MARK, SUPPRESS_MARK, lex_line

logger = logging.getLogger(__name__)

COMMENT_PREFIX = "#"

Spec = str | Sequence[str]


@dataclass
class PictureLine:
    segments: list[FieldSpec]
    suppress_if_blank: bool = False
    repeat_until_blank: bool = False
    variables: list[str] = field(default_factory=list)
    source: str = ""

    @property
    def fields(self) -> list[Field]:
        return [seg for seg in self.segments if not isinstance(seg, Literal)]

    @property
    def expected_var_count(self) -> int:
        return len(self.fields)

    @property
    def width(self) -> int:
        return sum(seg.width for seg in self.segments)

    def bindings(self) -> list[tuple[Field, str]]:
        """Pair each field with its variable name, checking arity."""
        fields = self.fields
        if len(fields) != len(self.variables):
            raise ArityMismatchError(
                len(fields), len(self.variables), f"picture line {self.source!r}"
            )
        return list(zip(fields, self.variables))


@dataclass
class CompiledForm:
    lines: list[PictureLine] = field(default_factory=list)

    @property
    def line_count(self) -> int:
        return len(self.lines)

    @property
    def variables(self) -> list[list[str]]:
        return [list(line.variables) for line in self.lines]

    def variable_names(self) -> list[str]:
        """Distinct variable names in order of first use."""
        seen: dict[str, None] = {}
        for line in self.lines:
            for name in line.variables:
                seen.setdefault(name, None)
        return list(seen)


def split_spec(spec: Spec) -> list[str]:
    if isinstance(spec, str):
        return spec.splitlines()
    lines: list[str] = []
    for chunk in spec:
        lines.extend(chunk.splitlines() or [""])
    return lines


def parse_variable_line(line: str, expected: int) -> list[str]:
    names = [name.strip() for name in line.split(",")]
    while names and not names[-1]:
        names.pop()  # trailing comma
    if len(names) != expected:
        raise ArityMismatchError(
            expected,
            len(names),
            f"be sure to separate names using commas, got {line!r}",
        )
    return names


def compile_picture_line(line: str) -> PictureLine:
    segments = lex_line(line)
    return PictureLine(
        segments=segments,
        suppress_if_blank=SUPPRESS_MARK in line,
        repeat_until_blank=REPEAT_MARK in line,
        source=line,
    )


def compile_spec(spec: Spec) -> CompiledForm:
    """Compile a picture spec, pairing each picture line with its variable line."""
    form = CompiledForm()
    pending: PictureLine | None = None
    for raw in split_spec(spec):
        if raw.startswith(COMMENT_PREFIX):
            continue
        if pending is not None:
            pending.variables = parse_variable_line(raw, pending.expected_var_count)
            pending = None
            continue
        line = compile_picture_line(raw)
        form.lines.append(line)
        if line.expected_var_count:
            pending = line
    if pending is not None:
        raise ArityMismatchError(
            pending.expected_var_count, 0, f"missing variable line after {pending.source!r}"
        )
    logger.debug("compiled %d picture line(s)", form.line_count)
    return form
