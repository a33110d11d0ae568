"""Split one picture line into literal runs and fields.

Fields are discovered from the right: each introducer only sees the text up
to the introducer found before it, so adjacent fields such as ``@<<@>>``
never swallow each other.
"""

from __future__ import annotations

from repform.errors import MalformedFieldError
from repform.picture.fields import INTRODUCERS, FieldSpec, Literal, classify_field

SUPPRESS_MARK = "~"
REPEAT_MARK = "~~"


def introducer_positions(line: str) -> list[int]:
    return [idx for idx, ch in enumerate(line) if ch in INTRODUCERS]


def _literal(text: str) -> Literal | None:
    text = text.replace(SUPPRESS_MARK, " ")
    return Literal(text) if text else None


def lex_line(line: str) -> list[FieldSpec]:
    """Tokenize a picture line into literal and field segments in source order."""
    segments: list[FieldSpec] = []
    end = len(line)
    for pos in reversed(introducer_positions(line)):
        tail = line[pos + 1 : end]
        try:
            field, consumed = classify_field(line[pos], tail)
        except MalformedFieldError as exc:
            raise MalformedFieldError(exc.fragment, line) from None
        trailing = _literal(tail[consumed:])
        if trailing:
            segments.append(trailing)
        segments.append(field)
        end = pos
    leading = _literal(line[:end])
    if leading:
        segments.append(leading)
    segments.reverse()
    return segments
