"""Turn a field descriptor plus a live value into fixed-width text."""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import Any

from repform.picture.fields import RADIX, Field, FixedPoint, PageNumber, Scientific
from repform.resolver import VariableResolver, stringify

logger = logging.getLogger(__name__)


def justify(text: str, align: str, width: int) -> str:
    if align == "right":
        return text.rjust(width)
    if align == "center":
        pad = max(width - len(text), 0)
        left = pad // 2
        return " " * left + text + " " * (pad - left)
    return text.ljust(width)


def chomp(text: str, width: int) -> tuple[str, str]:
    """Split ``text`` into the part printed in ``width`` columns and the rest.

    Breaks at the last space within the first ``width + 1`` characters when
    there is one, otherwise mid-word. The rest has leading whitespace removed.
    """
    if len(text) <= width:
        shown = text
    else:
        cut = text[: width + 1].rfind(" ")
        shown = text[:cut] if cut != -1 else text[:width]
    return shown, text[len(shown) :].lstrip()


def _round_fraction(fraction: str, pad: int, keep: int) -> str:
    digits = fraction + "0" * pad
    kept = list(digits[:keep])
    dropped = digits[keep : keep + 1]
    if dropped.isdigit() and int(dropped) >= 5:
        idx = keep - 1
        while idx >= 0 and kept[idx].isdigit():
            if kept[idx] != "9":
                kept[idx] = str(int(kept[idx]) + 1)
                break
            kept[idx] = "0"
            idx -= 1
        # a carry out of the first fraction digit is dropped, never added to the whole part
    return "".join(kept)


def format_fixed(field: FixedPoint, text: str) -> str:
    """Render a number with a fixed number of fraction digits.

    The whole part is never truncated: if it is wider than the picture the
    fraction gives up its space, and beyond that the field overflows.
    """
    # a one-character value (a bare digit) is not rounded and prints left-justified
    if len(text) == 1:
        return text.ljust(field.width)
    parts = text.split(RADIX)
    whole = parts[0]
    fraction = parts[1] if len(parts) > 1 else ""
    space_left = field.frac_width + int(field.has_radix)
    if len(whole) > field.whole_width:
        space_left = field.width - len(whole)
    result = whole
    if space_left > 0:
        result += RADIX
        space_left -= 1
    if space_left > 0:
        result += _round_fraction(fraction, field.frac_width, space_left)
    return result.rjust(field.width)


def format_scientific(field: Scientific, text: str) -> str:
    if not text.strip():
        return " " * field.width
    try:
        number = float(text)
    except ValueError:
        logger.warning("cannot format %r as %s, leaving it blank", text, field.source)
        return " " * field.width
    return f"%{field.width}.{field.precision}{field.notation}" % number


def _number_text(value: Any) -> str:
    text = stringify(value)
    if isinstance(value, float) and "e" in text.lower():
        try:
            return format(Decimal(text), "f")
        except InvalidOperation:
            return text
    return text


def format_field(
    field: Field,
    value: Any,
    *,
    name: str | None = None,
    resolver: VariableResolver | None = None,
    page_number: int = 1,
) -> str:
    """Format one value for ``field``.

    Chomp justify fields write the unprinted remainder back to ``resolver``
    under ``name``.
    """
    if isinstance(field, PageNumber):
        return justify(str(page_number), "center", field.width)
    if isinstance(field, FixedPoint):
        return format_fixed(field, _number_text(value))
    if isinstance(field, Scientific):
        return format_scientific(field, stringify(value))
    text = stringify(value)
    if field.chomp and resolver is not None and name is not None:
        text, rest = chomp(text, field.width)
        resolver.set(name, rest)
    else:
        text = text[: field.width]
    return justify(text, field.align, field.width)
