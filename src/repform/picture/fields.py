"""Field descriptors for picture lines and the rule table that classifies them.

A field starts at an introducer (``@`` or ``^``) followed by a run of
picture characters. The run is classified with the first matching rule:

1. ``>+``                    right-justified text
2. ``|+``                    centered text
3. ``#*.?#*[eEgG]#+``        scientific notation
4. ``#+.?#*``                fixed-point number, integer-led
5. ``#*.#+``                 fixed-point number, fraction-led
6. ``<+``                    left-justified text
7. ``&+``                    page number

``^`` marks a chomp field: the printed prefix is removed from the backing
variable so a repeated line can print the rest.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal as TypingLiteral
from typing import Union

from repform.errors import MalformedFieldError

INTRODUCERS = "@^"
CHOMP_INTRODUCER = "^"
RADIX = "."

Align = TypingLiteral["left", "right", "center"]


@dataclass(frozen=True)
class Literal:
    text: str

    @property
    def width(self) -> int:
        return len(self.text)


@dataclass(frozen=True)
class Justify:
    align: Align
    width: int
    chomp: bool = False

    @property
    def source(self) -> str:
        mark = {"left": "<", "right": ">", "center": "|"}[self.align]
        return _introducer(self.chomp) + mark * (self.width - 1)


@dataclass(frozen=True)
class FixedPoint:
    whole_width: int  # includes the introducer
    frac_width: int
    has_radix: bool
    chomp: bool = False

    @property
    def width(self) -> int:
        return self.whole_width + int(self.has_radix) + self.frac_width

    @property
    def source(self) -> str:
        radix = RADIX if self.has_radix else ""
        return _introducer(self.chomp) + "#" * (self.whole_width - 1) + radix + "#" * self.frac_width


@dataclass(frozen=True)
class Scientific:
    whole_digits: int
    frac_digits: int
    has_radix: bool
    notation: str  # one of e, E, g, G
    exponent_digits: int
    chomp: bool = False

    @property
    def width(self) -> int:
        return 1 + self.whole_digits + int(self.has_radix) + self.frac_digits + 1 + self.exponent_digits

    @property
    def precision(self) -> int:
        # e/E: digits after the radix; g/G: significant figures, counting the introducer
        if self.notation in "eE":
            return self.frac_digits
        return 1 + self.whole_digits + self.frac_digits

    @property
    def source(self) -> str:
        radix = RADIX if self.has_radix else ""
        return (
            _introducer(self.chomp)
            + "#" * self.whole_digits
            + radix
            + "#" * self.frac_digits
            + self.notation
            + "#" * self.exponent_digits
        )


@dataclass(frozen=True)
class PageNumber:
    width: int
    chomp: bool = False

    @property
    def source(self) -> str:
        return _introducer(self.chomp) + "&" * (self.width - 1)


Field = Union[Justify, FixedPoint, Scientific, PageNumber]
FieldSpec = Union[Literal, Field]


def _introducer(chomp: bool) -> str:
    return CHOMP_INTRODUCER if chomp else "@"


def _right(match: re.Match[str], chomp: bool) -> Field:
    return Justify("right", 1 + len(match.group(0)), chomp)


def _center(match: re.Match[str], chomp: bool) -> Field:
    return Justify("center", 1 + len(match.group(0)), chomp)


def _left(match: re.Match[str], chomp: bool) -> Field:
    return Justify("left", 1 + len(match.group(0)), chomp)


def _scientific(match: re.Match[str], chomp: bool) -> Field:
    whole, radix, frac, notation, exponent = match.groups()
    return Scientific(len(whole), len(frac), bool(radix), notation, len(exponent), chomp)


def _fixed(match: re.Match[str], chomp: bool) -> Field:
    whole, radix, frac = match.groups()
    return FixedPoint(len(whole) + 1, len(frac), bool(radix), chomp)


def _page_number(match: re.Match[str], chomp: bool) -> Field:
    return PageNumber(1 + len(match.group(0)), chomp)


# Order is significant: scientific must be tried before the fixed-point rules.
FIELD_RULES = (
    (re.compile(r">+"), _right),
    (re.compile(r"\|+"), _center),
    (re.compile(r"(#*)(\.?)(#*)([eEgG])(#+)"), _scientific),
    (re.compile(r"(#+)(\.?)(#*)"), _fixed),
    (re.compile(r"(#*)(\.)(#+)"), _fixed),
    (re.compile(r"<+"), _left),
    (re.compile(r"&+"), _page_number),
)


def classify_field(introducer: str, tail: str) -> tuple[Field, int]:
    """Classify the picture text after an introducer.

    Returns the field and how many characters of ``tail`` it consumed.
    """
    chomp = introducer == CHOMP_INTRODUCER
    for pattern, build in FIELD_RULES:
        match = pattern.match(tail)
        if match:
            return build(match, chomp), match.end()
    raise MalformedFieldError(introducer + tail)


def is_numeric(field: FieldSpec) -> bool:
    return isinstance(field, (FixedPoint, Scientific))
