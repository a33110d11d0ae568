"""Forms: a compiled body plus the bands (top, bottom, groups, summary) around it."""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from enum import Enum
from typing import Union

from repform.errors import ConfigError
from repform.pagination import PaginationContext
from repform.picture.compiler import CompiledForm, PictureLine, Spec, compile_spec


class Band(str, Enum):
    TOP = "top"
    BOTTOM = "bottom"
    DETAIL = "detail"
    GROUP_HEADER = "group_header"
    GROUP_DETAIL = "group_detail"
    GROUP_FOOTER = "group_footer"
    SUMMARY = "summary"


BAND_ALIASES = {
    "page_header": Band.TOP,
    "page_footer": Band.BOTTOM,
    "page_detail": Band.DETAIL,
    "body": Band.DETAIL,
    "group_bottom": Band.GROUP_FOOTER,
}

BandSpec = Union["Form", str, Sequence[str]]


def parse_band(key: Band | str) -> Band:
    if isinstance(key, Band):
        return key
    normalized = str(key).strip().lower().replace("-", "_")
    if normalized in BAND_ALIASES:
        return BAND_ALIASES[normalized]
    try:
        return Band(normalized)
    except ValueError:
        raise ConfigError(f"undefined band {key!r}") from None


class Form:
    """A compiled picture spec that may own other forms as bands.

    All forms composed together share one ``PaginationContext``.
    """

    def __init__(self, spec: Spec, context: PaginationContext | None = None) -> None:
        self.compiled: CompiledForm = compile_spec(spec)
        self.context = context or PaginationContext()
        self.bands: dict[Band, Form] = {}
        self.owner: Form | None = None

    @classmethod
    def from_bands(
        cls, bands: Mapping[Band | str, BandSpec], context: PaginationContext | None = None
    ) -> Form:
        """Build a form from a band mapping.

        ``detail`` is the body. Without it, ``top`` is used as the body.
        """
        parsed = {parse_band(key): value for key, value in bands.items() if value is not None}
        body = parsed.pop(Band.DETAIL, None)
        if body is None:
            body = parsed.pop(Band.TOP, None)
        if body is None:
            raise ConfigError("a form needs at least a detail (or top) band")
        if isinstance(body, Form):
            raise ConfigError("the detail band must be a picture spec, not a Form")
        form = cls(body, context=context)
        for band, value in parsed.items():
            form.set_band(band, value)
        return form

    @property
    def lines(self) -> list[PictureLine]:
        return self.compiled.lines

    @property
    def size(self) -> int:
        return self.compiled.line_count

    def band(self, band: Band | str) -> Form | None:
        return self.bands.get(parse_band(band))

    @property
    def top(self) -> Form | None:
        return self.bands.get(Band.TOP)

    @property
    def bottom(self) -> Form | None:
        return self.bands.get(Band.BOTTOM)

    @property
    def group_header(self) -> Form | None:
        return self.bands.get(Band.GROUP_HEADER)

    @property
    def group_detail(self) -> Form | None:
        return self.bands.get(Band.GROUP_DETAIL)

    @property
    def group_footer(self) -> Form | None:
        return self.bands.get(Band.GROUP_FOOTER)

    @property
    def summary(self) -> Form | None:
        return self.bands.get(Band.SUMMARY)

    def band_size(self, band: Band | str) -> int:
        form = self.band(band)
        return form.size if form is not None else 0

    def set_band(self, band: Band | str, value: BandSpec) -> Form:
        band = parse_band(band)
        if band is Band.DETAIL:
            raise ConfigError("the detail band is the form itself")
        form = value if isinstance(value, Form) else Form(value)
        if form is self or self in form.walk():
            raise ConfigError(f"recursive format not allowed for band {band.value!r}")
        if form.owner is not None and form.owner is not self:
            raise ConfigError(f"band {band.value!r} already belongs to another form")
        previous = self.bands.get(band)
        if previous is not None:
            previous.owner = None
        form.owner = self
        form.bind_context(self.context)
        self.bands[band] = form
        return form

    def walk(self) -> Iterator[Form]:
        """Every band form reachable from this one, depth first."""
        for form in self.bands.values():
            yield form
            yield from form.walk()

    def bind_context(self, context: PaginationContext) -> None:
        self.context = context
        for form in self.bands.values():
            form.bind_context(context)
