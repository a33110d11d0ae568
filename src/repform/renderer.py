"""Drive compiled forms against resolvers, paginating into a line sink.

Each ``render`` call prints one record. Its lines are buffered until the
whole record is composed so the renderer knows whether it fits on the page
next to the bottom band:

- it fits: the lines are written
- it does not fit and nothing has been printed on the page yet: as much as
  fits is written, the page is closed and the rest continues on the next
  page (a record longer than a page must still come out)
- otherwise the record is rolled back, the page is closed with its bottom
  and the record is composed again on a fresh page
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator, Mapping
from typing import Any

from repform.form import BandSpec, Form
from repform.formatters import format_field
from repform.pagination import (
    DEFAULT_PAGE_LENGTH,
    PageState,
    PaginationContext,
    PaginationEngine,
)
from repform.picture.compiler import PictureLine, Spec
from repform.picture.fields import Literal
from repform.resolver import JournalingResolver, MappingResolver, VariableResolver, stringify
from repform.sinks import Sink

logger = logging.getLogger(__name__)

FORM_FEED = "\f"


class Renderer:
    def __init__(
        self,
        page_length: int = DEFAULT_PAGE_LENGTH,
        form_feed: bool = True,
        context: PaginationContext | None = None,
    ) -> None:
        self.context = context or PaginationContext(page_length=page_length)
        self.engine = PaginationEngine(self.context)
        self.form_feed = form_feed
        self.lines_written = 0

    # -- construction -----------------------------------------------------

    def compile(self, spec_per_band: Mapping[str, BandSpec] | Spec) -> Form:
        """Compile a band mapping (or a single body spec) into a form bound to this renderer."""
        if isinstance(spec_per_band, Mapping):
            return Form.from_bands(spec_per_band, context=self.context)
        return Form(spec_per_band, context=self.context)

    def _attach(self, form: Form) -> None:
        if form.context is not self.context:
            form.bind_context(self.context)

    # -- page controls ----------------------------------------------------

    def set_page_length(self, page_length: int) -> None:
        self.context.set_page_length(page_length)

    def reset_page(self) -> None:
        self.context.reset_page()

    def reset_page_number(self) -> None:
        self.context.reset_page_number()

    def reset(self) -> None:
        self.context.reset()
        self.engine.transition(PageState.AWAITING_TOP)

    def set_lines_left(self, lines_left: int) -> None:
        self.context.lines_left = lines_left

    def add_to_line_count(self, delta: int) -> None:
        """Adjust the line count for output written to the sink by other means."""
        self.context.lines_left += delta

    def current_page_number(self) -> int:
        return self.context.tentative_page_number

    # -- composing lines --------------------------------------------------

    def compose_line(self, line: PictureLine, resolver: VariableResolver) -> str | None:
        """Compose one picture line; None when the line is suppressed."""
        suppress = line.suppress_if_blank
        names = iter([name for _field, name in line.bindings()])
        parts: list[str] = []
        for segment in line.segments:
            if isinstance(segment, Literal):
                parts.append(segment.text)
                continue
            name = next(names)
            value = resolver.get(name)
            if stringify(value) != "":
                suppress = False
            parts.append(
                format_field(
                    segment,
                    value,
                    name=name,
                    resolver=resolver,
                    page_number=self.context.page_number,
                )
            )
        if suppress:
            return None
        return "".join(parts).rstrip()

    def _iter_lines(
        self,
        form: Form,
        resolver: VariableResolver,
        before_line: Callable[[], None] | None = None,
    ) -> Iterator[str]:
        for line in form.lines:
            while True:
                if before_line is not None:
                    before_line()
                before = [stringify(resolver.get(n)) for n in line.variables]
                text = self.compose_line(line, resolver)
                if text is None:
                    break
                yield text
                if not line.repeat_until_blank:
                    break
                if [stringify(resolver.get(n)) for n in line.variables] == before:
                    logger.warning("repeat line %r made no progress, stopping", line.source)
                    break

    # -- writing ----------------------------------------------------------

    def _write(self, text: str, sink: Sink) -> None:
        if self.context.form_feed_pending:
            text = FORM_FEED + text
            self.context.form_feed_pending = False
        sink.write_line(text)
        self.lines_written += 1

    def _write_body(self, lines: list[str], sink: Sink) -> None:
        for text in lines:
            self._write(text, sink)
        self.engine.consume(len(lines), body=True)

    def _emit_band(self, band: Form, resolver: VariableResolver, sink: Sink) -> int:
        count = 0
        for text in self._iter_lines(band, resolver):
            self._write(text, sink)
            self.engine.consume(1)
            count += 1
        return count

    # -- page bands -------------------------------------------------------

    def _print_top(self, form: Form, resolver: VariableResolver, sink: Sink) -> None:
        if self.context.bottom_pending:
            self._end_page(form, resolver, sink)
        if not self.engine.begin_page():
            return
        top = form.top
        if top is None:
            return
        self._emit_band(top, resolver, sink)
        header = form.group_header
        if header is not None and top.size + header.size + self.context.lines_left != (
            self.context.page_length
        ):
            self._emit_band(header, resolver, sink)

    def _end_page(
        self,
        form: Form,
        resolver: VariableResolver,
        sink: Sink,
        form_feed: bool | None = None,
    ) -> None:
        self.engine.request_bottom()
        bottom = form.bottom
        printed = self._emit_band(bottom, resolver, sink) if bottom is not None else 0
        self.engine.end_page(
            self.form_feed if form_feed is None else form_feed, bottom_printed=printed > 0
        )

    def _end_page_if_full(self, form: Form, resolver: VariableResolver, sink: Sink) -> None:
        """Close a page that has no room left.

        With a bottom band the bottom stays pending until the next band or
        record (or ``finish_page``) prints it, so ``current_page_number``
        already reports the following page in between.
        """
        if not self.engine.page_full(form.band_size("bottom")):
            return
        if form.bottom is None:
            self._end_page(form, resolver, sink)
        else:
            self.engine.request_bottom()

    # -- records ----------------------------------------------------------

    def render(self, form: Form, resolver: VariableResolver, sink: Sink) -> int:
        """Print one record of ``form``; returns the number of lines written."""
        self._attach(form)
        start = self.lines_written
        bottom_size = form.band_size("bottom")
        journal = JournalingResolver(resolver)
        while True:
            self._print_top(form, journal, sink)
            buffer: list[str] = []

            def split_full_page() -> None:
                if not buffer:
                    return
                self._print_top(form, journal, sink)
                if self.engine.fills_fresh_page(len(buffer), bottom_size):
                    self._flush_partial(form, journal, sink, buffer, bottom_size)

            for text in self._iter_lines(form, journal, before_line=split_full_page):
                buffer.append(text)

            if not buffer and self.context.print_top_pending:
                break  # the record ended exactly at a page break
            self._print_top(form, journal, sink)
            if self.engine.fits(len(buffer), bottom_size):
                self._write_body(buffer, sink)
                break
            if not self.context.printed_body_this_page:
                while buffer and not self.engine.fits(len(buffer), bottom_size):
                    self._flush_partial(form, journal, sink, buffer, bottom_size)
                    if buffer:
                        self._print_top(form, journal, sink)
                self._write_body(buffer, sink)
                break
            logger.debug(
                "record of %d line(s) does not fit in %d line(s), deferring to page %d",
                len(buffer),
                self.context.lines_left,
                self.context.page_number + 1,
            )
            journal.rollback()
            self._end_page(form, journal, sink)
        journal.commit()
        if not self.context.print_top_pending:
            self.engine.transition(PageState.BODY)
        self._end_page_if_full(form, resolver, sink)
        return self.lines_written - start

    def _flush_partial(
        self,
        form: Form,
        resolver: JournalingResolver,
        sink: Sink,
        buffer: list[str],
        bottom_size: int,
    ) -> None:
        self.engine.transition(PageState.PARTIAL_FLUSH)
        take = self.engine.capacity(bottom_size)
        self._write_body(buffer[:take], sink)
        del buffer[:take]
        resolver.commit()
        self._end_page(form, resolver, sink)

    # -- groups and summary -----------------------------------------------

    def _make_room(self, form: Form, band: Form, resolver: VariableResolver, sink: Sink) -> None:
        self._print_top(form, resolver, sink)
        if band.size > self.context.lines_left:
            self.skip_page(form, resolver, sink)
            self._print_top(form, resolver, sink)

    def render_group_header(self, form: Form, resolver: VariableResolver, sink: Sink) -> int:
        header = form.group_header
        if header is None:
            return 0
        self._attach(form)
        start = self.lines_written
        self._make_room(form, header, resolver, sink)
        # the top already printed the header on a page that has nothing else yet
        if form.band_size("top") + header.size + self.context.lines_left != self.context.page_length:
            self._emit_band(header, resolver, sink)
        self._end_page_if_full(form, resolver, sink)
        return self.lines_written - start

    def _render_band(
        self, form: Form, band: Form | None, resolver: VariableResolver, sink: Sink
    ) -> int:
        if band is None:
            return 0
        self._attach(form)
        start = self.lines_written
        self._make_room(form, band, resolver, sink)
        self._emit_band(band, resolver, sink)
        self._end_page_if_full(form, resolver, sink)
        return self.lines_written - start

    def render_group_detail(self, form: Form, resolver: VariableResolver, sink: Sink) -> int:
        return self._render_band(form, form.group_detail, resolver, sink)

    def render_group_footer(self, form: Form, resolver: VariableResolver, sink: Sink) -> int:
        return self._render_band(form, form.group_footer, resolver, sink)

    def render_group(self, form: Form, resolver: VariableResolver, sink: Sink) -> int:
        return (
            self.render_group_header(form, resolver, sink)
            + self.render_group_detail(form, resolver, sink)
            + self.render_group_footer(form, resolver, sink)
        )

    def render_summary(self, form: Form, resolver: VariableResolver, sink: Sink) -> int:
        """Print the summary band once; later calls do nothing until ``reset``."""
        if form.summary is None or not self.context.summary_pending:
            return 0
        self.context.summary_pending = False
        return self._render_band(form, form.summary, resolver, sink)

    # -- finishing pages --------------------------------------------------

    def finish_page(
        self,
        form: Form,
        resolver: VariableResolver,
        sink: Sink,
        with_form_feed: bool = False,
    ) -> int:
        """Pad the open page with blank lines and print its bottom.

        With ``with_form_feed`` the next page starts with a form feed.
        Does nothing when no page is open.
        """
        self._attach(form)
        if self.context.print_top_pending:
            return 0
        start = self.lines_written
        blanks = self.context.lines_left - form.band_size("bottom")
        for _ in range(max(blanks, 0)):
            self._write("", sink)
        self.engine.consume(max(blanks, 0))
        self._end_page(form, resolver, sink, form_feed=with_form_feed)
        return self.lines_written - start

    def skip_page(self, form: Form, resolver: VariableResolver, sink: Sink) -> int:
        return self.finish_page(form, resolver, sink, with_form_feed=self.form_feed)

    def render_all(
        self,
        form: Form,
        records: Iterable[Mapping[str, Any] | VariableResolver],
        sink: Sink,
        finish: bool = True,
    ) -> int:
        """Render a sequence of records, then the summary and the final bottom."""
        total = 0
        resolver: VariableResolver = MappingResolver()
        for record in records:
            resolver = MappingResolver(dict(record)) if isinstance(record, Mapping) else record
            total += self.render(form, resolver, sink)
        total += self.render_summary(form, resolver, sink)
        if finish:
            total += self.finish_page(form, resolver, sink, with_form_feed=False)
        return total
