"""Shared page state and the decisions made on it.

One ``PaginationContext`` is shared by a form and every band composed into
it, so tops, bottoms and bodies all count against the same page.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)

DEFAULT_PAGE_LENGTH = 60


class PageState(str, Enum):
    AWAITING_TOP = "awaiting_top"
    BODY = "body"
    PARTIAL_FLUSH = "partial_flush"
    AWAITING_BOTTOM = "awaiting_bottom"
    PAGE_BREAK = "page_break"


@dataclass
class PaginationContext:
    page_length: int = DEFAULT_PAGE_LENGTH
    lines_left: int | None = None
    page_number: int = 1
    print_top_pending: bool = True
    printed_body_this_page: bool = False
    bottom_pending: bool = False
    summary_pending: bool = True
    form_feed_pending: bool = False

    def __post_init__(self) -> None:
        if self.lines_left is None:
            self.lines_left = self.page_length

    def reset_page(self) -> None:
        self.lines_left = self.page_length

    def reset_page_number(self) -> None:
        self.page_number = 1

    def set_page_length(self, page_length: int) -> None:
        self.page_length = page_length
        self.reset_page()

    def reset(self) -> None:
        self.reset_page_number()
        self.reset_page()
        self.print_top_pending = True
        self.printed_body_this_page = False
        self.bottom_pending = False
        self.summary_pending = True
        self.form_feed_pending = False

    @property
    def fresh_page(self) -> bool:
        return self.lines_left == self.page_length

    @property
    def tentative_page_number(self) -> int:
        """The page number, counting a page whose bottom is due as finished."""
        return self.page_number + 1 if self.bottom_pending else self.page_number


class PaginationEngine:
    """Decides when buffered lines fit and when a page has to break."""

    def __init__(self, context: PaginationContext) -> None:
        self.context = context
        self.state = PageState.AWAITING_TOP

    def transition(self, state: PageState) -> None:
        if state is not self.state:
            logger.debug(
                "page %d: %s -> %s (%s lines left)",
                self.context.page_number,
                self.state.value,
                state.value,
                self.context.lines_left,
            )
        self.state = state

    def fits(self, buffered: int, bottom_size: int) -> bool:
        return buffered + bottom_size <= self.context.lines_left

    def fills_fresh_page(self, buffered: int, bottom_size: int) -> bool:
        """A record on an untouched page has used all the room it will get."""
        ctx = self.context
        return (
            buffered > 0
            and not ctx.printed_body_this_page
            and buffered + bottom_size >= ctx.lines_left
        )

    def capacity(self, bottom_size: int) -> int:
        # always make progress, even when top and bottom leave no room
        return max(self.context.lines_left - bottom_size, 1)

    def page_full(self, bottom_size: int) -> bool:
        ctx = self.context
        return not ctx.print_top_pending and ctx.lines_left <= bottom_size

    def consume(self, count: int, body: bool = False) -> None:
        self.context.lines_left -= count
        if body and count:
            self.context.printed_body_this_page = True

    def begin_page(self) -> bool:
        """Start a page if one is owed; returns True when a top should print."""
        ctx = self.context
        if not ctx.print_top_pending:
            return False
        ctx.print_top_pending = False
        ctx.printed_body_this_page = False
        self.transition(PageState.BODY)
        return ctx.fresh_page

    def request_bottom(self) -> None:
        self.context.bottom_pending = True
        self.transition(PageState.AWAITING_BOTTOM)

    def end_page(self, form_feed: bool, bottom_printed: bool) -> None:
        """Close the page; the page number only advances past a printed bottom."""
        ctx = self.context
        self.transition(PageState.PAGE_BREAK)
        ctx.lines_left = ctx.page_length
        if bottom_printed:
            ctx.page_number += 1
        ctx.print_top_pending = True
        ctx.printed_body_this_page = False
        ctx.bottom_pending = False
        ctx.form_feed_pending = form_feed
        self.transition(PageState.AWAITING_TOP)
