"""Exceptions raised while compiling or rendering picture formats."""

from __future__ import annotations


class FormatError(ValueError):
    """Base class for fatal picture/format problems."""


class MalformedFieldError(FormatError):
    def __init__(self, fragment: str, line: str | None = None) -> None:
        self.fragment = fragment
        self.line = line
        message = f'Malformed format entry "{fragment}"'
        if line is not None:
            message += f" in picture line {line!r}"
        super().__init__(message)


class ArityMismatchError(FormatError):
    def __init__(self, expected: int, received: int, detail: str = "") -> None:
        self.expected = expected
        self.received = received
        message = f"Expected {expected} variable(s) but received {received}"
        if detail:
            message += f": {detail}"
        super().__init__(message)


class ConfigError(FormatError):
    """Bad band composition: recursion, unknown band keys, missing body."""
