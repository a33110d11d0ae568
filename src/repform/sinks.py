"""Line sinks that rendered output is written to."""

from __future__ import annotations

import sys
from typing import Protocol, TextIO


class Sink(Protocol):
    def write_line(self, text: str) -> None: ...


class ListSink:
    def __init__(self) -> None:
        self.lines: list[str] = []

    def write_line(self, text: str) -> None:
        self.lines.append(text)

    def text(self) -> str:
        return "".join(line + "\n" for line in self.lines)


class StreamSink:
    def __init__(self, stream: TextIO | None = None) -> None:
        self.stream = stream or sys.stdout
        self.count = 0

    def write_line(self, text: str) -> None:
        self.stream.write(text + "\n")
        self.count += 1
