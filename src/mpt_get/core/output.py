"""
User-facing output sinks.

Components that talk to the user take an ``OutputSink`` instead of writing
to stdout directly, so tests can capture what would have been printed.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from rich.console import Console


@runtime_checkable
class OutputSink(Protocol):
    """Pair of consoles: one for regular output, one for errors."""

    def info(self) -> Console:
        ...

    def err(self) -> Console:
        ...


class ConsoleSink:
    """OutputSink backed by rich consoles (stdout/stderr unless given)."""

    def __init__(self, out: Console | None = None, err: Console | None = None):
        self._out = out or Console(highlight=False, soft_wrap=True)
        self._err = err or Console(stderr=True, highlight=False, soft_wrap=True)

    def info(self) -> Console:
        return self._out

    def err(self) -> Console:
        return self._err
