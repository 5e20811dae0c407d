"""Download progress renderers."""

from mpt_get.observers.base import (
    PROGRESS_STEPS,
    ProgressObserver,
    QuietObserver,
    check_progress,
    compute_progress,
)
from mpt_get.observers.jsonl import JSONLinesObserver
from mpt_get.observers.rich_bar import RichProgressObserver
from mpt_get.observers.terminal import TerminalProgressObserver

OBSERVER_NAMES = ("rich", "plain", "json", "quiet")


def get_observer(name: str, console=None) -> ProgressObserver:
    """Factory function to create a progress observer by name."""
    match name:
        case "rich":
            return RichProgressObserver(console=console)
        case "plain":
            return TerminalProgressObserver(stream=console.file if console else None)
        case "json":
            return JSONLinesObserver(stream=console.file if console else None)
        case "quiet":
            return QuietObserver()
        case _:
            raise ValueError(
                f"Unknown progress renderer: {name!r}. Use 'rich', 'plain', 'json' or 'quiet'."
            )


__all__ = [
    "PROGRESS_STEPS",
    "ProgressObserver",
    "QuietObserver",
    "TerminalProgressObserver",
    "RichProgressObserver",
    "JSONLinesObserver",
    "check_progress",
    "compute_progress",
    "get_observer",
]
