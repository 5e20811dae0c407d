"""
ProgressObserver Protocol: interface for download progress renderers.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

# Upper bound of the discrete progress range
PROGRESS_STEPS = 20


def compute_progress(received: int, total: int | None, steps: int = PROGRESS_STEPS) -> int:
    """
    Map received bytes onto the discrete range ``0..steps``.

    Without a size hint the progress stays at zero. A received count larger
    than the hint yields a value above ``steps``; observers reject it.
    """
    if not total:
        return 0
    return received * steps // total


def check_progress(progress: int) -> None:
    """Reject progress values outside ``0..PROGRESS_STEPS``."""
    if not 0 <= progress <= PROGRESS_STEPS:
        raise AssertionError(
            f"progress {progress} outside of 0..{PROGRESS_STEPS}"
        )


@runtime_checkable
class ProgressObserver(Protocol):
    """
    Protocol that all progress renderers must implement.

    Hooks are called synchronously from the download loop.
    """

    def ready(self) -> None:
        """Called once before any bytes are transferred."""
        ...

    def update(self, progress: int, sizes: tuple[int, int]) -> None:
        """Called per received chunk with ``(received_bytes, total_bytes)``."""
        ...

    def finish(self) -> None:
        """Called once after the last chunk was written."""
        ...


class QuietObserver:
    """Renders nothing, but still enforces the progress bound."""

    def __init__(self):
        self.last: tuple[int, tuple[int, int]] | None = None

    def ready(self) -> None:
        pass

    def update(self, progress: int, sizes: tuple[int, int]) -> None:
        check_progress(progress)
        self.last = (progress, sizes)

    def finish(self) -> None:
        pass
