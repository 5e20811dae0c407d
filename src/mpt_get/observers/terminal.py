"""
Terminal observer: a plain ANSI progress bar redrawn in place.

Output looks like::

    1024/4096 [>>>>><<<<<<<<<<<<<<<]
"""

import sys
from typing import TextIO

from mpt_get.observers.base import PROGRESS_STEPS, check_progress

SAVE_CURSOR = "\x1b[s"
RESTORE_CURSOR = "\x1b[u"
ERASE_LINE = "\x1b[2K"


def make_download_str(progress: int, sizes: tuple[int, int]) -> str:
    check_progress(progress)
    done = ">" * progress
    pending = "<" * (PROGRESS_STEPS - progress)
    return f"{sizes[0]}/{sizes[1]} [{done}{pending}]"


class TerminalProgressObserver:
    """Saves the cursor on ``ready`` and redraws the bar there on each update."""

    def __init__(self, stream: TextIO | None = None):
        self.stream = stream

    def _write(self, text: str) -> None:
        stream = self.stream or sys.stdout
        stream.write(text)
        stream.flush()

    def ready(self) -> None:
        self._write(SAVE_CURSOR)

    def update(self, progress: int, sizes: tuple[int, int]) -> None:
        line = make_download_str(progress, sizes)
        self._write(RESTORE_CURSOR + ERASE_LINE + line)

    def finish(self) -> None:
        self._write("\n")
