"""
JSON Lines observer: machine-readable progress events.

Each event is one JSON object per line, e.g.::

    {"event": "progress", "progress": 5, "received": 1024, "total": 4096}
"""

import json
import sys
from typing import TextIO

from mpt_get.observers.base import PROGRESS_STEPS, check_progress


class JSONLinesObserver:
    """Writes ``ready``, ``progress`` and ``finish`` events as JSON lines."""

    def __init__(self, stream: TextIO | None = None):
        self.stream = stream

    def _emit(self, event: dict) -> None:
        stream = self.stream or sys.stdout
        stream.write(json.dumps(event) + "\n")
        stream.flush()

    def ready(self) -> None:
        self._emit({"event": "ready", "steps": PROGRESS_STEPS})

    def update(self, progress: int, sizes: tuple[int, int]) -> None:
        check_progress(progress)
        self._emit(
            {"event": "progress", "progress": progress, "received": sizes[0], "total": sizes[1]}
        )

    def finish(self) -> None:
        self._emit({"event": "finish"})
