"""
Rich observer: renders the download with a rich progress bar.
"""

from rich.console import Console
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    TextColumn,
    TimeRemainingColumn,
    TransferSpeedColumn,
)

from mpt_get.observers.base import check_progress


class RichProgressObserver:
    """
    Drives a ``rich.progress.Progress`` from observer callbacks.

    The bar tracks bytes; the discrete progress value is only validated.
    """

    def __init__(self, console: Console | None = None, description: str = "Downloading"):
        self.console = console
        self.description = description
        self.progress: Progress | None = None
        self.task_id = None

    def ready(self) -> None:
        self.progress = Progress(
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            DownloadColumn(),
            TransferSpeedColumn(),
            TimeRemainingColumn(),
            console=self.console,
        )
        self.progress.start()
        self.task_id = self.progress.add_task(
            f"[green]{self.description}[/green]", total=None
        )

    def update(self, progress: int, sizes: tuple[int, int]) -> None:
        check_progress(progress)
        if self.progress is None:
            return
        received, total = sizes
        self.progress.update(self.task_id, completed=received, total=total or None)

    def finish(self) -> None:
        if self.progress is not None:
            self.progress.stop()
            self.progress = None
