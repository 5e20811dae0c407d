"""
Index synchronization.

Keeps a local git working copy of the package index in step with a mirror
repository. A missing working copy is cloned; an existing one is fetched and
hard-reset to the remote tip, discarding any local edits.

git is driven through its command line, one subprocess per step.
"""

import logging
import subprocess
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from mpt_get.core.errors import IndexSyncError
from mpt_get.core.output import ConsoleSink, OutputSink
from mpt_get.models.package import PACKAGES_FILE, Packages

logger = logging.getLogger(__name__)

DEFAULT_MIRROR_URL = "https://gitee.com/peratx/mirai-repo.git"
DEFAULT_BRANCH = "master"

# The ref requested from the remote on every fetch
FETCH_REF = "master"
REMOTE_NAME = "origin"


class SyncState(Enum):
    """Where an Updater is in its synchronization state machine."""

    ABSENT = "absent"
    CLONING = "cloning"
    PRESENT = "present"
    FETCHING = "fetching"
    RESETTING = "resetting"
    SYNCED = "synced"


@dataclass(frozen=True)
class MirrorRepo:
    """Remote git source of the index."""

    url: str = DEFAULT_MIRROR_URL
    branch: str = DEFAULT_BRANCH


class Updater:
    """
    Owns the index working copy at ``index_dir``.

    Nothing else writes into that directory; ``index()`` re-reads
    ``packages.json`` from it on every call.
    """

    def __init__(
        self,
        repo: MirrorRepo,
        index_dir: Path,
        sink: OutputSink | None = None,
        proxy: str | None = None,
        timeout: float | None = None,
        git: str = "git",
    ):
        self.repo = repo
        self.dir = Path(index_dir)
        self.sink = sink or ConsoleSink()
        self.proxy = proxy
        self.timeout = timeout
        self.git = git
        self.state = SyncState.PRESENT if self.dir.exists() else SyncState.ABSENT

    def index_dir(self) -> Path:
        return self.dir

    # ──────────────────────────────────────────────
    # git plumbing
    # ──────────────────────────────────────────────

    def _git(self, *args: str, cwd: Path | None = None, what: str) -> str:
        """Run one git command and return its stdout; raise IndexSyncError on failure."""
        cmd = [self.git]
        if self.proxy:
            cmd += ["-c", f"http.proxy={self.proxy}"]
        cmd += list(args)

        logger.debug(f"Running {' '.join(cmd)}")
        try:
            proc = subprocess.run(
                cmd,
                cwd=str(cwd) if cwd else None,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise IndexSyncError(f'failed to execute command "{self.git}"') from e
        except subprocess.TimeoutExpired as e:
            raise IndexSyncError(f"{what}: timed out after {self.timeout}s") from e
        except OSError as e:
            raise IndexSyncError(f"{what}: {e}") from e

        if proc.returncode != 0:
            detail = proc.stderr.strip() or proc.stdout.strip()
            raise IndexSyncError(f"{what}: {detail}" if detail else what)

        return proc.stdout.strip()

    # ──────────────────────────────────────────────
    # Synchronization
    # ──────────────────────────────────────────────

    def update(self) -> None:
        """
        Bring the working copy to the mirror's tip.

        Absent -> Cloning -> Synced, or Present -> Fetching -> Resetting -> Synced.
        Any failing step raises IndexSyncError and leaves the directory as it is.
        """
        if self.dir.exists():
            self.state = SyncState.PRESENT
            self._fetch_and_reset()
        else:
            self.state = SyncState.ABSENT
            self._clone()

        self.state = SyncState.SYNCED
        logger.info(f"Index at {self.dir} is up to date with {self.repo.url}")

    def _clone(self) -> None:
        self.sink.info().print("Index folder not found.", markup=False)
        self.state = SyncState.CLONING

        logger.info(f"Cloning {self.repo.url} into {self.dir}")
        self.dir.parent.mkdir(parents=True, exist_ok=True)
        self._git("clone", self.repo.url, str(self.dir), what=f"failed to clone {self.repo.url}")

    def _fetch_and_reset(self) -> None:
        not_a_repo = f"{self.dir} is not a git repository"
        toplevel = self._git("rev-parse", "--show-toplevel", cwd=self.dir, what=not_a_repo)
        # git searches parent directories; only a repository rooted at dir is ours
        if Path(toplevel).resolve() != self.dir.resolve():
            raise IndexSyncError(f"{not_a_repo} (inside {toplevel})")

        self._git(
            "remote", "get-url", REMOTE_NAME,
            cwd=self.dir,
            what=f"remote {REMOTE_NAME!r} not found",
        )

        if self.repo.branch != FETCH_REF:
            logger.warning(
                f"Fetching {FETCH_REF!r} but resetting to {REMOTE_NAME}/{self.repo.branch}; "
                f"the configured branch is not fetched"
            )

        self.state = SyncState.FETCHING
        logger.info(f"Fetching {FETCH_REF} from {REMOTE_NAME}")
        self._git(
            "fetch", REMOTE_NAME, FETCH_REF,
            cwd=self.dir,
            what=f"failed to fetch {FETCH_REF} from {REMOTE_NAME}",
        )

        ref = f"refs/remotes/{REMOTE_NAME}/{self.repo.branch}"
        commit = self._git(
            "rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}",
            cwd=self.dir,
            what=f"failed to resolve {ref}",
        )

        self.state = SyncState.RESETTING
        logger.info(f"Resetting working copy to {commit[:12]}")
        self._git("reset", "--hard", commit, cwd=self.dir, what=f"failed to reset to {commit}")

    # ──────────────────────────────────────────────
    # Index access
    # ──────────────────────────────────────────────

    def index(self) -> Packages:
        """Parse ``packages.json`` from the working copy as it is on disk now."""
        return Packages.from_file(self.dir / PACKAGES_FILE)
