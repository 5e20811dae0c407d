"""Shared fixtures: a local git upstream standing in for the index mirror."""

import json
import shutil
import subprocess
from pathlib import Path

import pytest

GIT_IDENTITY = [
    "-c", "user.name=mpt-get tests",
    "-c", "user.email=tests@example.invalid",
    "-c", "commit.gpgsign=false",
]

PACKAGES = {
    "net.mamoe:mirai-console": {
        "name": "Mirai Console",
        "description": "Mirai Console backend",
        "channels": ["stable", "nightly", "beta"],
        "website": "https://github.com/mamoe/mirai-console",
    }
}

MIRAI_CONSOLE_VERSIONS = {"channels": {"stable": ["1.9.6", "1.9.7", "1.9.8"], "beta": ["2.0-RC"]}}


def git(*args, cwd: Path) -> str:
    proc = subprocess.run(
        ["git", *GIT_IDENTITY, *args],
        cwd=str(cwd),
        check=True,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
    )
    return proc.stdout.strip()


def write_index(root: Path, packages=None, versions=None) -> None:
    """Lay out packages.json plus one package.json under ``root``."""
    root.mkdir(parents=True, exist_ok=True)
    (root / "packages.json").write_text(json.dumps(packages or PACKAGES), encoding="utf-8")
    package_dir = root / "net" / "mamoe" / "mirai-console"
    package_dir.mkdir(parents=True, exist_ok=True)
    (package_dir / "package.json").write_text(
        json.dumps(versions or MIRAI_CONSOLE_VERSIONS), encoding="utf-8"
    )


requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")


class Upstream:
    """A non-bare repository on branch ``master`` used as the clone source."""

    def __init__(self, path: Path):
        self.path = path
        path.mkdir(parents=True)
        git("init", "-q", cwd=path)
        git("symbolic-ref", "HEAD", "refs/heads/master", cwd=path)
        write_index(path)
        self.commit("initial index")

    @property
    def url(self) -> str:
        return str(self.path)

    def commit(self, message: str) -> str:
        git("add", "-A", cwd=self.path)
        git("commit", "-q", "-m", message, cwd=self.path)
        return git("rev-parse", "HEAD", cwd=self.path)


@pytest.fixture
def index_dir(tmp_path):
    """An index working copy already on disk (no git involved)."""
    path = tmp_path / "index"
    write_index(path)
    return path


@pytest.fixture
def upstream(tmp_path):
    return Upstream(tmp_path / "upstream")
