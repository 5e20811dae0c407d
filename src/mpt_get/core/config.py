"""
Configuration loading.

Defaults are derived from the user's home directory once, at startup, and
can be overridden by a JSON file (``~/.mpt-get/config.json`` by default)::

    {
        "mirror_repo": "https://gitee.com/peratx/mirai-repo.git",
        "source_repo": "https://maven.aliyun.com/repository/public",
        "index_path": "~/.mpt-get/index",
        "package_path": "~/.mpt-get/packages",
        "proxy": null
    }
"""

import json
import logging
from dataclasses import dataclass, fields, replace
from pathlib import Path

from mpt_get.core.downloader import DEFAULT_SOURCE_URL, DEFAULT_SUFFIX, Downloader, SourceRepo
from mpt_get.core.errors import ConfigurationError
from mpt_get.core.output import OutputSink
from mpt_get.core.updater import DEFAULT_BRANCH, DEFAULT_MIRROR_URL, MirrorRepo, Updater
from mpt_get.observers.base import ProgressObserver

logger = logging.getLogger(__name__)

APP_DIR_NAME = ".mpt-get"
CONFIG_FILE = "config.json"

_PATH_KEYS = ("index_path", "package_path")
_FLOAT_KEYS = ("http_timeout", "git_timeout")


def app_dir(home: Path | None = None) -> Path:
    return (home or Path.home()) / APP_DIR_NAME


@dataclass(frozen=True)
class Config:
    mirror_repo: str
    source_repo: str
    index_path: Path
    package_path: Path
    mirror_branch: str = DEFAULT_BRANCH
    proxy: str | None = None
    http_timeout: float | None = 30.0
    git_timeout: float | None = 300.0
    artifact_suffix: str = DEFAULT_SUFFIX

    @classmethod
    def default(cls, home: Path | None = None) -> "Config":
        base = app_dir(home)
        return cls(
            mirror_repo=DEFAULT_MIRROR_URL,
            source_repo=DEFAULT_SOURCE_URL,
            index_path=base / "index",
            package_path=base / "packages",
        )

    def mirror(self) -> MirrorRepo:
        return MirrorRepo(url=self.mirror_repo, branch=self.mirror_branch)

    def source(self) -> SourceRepo:
        return SourceRepo(url=self.source_repo)

    def updater(self, sink: OutputSink | None = None) -> Updater:
        return Updater(
            self.mirror(),
            self.index_path,
            sink=sink,
            proxy=self.proxy,
            timeout=self.git_timeout,
        )

    def downloader(self, observer: ProgressObserver | None = None) -> Downloader:
        return Downloader(
            self.source(),
            self.package_path,
            observer=observer,
            timeout=self.http_timeout,
            proxy=self.proxy,
        )


def _coerce(key: str, value):
    if key in _PATH_KEYS:
        if not isinstance(value, str):
            raise ConfigurationError(f"{key!r} must be a path string")
        return Path(value).expanduser()

    if key in _FLOAT_KEYS:
        if value is None:
            return None
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
            raise ConfigurationError(f"{key!r} must be a positive number or null")
        return float(value)

    if key == "proxy":
        if value is not None and not isinstance(value, str):
            raise ConfigurationError("'proxy' must be a string or null")
        return value or None

    if not isinstance(value, str) or not value:
        raise ConfigurationError(f"{key!r} must be a non-empty string")
    return value


def load_config(path: Path | None = None, home: Path | None = None) -> Config:
    """
    Build the process configuration.

    Args:
        path: Config file to read. When omitted, ``~/.mpt-get/config.json``
            is used if it exists.
        home: Home directory override for computing defaults.

    Raises:
        ConfigurationError: If the file cannot be read, is not a JSON object,
            or contains unknown keys or badly typed values.
    """
    config = Config.default(home)

    explicit = path is not None
    path = Path(path) if explicit else app_dir(home) / CONFIG_FILE
    if not path.exists():
        if explicit:
            raise ConfigurationError(f"config file {path} not found")
        return config

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"failed to parse {path}: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"cannot read {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"{path} must contain a JSON object")

    known = {f.name for f in fields(Config)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigurationError(f"unknown keys in {path}: {', '.join(unknown)}")

    overrides = {key: _coerce(key, value) for key, value in data.items()}
    logger.debug(f"Loaded configuration from {path}: {sorted(overrides)}")
    return replace(config, **overrides)
