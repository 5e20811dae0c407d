"""
Index document models.

``packages.json`` lists every package in the index; each package then has its
own ``<domain path>/<name>/package.json`` holding the published versions per
release channel.

Parsing is strict at the document level and lenient at the element level:
a malformed root or a missing ``channels`` field fails the whole parse, while
a single malformed entry, channel or version is dropped and its reason kept
in ``skipped``.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterator, NamedTuple

from mpt_get.core.errors import EntryParseError, ParseError, StorageError
from mpt_get.models.package_id import PACKAGE_FILE, PackageID

logger = logging.getLogger(__name__)

PACKAGES_FILE = "packages.json"

# Walked in order by PackageVersion.best_version()
CHANNEL_PRIORITY = ("stable", "nightly", "beta")

_INDENT = "    "


def load_document(path: Path) -> Any:
    """Read and decode a JSON document from disk."""
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise ParseError(f"failed to parse {path.name}: {e}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise StorageError(f"cannot open {path.name}: {e}") from e


def _document_error(filename: str, reason: str = "") -> ParseError:
    if reason:
        return ParseError(f"failed to parse {filename}: {reason}")
    return ParseError(f"failed to parse {filename}")


@dataclass
class PackageEntry:
    """Descriptive metadata for one package in ``packages.json``."""

    name: str
    description: str
    channels: list[str]
    website: str

    @classmethod
    def from_dict(cls, data: Any) -> "PackageEntry":
        """Build an entry; raises EntryParseError on a missing or mistyped field."""
        if not isinstance(data, dict):
            raise EntryParseError("entry is not an object")

        values = {}
        for key in ("name", "description", "website"):
            value = data.get(key)
            if not isinstance(value, str):
                raise EntryParseError(f"field {key!r} must be a string")
            values[key] = value

        channels = data.get("channels")
        if not isinstance(channels, list) or not all(isinstance(c, str) for c in channels):
            raise EntryParseError("field 'channels' must be a list of strings")

        return cls(channels=list(channels), **values)

    def pretty_print(self) -> str:
        return (
            f"name: {self.name}\n"
            f"description: {self.description}\n"
            f"channels: {json.dumps(self.channels, ensure_ascii=False)}\n"
            f"website: {self.website}"
        )


@dataclass
class Packages:
    """Parsed ``packages.json``: PackageID -> PackageEntry."""

    entries: dict[PackageID, PackageEntry] = field(default_factory=dict)
    skipped: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, document: Any) -> "Packages":
        if not isinstance(document, dict):
            raise _document_error(PACKAGES_FILE)

        packages = cls()
        for key, value in document.items():
            try:
                package_id = PackageID.parse(key)
                entry = PackageEntry.from_dict(value)
            except ParseError as e:
                packages.skipped.append(f"{key}: {e.message}")
                logger.debug(f"Skipping index entry {key!r}: {e.message}")
                continue
            packages.entries[package_id] = entry

        return packages

    @classmethod
    def from_file(cls, path: Path) -> "Packages":
        return cls.from_dict(load_document(path))

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[PackageID]:
        return iter(self.entries)

    def __contains__(self, package_id: object) -> bool:
        return package_id in self.entries

    def __getitem__(self, package_id: PackageID) -> PackageEntry:
        return self.entries[package_id]

    def get(self, package_id: PackageID) -> PackageEntry | None:
        return self.entries.get(package_id)

    def items(self):
        return self.entries.items()

    def pretty_print(self) -> str:
        """Render every entry as ``<id>:`` followed by its indented fields."""
        out = []
        for package_id, entry in self.entries.items():
            indented = entry.pretty_print().replace("\n", "\n" + _INDENT)
            out.append(f"{package_id}:\n{_INDENT}{indented}\n\n")
        return "".join(out)


class ResolvedVersion(NamedTuple):
    """A version picked by channel priority, with the channel it came from."""

    channel: str
    version: str


@dataclass
class PackageVersion:
    """Parsed per-package ``package.json``: channel -> versions in source order."""

    channels: dict[str, list[str]] = field(default_factory=dict)
    skipped: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, document: Any) -> "PackageVersion":
        if not isinstance(document, dict):
            raise _document_error(PACKAGE_FILE)
        if "channels" not in document:
            raise _document_error(PACKAGE_FILE, 'missing "channels" field')

        channels = document["channels"]
        if not isinstance(channels, dict):
            raise _document_error(PACKAGE_FILE, 'expected "channels" is an object')

        result = cls()
        for channel, versions in channels.items():
            if not isinstance(versions, list):
                result.skipped.append(f"{channel}: not a list of versions")
                continue

            kept = []
            for version in versions:
                if isinstance(version, str):
                    kept.append(version)
                else:
                    result.skipped.append(f"{channel}: non-string version {version!r}")
            result.channels[channel] = kept

        for reason in result.skipped:
            logger.debug(f"Dropped from {PACKAGE_FILE}: {reason}")

        return result

    @classmethod
    def from_package_id(cls, package_id: PackageID, index_root: Path) -> "PackageVersion":
        """Load the ``package.json`` of a package from an index working copy."""
        return cls.from_dict(load_document(package_id.resolve_package_path(index_root)))

    def versions(self, channel: str) -> list[str]:
        return self.channels.get(channel, [])

    def has_version(self, version: str) -> bool:
        return any(version in versions for versions in self.channels.values())

    def best_version(self) -> ResolvedVersion | None:
        """
        Pick a version by channel priority.

        The first channel of CHANNEL_PRIORITY that has at least one version
        wins, and its last listed version is returned. None means no channel
        in the priority list can supply a version.
        """
        for channel in CHANNEL_PRIORITY:
            versions = self.channels.get(channel)
            if versions:
                return ResolvedVersion(channel, versions[-1])
        return None

    def pretty_print(self) -> str:
        """Every channel and its versions, in stored order."""
        lines = []
        for channel, versions in self.channels.items():
            lines.append(f"{channel}:")
            lines.extend(f"{_INDENT}{version}" for version in versions)
        return "\n".join(lines)
