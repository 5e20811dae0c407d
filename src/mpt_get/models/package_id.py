"""
Package identifiers.

A package is addressed as ``domain:name`` (e.g. ``net.mamoe:mirai-console``).
The domain's dot-separated segments double as the directory layout used by
both the index tree and the artifact repository.
"""

import re
from dataclasses import dataclass
from pathlib import Path

from mpt_get.core.errors import ParseError

PACKAGE_ID_PATTERN = re.compile(r"([\w.\-]+):([\w.\-]+)", re.ASCII)
_SEGMENT_PATTERN = re.compile(r"[\w.\-]+", re.ASCII)

PACKAGE_FILE = "package.json"


@dataclass(frozen=True)
class PackageID:
    """Validated ``domain:name`` pair, hashable by value."""

    domain: str
    name: str

    def __post_init__(self):
        for value in (self.domain, self.name):
            if not isinstance(value, str) or not _SEGMENT_PATTERN.fullmatch(value):
                raise ParseError("invalid pid")

    @classmethod
    def parse(cls, text: str) -> "PackageID":
        """Parse ``domain:name``; raises ParseError("invalid pid") otherwise."""
        match = PACKAGE_ID_PATTERN.fullmatch(text) if isinstance(text, str) else None
        if not match:
            raise ParseError("invalid pid")
        return cls(domain=match.group(1), name=match.group(2))

    def __str__(self) -> str:
        return f"{self.domain}:{self.name}"

    def path_segment(self) -> str:
        """
        Relative path of the package, '/'-separated.

        'net.mamoe:mirai-console' -> 'net/mamoe/mirai-console'
        """
        return "/".join([*self.domain.split("."), self.name])

    def relative_path(self) -> Path:
        """Same as ``path_segment`` but as a filesystem path."""
        return Path(*self.domain.split("."), self.name)

    def resolve_package_path(self, index_root: Path) -> Path:
        """Location of this package's ``package.json`` under an index root."""
        return Path(index_root) / self.relative_path() / PACKAGE_FILE
