"""
mpt-get - package client for a git-hosted package index.

Synchronizes a local git mirror of the index, resolves package versions by
release channel and downloads release artifacts with progress feedback.
"""

__version__ = "0.1.0"


def __getattr__(name: str):
    """Lazy import for heavy dependencies."""
    if name == "Updater":
        from mpt_get.core.updater import Updater

        return Updater
    if name == "Downloader":
        from mpt_get.core.downloader import Downloader

        return Downloader
    if name == "PackageID":
        from mpt_get.models.package_id import PackageID

        return PackageID
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = ["Updater", "Downloader", "PackageID", "__version__"]
