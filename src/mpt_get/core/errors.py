"""
Error taxonomy for mpt-get.

Every failure the core reports is an ``MptError`` tagged with the stage it
happened in, so the CLI can surface a classified, human-readable message.
"""


class MptError(Exception):
    """
    Base exception for all mpt-get errors.

    Attributes:
        message: The human-readable cause.
        kind: Short tag naming what was being done when the error occurred.
    """

    kind = "running mpt-get"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        return f"Error occurred when {self.kind}: {self.message}"


class IndexSyncError(MptError):
    """Cloning, fetching or resetting the index working copy failed."""

    kind = "updating index"


class StorageError(MptError):
    """Filesystem or network transport failure."""

    kind = "I/O"


class ParseError(MptError):
    """A document or identifier is malformed at its top level."""

    kind = "parsing"


class EntryParseError(ParseError):
    """
    A single element inside an otherwise well-formed document is malformed.

    Document parsers catch this, drop the element and record the reason.
    """


class ConfigurationError(MptError):
    """The configuration file is unreadable or contains invalid values."""

    kind = "loading configuration"
