from __future__ import annotations


class TrackerError(Exception):
    """Base class for failures that abort an ingestion run."""


class FetchError(TrackerError):
    """The source spreadsheet could not be retrieved."""

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class ParseError(TrackerError):
    """The retrieved text is not well-formed delimited data."""

    def __init__(self, message: str, *, line: int | None = None) -> None:
        super().__init__(message)
        self.line = line
