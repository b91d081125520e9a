"""Domain exceptions for tekton-results."""

from __future__ import annotations


class TektonResultsError(Exception):
    """Base class for every error raised by this package."""

    pass


class MissingConfigError(TektonResultsError):
    """Raised when required configuration (e.g. the Results base URL) is missing."""

    pass


class MalformedSelectorError(TektonResultsError, ValueError):
    """Raised when a label selector contains a pair that is not key=value."""

    pass


class DecodeError(TektonResultsError):
    """Raised when a stored record payload cannot be decoded into a run."""

    pass


class EmptyRecordError(DecodeError):
    """Raised when a record carries no embedded Tekton data."""

    pass


class Base64DecodeError(DecodeError):
    """Raised when a string payload is not valid base64."""

    pass


class ResultsAPIError(TektonResultsError):
    """Raised for non-success responses and transport failures from the Results API."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NotFoundError(ResultsAPIError):
    """Raised when the Results API reports that the requested object does not exist."""

    pass


class NoRunFoundError(TektonResultsError):
    """Raised when a scan finishes without any run matching the selector."""

    pass


class AmbiguousSelectorError(TektonResultsError):
    """Raised when several runs match and automatic selection is disabled."""

    def __init__(self, matches: list[tuple[str, str]]) -> None:
        self.matches = matches
        names = ", ".join(f"{namespace}/{name}" for namespace, name in matches)
        super().__init__(
            f"multiple run instances match the filters ({names}). "
            "Please refine the filters with an exact name or prefix."
        )


class QueryCancelledError(TektonResultsError):
    """Raised when the caller cancels a query before it completes."""

    pass


class UnsupportedOutputError(TektonResultsError, ValueError):
    """Raised when a run is rendered in an unknown output format."""

    pass
