"""Abstract port for the Tekton Results store."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod

from tekton_results.records import ListRecordsRequest, ListRecordsResponse, StoredRecord


class ResultsStore(ABC):
    """Read-only access to Results records.

    Every call takes an optional cancellation event and must not start a
    request once it is set. A request already in flight is not interrupted;
    it runs until it completes or hits the transport timeout, so callers
    that need prompt aborts should configure a short timeout.
    """

    @abstractmethod
    def get_record(
        self, record_name: str, cancel: threading.Event | None = None
    ) -> StoredRecord:
        """Fetch a record by address. Raises NotFoundError if it does not exist."""
        ...

    @abstractmethod
    def list_records(
        self, request: ListRecordsRequest, cancel: threading.Event | None = None
    ) -> ListRecordsResponse:
        """Return one page of records; an empty next_page_token means no more pages."""
        ...

    @abstractmethod
    def get_log(self, log_path: str, cancel: threading.Event | None = None) -> bytes:
        """Return the stored log payload at ``log_path``."""
        ...
