"""Shared fixtures: record builders and an in-memory ResultsStore."""

from __future__ import annotations

import base64
import json
import threading
from dataclasses import replace
from typing import Any

import pytest

from tekton_results.exceptions import NotFoundError
from tekton_results.ports import ResultsStore
from tekton_results.records import ListRecordsRequest, ListRecordsResponse, StoredRecord


def make_run(
    name: str,
    namespace: str = "default",
    uid: str = "",
    labels: dict[str, str] | None = None,
    completed: bool = True,
    status: str = "True",
    reason: str = "Succeeded",
) -> dict[str, Any]:
    run: dict[str, Any] = {
        "apiVersion": "tekton.dev/v1",
        "kind": "PipelineRun",
        "metadata": {"name": name, "namespace": namespace, "uid": uid, "labels": labels or {}},
        "status": {"startTime": "2024-05-01T10:00:00Z", "conditions": []},
    }
    if completed:
        run["status"]["completionTime"] = "2024-05-01T10:02:05Z"
        run["status"]["conditions"].append(
            {"type": "Succeeded", "status": status, "reason": reason, "message": ""}
        )
    return run


def make_record(
    name: str,
    namespace: str = "default",
    uid: str = "",
    labels: dict[str, str] | None = None,
    encode: bool = False,
    record_uid: str = "",
    **kwargs: Any,
) -> StoredRecord:
    run = make_run(name, namespace, uid, labels, **kwargs)
    value: Any = run
    if encode:
        value = base64.b64encode(json.dumps(run).encode()).decode()
    record_id = record_uid or uid or name
    return StoredRecord(
        name=f"{namespace}/results/{record_id}/records/{record_id}",
        uid=record_uid or uid,
        value=value,
    )


class FakeStore(ResultsStore):
    """Serves canned pages and records, and records every call it receives."""

    def __init__(
        self,
        pages: list[list[StoredRecord]] | None = None,
        records: dict[str, StoredRecord] | None = None,
        get_error: Exception | None = None,
        logs: dict[str, bytes] | None = None,
    ) -> None:
        self.pages = pages or [[]]
        self.records = records or {}
        self.get_error = get_error
        self.logs = logs or {}
        self.list_calls: list[ListRecordsRequest] = []
        self.get_calls: list[str] = []
        self.log_calls: list[str] = []
        self.cancels: list[threading.Event | None] = []

    def __enter__(self) -> FakeStore:
        return self

    def __exit__(self, *exc_info: object) -> None:
        pass

    @property
    def call_count(self) -> int:
        return len(self.list_calls) + len(self.get_calls) + len(self.log_calls)

    def get_record(
        self, record_name: str, cancel: threading.Event | None = None
    ) -> StoredRecord:
        self.get_calls.append(record_name)
        self.cancels.append(cancel)
        if self.get_error is not None:
            raise self.get_error
        if record_name not in self.records:
            raise NotFoundError(f'{{"code":5,"message":"{record_name} not found"}}', 404)
        return self.records[record_name]

    def list_records(
        self, request: ListRecordsRequest, cancel: threading.Event | None = None
    ) -> ListRecordsResponse:
        # Snapshot: the walker mutates its request between pages.
        self.list_calls.append(replace(request))
        self.cancels.append(cancel)
        index = int(request.page_token) if request.page_token else 0
        token = str(index + 1) if index + 1 < len(self.pages) else ""
        return ListRecordsResponse(records=list(self.pages[index]), next_page_token=token)

    def get_log(self, log_path: str, cancel: threading.Event | None = None) -> bytes:
        self.log_calls.append(log_path)
        self.cancels.append(cancel)
        if log_path not in self.logs:
            raise NotFoundError(f"log {log_path} not found", 404)
        return self.logs[log_path]


@pytest.fixture
def cancel() -> threading.Event:
    return threading.Event()
