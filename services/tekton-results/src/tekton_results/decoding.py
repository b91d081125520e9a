"""Turn stored records into normalized runs, summaries and details."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from tekton_results.exceptions import DecodeError
from tekton_results.models import Condition, NormalizedRun, RunDetail, RunSummary
from tekton_results.records import StoredRecord


def decode_run(record: StoredRecord) -> NormalizedRun:
    """Decode the record payload into a NormalizedRun.

    Raises:
        DecodeError: If the payload is missing, undecodable or not a Tekton resource.
    """
    payload = record.payload
    if not isinstance(payload, dict):
        raise DecodeError(
            f"decode Tekton resource in record {record.name}: expected a JSON object"
        )

    metadata = payload.get("metadata") or {}
    status = payload.get("status") or {}
    if not isinstance(metadata, dict) or not isinstance(status, dict):
        raise DecodeError(
            f"decode Tekton resource in record {record.name}: malformed metadata or status"
        )
    conditions = status.get("conditions") or []
    if not isinstance(conditions, list):
        raise DecodeError(
            f"decode Tekton resource in record {record.name}: status.conditions must be a list"
        )

    labels = metadata.get("labels") or {}
    if not isinstance(labels, dict) or not all(
        isinstance(k, str) and isinstance(v, str) for k, v in labels.items()
    ):
        raise DecodeError(
            f"decode Tekton resource in record {record.name}: labels must map strings to strings"
        )

    return NormalizedRun(
        name=_string_field(metadata, "name", record.name),
        namespace=_string_field(metadata, "namespace", record.name),
        uid=_string_field(metadata, "uid", record.name),
        labels=dict(labels),
        start_time=_parse_time(status.get("startTime"), record.name),
        completion_time=_parse_time(status.get("completionTime"), record.name),
        conditions=tuple(_parse_condition(c) for c in conditions),
    )


def summarize_run(run: NormalizedRun, record: StoredRecord) -> RunSummary:
    status, reason = run.succeeded()
    return RunSummary(
        name=run.name,
        namespace=run.namespace,
        uid=run.uid or record.uid,
        labels=run.labels,
        start_time=run.start_time,
        completion_time=run.completion_time,
        status=status,
        reason=reason,
        record_name=record.name,
    )


def build_detail(run: NormalizedRun, record: StoredRecord) -> RunDetail:
    return RunDetail(
        summary=summarize_run(run, record),
        raw=record.payload,
        record_name=record.name,
    )


def _string_field(metadata: dict[str, Any], key: str, record_name: str) -> str:
    value = metadata.get(key) or ""
    if not isinstance(value, str):
        raise DecodeError(
            f"decode Tekton resource in record {record_name}: metadata.{key} must be a string"
        )
    return value


def _parse_condition(raw: Any) -> Condition:
    if not isinstance(raw, dict):
        return Condition(type="")
    return Condition(
        type=raw.get("type") or "",
        status=raw.get("status") or "",
        reason=raw.get("reason") or "",
        message=raw.get("message") or "",
    )


def _parse_time(value: Any, record_name: str) -> datetime | None:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(str(value))
    except ValueError as exc:
        raise DecodeError(
            f"decode Tekton resource in record {record_name}: bad timestamp {value!r}"
        ) from exc
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed
