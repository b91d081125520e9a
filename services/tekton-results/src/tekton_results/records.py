"""Stored records as returned by the Results API, and their payload decoding."""

from __future__ import annotations

import base64
import binascii
import json
from dataclasses import dataclass, field
from functools import cached_property
from typing import Any

from tekton_results.exceptions import Base64DecodeError, DecodeError, EmptyRecordError


@dataclass(frozen=True)
class StoredRecord:
    """A Results record: its storage address, transport UID and opaque payload.

    ``value`` is whatever the API returned under ``data.value``: an already
    unwrapped JSON object, a base64 string, or raw JSON bytes.
    """

    name: str
    uid: str = ""
    value: Any = None

    @classmethod
    def from_api(cls, body: dict[str, Any]) -> StoredRecord:
        data = body.get("data") or {}
        return cls(
            name=body.get("name", ""),
            uid=body.get("uid", ""),
            value=data.get("value"),
        )

    @cached_property
    def payload(self) -> Any:
        """The decoded payload, computed on first access and reused afterwards."""
        return decode_value(self.value, self.name)


def decode_value(value: Any, record_name: str = "") -> Any:
    """Resolve a record value to its JSON payload.

    Composite values are used as they are. Strings are base64 and decode to
    JSON. Bytes are parsed as JSON first and fall back to raw base64.
    """
    if value is None or value == "" or value == b"":
        raise EmptyRecordError(f"record {record_name} has no embedded Tekton data")

    if isinstance(value, (dict, list)):
        return value

    if isinstance(value, (bytes, bytearray)):
        try:
            parsed = json.loads(value)
        except ValueError:
            return _decode_base64_json(bytes(value).decode("ascii", "replace"), record_name)
        if isinstance(parsed, str):
            return _decode_base64_json(parsed, record_name)
        if isinstance(parsed, (dict, list)):
            return parsed
        raise DecodeError(f"record {record_name} holds a scalar payload")

    if isinstance(value, str):
        return _decode_base64_json(value, record_name)

    raise DecodeError(
        f"record {record_name} holds an unsupported payload type {type(value).__name__}"
    )


def _decode_base64_json(encoded: str, record_name: str) -> Any:
    try:
        raw = base64.b64decode(encoded.replace("\r", "").replace("\n", ""), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise Base64DecodeError(f"decode base64 for record {record_name}: {exc}") from exc
    if not raw:
        raise EmptyRecordError(f"record {record_name} has no embedded Tekton data")
    try:
        return json.loads(raw)
    except ValueError as exc:
        raise DecodeError(f"decode Tekton resource in record {record_name}: {exc}") from exc


def record_address(namespace: str, result_id: str, record_id: str) -> str:
    """Build ``<namespace>/results/<result-id>/records/<record-id>``."""
    return f"{namespace}/results/{result_id}/records/{record_id}"


def log_path_for(record_name: str) -> str:
    """Derive the log address of a record by swapping its ``records`` segment."""
    log_path = record_name.replace("/records/", "/logs/", 1)
    if log_path == record_name:
        log_path = record_name.replace("records", "logs", 1)
    return log_path


@dataclass
class ListRecordsRequest:
    parent: str
    filter: str = ""
    order_by: str = ""
    page_size: int = 0
    page_token: str = ""
    fields: str = ""

    def query_params(self) -> dict[str, str]:
        params: dict[str, str] = {}
        if self.filter:
            params["filter"] = self.filter
        if self.order_by:
            params["order_by"] = self.order_by
        if self.page_size > 0:
            params["page_size"] = str(self.page_size)
        if self.page_token:
            params["page_token"] = self.page_token
        if self.fields:
            params["fields"] = self.fields
        return params


@dataclass
class ListRecordsResponse:
    records: list[StoredRecord] = field(default_factory=list)
    next_page_token: str = ""

    @classmethod
    def from_api(cls, body: dict[str, Any]) -> ListRecordsResponse:
        return cls(
            records=[StoredRecord.from_api(r) for r in body.get("records") or []],
            next_page_token=body.get("nextPageToken") or "",
        )
