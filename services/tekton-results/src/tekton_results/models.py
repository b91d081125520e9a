"""Selectors, options and run views exchanged with callers."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

DEFAULT_LIST_LIMIT = 50
SUCCEEDED_CONDITION = "Succeeded"


@dataclass(frozen=True)
class RunSelector:
    """Filters identifying a single PipelineRun or TaskRun.

    ``namespace`` of ``-``, ``all`` or ``*`` searches every namespace. Run
    names are not unique in Results history, so ``uid`` is the only exact
    identifier. With ``select_last`` the most recent of several matches wins.
    """

    namespace: str = ""
    label_selector: str = ""
    prefix: str = ""
    name: str = ""
    uid: str = ""
    select_last: bool = True


@dataclass(frozen=True)
class ListOptions:
    namespace: str = ""
    label_selector: str = ""
    prefix: str = ""
    limit: int = DEFAULT_LIST_LIMIT

    @property
    def effective_limit(self) -> int:
        return self.limit if self.limit > 0 else DEFAULT_LIST_LIMIT


@dataclass(frozen=True)
class Condition:
    type: str
    status: str = ""
    reason: str = ""
    message: str = ""


@dataclass(frozen=True)
class NormalizedRun:
    """The fields of a Tekton run that listing and resolution care about."""

    name: str
    namespace: str
    uid: str = ""
    labels: dict[str, str] = field(default_factory=dict)
    start_time: datetime | None = None
    completion_time: datetime | None = None
    conditions: tuple[Condition, ...] = ()

    def succeeded(self) -> tuple[str, str]:
        return condition_status(self.conditions)


def condition_status(conditions: tuple[Condition, ...] | list[Condition]) -> tuple[str, str]:
    """Return (status, reason) of the Succeeded condition, or empty strings if absent."""
    for condition in conditions:
        if condition.type == SUCCEEDED_CONDITION:
            return condition.status, condition.reason
    return "", ""


def format_timestamp(value: datetime) -> str:
    return value.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")


@dataclass(frozen=True)
class RunSummary:
    name: str
    namespace: str
    record_name: str
    uid: str = ""
    labels: dict[str, str] = field(default_factory=dict)
    start_time: datetime | None = None
    completion_time: datetime | None = None
    status: str = ""
    reason: str = ""

    @property
    def duration_sec(self) -> float | None:
        if self.start_time is None or self.completion_time is None:
            return None
        return (self.completion_time - self.start_time).total_seconds()

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready view; empty optional fields are omitted."""
        out: dict[str, Any] = {"name": self.name, "namespace": self.namespace}
        if self.uid:
            out["uid"] = self.uid
        if self.labels:
            out["labels"] = dict(self.labels)
        if self.start_time is not None:
            out["startTime"] = format_timestamp(self.start_time)
        if self.completion_time is not None:
            out["completionTime"] = format_timestamp(self.completion_time)
        if self.status:
            out["status"] = self.status
        if self.reason:
            out["reason"] = self.reason
        out["recordName"] = self.record_name
        return out


@dataclass(frozen=True)
class RunDetail:
    """A resolved run: its summary, the full decoded resource and its record address."""

    summary: RunSummary
    raw: Any
    record_name: str

    @property
    def completed(self) -> bool:
        return self.summary.completion_time is not None
