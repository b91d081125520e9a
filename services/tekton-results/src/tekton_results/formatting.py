"""Render runs for terminal output."""

from __future__ import annotations

import json

import yaml
from rich.table import Table

from tekton_results.exceptions import UnsupportedOutputError
from tekton_results.models import RunDetail, RunSummary, format_timestamp


def format_detail(detail: RunDetail, output: str = "yaml") -> str:
    """Render the full resource as YAML (default) or JSON."""
    fmt = (output or "yaml").strip().lower()
    if fmt in ("", "yaml"):
        return yaml.safe_dump(detail.raw, sort_keys=False, default_flow_style=False)
    if fmt == "json":
        return json.dumps(detail.raw, indent=2)
    raise UnsupportedOutputError(f"unsupported output {output!r}")


def format_summaries(summaries: list[RunSummary]) -> str:
    return json.dumps([s.to_dict() for s in summaries], indent=2)


def format_duration(seconds: float) -> str:
    """Format a duration in seconds as human-readable (e.g. '1h 2m 5s')."""
    total = int(seconds)
    if total < 60:
        return f"{total}s"
    hours = total // 3600
    minutes = (total % 3600) // 60
    secs = total % 60
    parts: list[str] = []
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")
    if secs > 0:
        parts.append(f"{secs}s")
    return " ".join(parts)


def summaries_table(summaries: list[RunSummary]) -> Table:
    table = Table(box=None, padding=(0, 2))
    table.add_column("NAME", style="bold")
    table.add_column("NAMESPACE")
    table.add_column("STATUS")
    table.add_column("REASON")
    table.add_column("STARTED")
    table.add_column("DURATION", justify="right")

    for s in summaries:
        duration = s.duration_sec
        table.add_row(
            s.name,
            s.namespace,
            _status_markup(s.status),
            s.reason or "-",
            format_timestamp(s.start_time) if s.start_time else "-",
            format_duration(duration) if duration is not None else "-",
        )
    return table


def _status_markup(status: str) -> str:
    if status == "True":
        return "[green]True[/]"
    if status == "False":
        return "[red]False[/]"
    return status or "[dim]Unknown[/]"
