"""CLI for querying PipelineRuns and TaskRuns stored in Tekton Results."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING

import typer
from rich.console import Console
from rich.markup import escape

from tekton_results.exceptions import TektonResultsError, UnsupportedOutputError
from tekton_results.kinds import ResourceKind
from tekton_results.models import DEFAULT_LIST_LIMIT

if TYPE_CHECKING:
    from tekton_results.service import ResultsService

app = typer.Typer(help="Tekton Results: list, describe and fetch logs of stored runs.")
pipelinerun_app = typer.Typer(help="Query PipelineRuns.")
taskrun_app = typer.Typer(help="Query TaskRuns.")
app.add_typer(pipelinerun_app, name="pipelinerun")
app.add_typer(taskrun_app, name="taskrun")

console = Console()
err_console = Console(stderr=True)

MAX_LIST_LIMIT = 200
LIST_OUTPUTS = ("json", "table")


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log API calls"),
) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


@contextmanager
def _service() -> Iterator[tuple[ResultsService, str]]:
    """Yield (service, default namespace) and turn domain errors into exit code 1."""
    from tekton_results.client import ResultsClient
    from tekton_results.config import load_settings
    from tekton_results.service import ResultsService

    try:
        settings = load_settings()
        with ResultsClient(settings) as client:
            yield ResultsService(client), settings.default_namespace
    except TektonResultsError as exc:
        err_console.print(f"[bold red]Error:[/] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc


def _require_target(kind: ResourceKind, name: str, prefix: str, uid: str, selector: str) -> None:
    if not (name or prefix or uid or selector.strip()):
        raise typer.BadParameter(
            f"provide at least one of --name, --prefix, --uid or --selector "
            f"to identify a {kind.display_name}"
        )


def _list(kind: ResourceKind, namespace: str, selector: str, prefix: str, limit: int, output: str) -> None:
    from tekton_results.filters import normalize_namespace
    from tekton_results.formatting import format_summaries, summaries_table
    from tekton_results.models import ListOptions

    with _service() as (service, default_ns):
        options = ListOptions(
            namespace=normalize_namespace(namespace, default_ns),
            label_selector=selector,
            prefix=prefix,
            limit=limit,
        )
        fmt = output.strip().lower()
        if fmt not in LIST_OUTPUTS:
            raise UnsupportedOutputError(f"unsupported output {output!r}")
        summaries = service.list_runs(kind, options)
        if fmt == "table":
            console.print(summaries_table(summaries))
        else:
            console.print_json(format_summaries(summaries))


def _describe(
    kind: ResourceKind,
    namespace: str,
    selector: str,
    prefix: str,
    name: str,
    uid: str,
    output: str,
    select_last: bool,
) -> None:
    from tekton_results.filters import normalize_namespace
    from tekton_results.formatting import format_detail
    from tekton_results.models import RunSelector

    _require_target(kind, name, prefix, uid, selector)
    with _service() as (service, default_ns):
        run_selector = RunSelector(
            namespace=normalize_namespace(namespace, default_ns),
            label_selector=selector,
            prefix=prefix,
            name=name,
            uid=uid,
            select_last=select_last,
        )
        detail = service.resolve_run(kind, run_selector)
        typer.echo(format_detail(detail, output), nl=False)


def _logs(
    kind: ResourceKind,
    namespace: str,
    selector: str,
    prefix: str,
    name: str,
    uid: str,
    select_last: bool,
) -> None:
    from tekton_results.filters import normalize_namespace
    from tekton_results.models import RunSelector

    _require_target(kind, name, prefix, uid, selector)
    with _service() as (service, default_ns):
        run_selector = RunSelector(
            namespace=normalize_namespace(namespace, default_ns),
            label_selector=selector,
            prefix=prefix,
            name=name,
            uid=uid,
            select_last=select_last,
        )
        detail = service.resolve_run(kind, run_selector)
        if not detail.completed:
            err_console.print(
                f"[yellow]Logs are only available after the {kind.display_name} has completed.[/]"
            )
            raise typer.Exit(code=1)
        if kind is ResourceKind.PIPELINE_RUN:
            logs = service.fetch_pipeline_run_logs(detail, run_selector.namespace)
        else:
            logs = service.fetch_logs(detail.record_name)
        typer.echo(logs, nl=False)


NamespaceOpt = typer.Option("", "--namespace", "-n", help="Namespace; '-' searches all namespaces")
SelectorOpt = typer.Option("", "--selector", "-l", help="Comma separated key=value label filters")
PrefixOpt = typer.Option("", "--prefix", help="Run name prefix")
NameOpt = typer.Option("", "--name", help="Exact run name (not unique in Results history)")
UidOpt = typer.Option("", "--uid", help="Exact run UID, the fastest way to find a run")
SelectLastOpt = typer.Option(
    True, "--select-last/--no-select-last", help="Pick the most recent run when several match"
)
LimitOpt = typer.Option(DEFAULT_LIST_LIMIT, "--limit", min=1, max=MAX_LIST_LIMIT, help="Maximum runs to return")


@pipelinerun_app.command("list")
def pipelinerun_list(
    namespace: str = NamespaceOpt,
    selector: str = SelectorOpt,
    prefix: str = PrefixOpt,
    limit: int = LimitOpt,
    output: str = typer.Option("json", "--output", "-o", help="json or table"),
) -> None:
    """List PipelineRuns, newest first."""
    _list(ResourceKind.PIPELINE_RUN, namespace, selector, prefix, limit, output)


@pipelinerun_app.command("describe")
def pipelinerun_describe(
    namespace: str = NamespaceOpt,
    selector: str = SelectorOpt,
    prefix: str = PrefixOpt,
    name: str = NameOpt,
    uid: str = UidOpt,
    output: str = typer.Option("yaml", "--output", "-o", help="yaml or json"),
    select_last: bool = SelectLastOpt,
) -> None:
    """Print a single PipelineRun as YAML or JSON."""
    _describe(ResourceKind.PIPELINE_RUN, namespace, selector, prefix, name, uid, output, select_last)


@pipelinerun_app.command("logs")
def pipelinerun_logs(
    namespace: str = NamespaceOpt,
    selector: str = SelectorOpt,
    prefix: str = PrefixOpt,
    name: str = NameOpt,
    uid: str = UidOpt,
    select_last: bool = SelectLastOpt,
) -> None:
    """Print stored logs of a completed PipelineRun."""
    _logs(ResourceKind.PIPELINE_RUN, namespace, selector, prefix, name, uid, select_last)


@taskrun_app.command("list")
def taskrun_list(
    namespace: str = NamespaceOpt,
    selector: str = SelectorOpt,
    prefix: str = PrefixOpt,
    limit: int = LimitOpt,
    output: str = typer.Option("json", "--output", "-o", help="json or table"),
) -> None:
    """List TaskRuns, newest first."""
    _list(ResourceKind.TASK_RUN, namespace, selector, prefix, limit, output)


@taskrun_app.command("get")
def taskrun_get(
    namespace: str = NamespaceOpt,
    selector: str = SelectorOpt,
    prefix: str = PrefixOpt,
    name: str = NameOpt,
    uid: str = UidOpt,
    output: str = typer.Option("yaml", "--output", "-o", help="yaml or json"),
    select_last: bool = SelectLastOpt,
) -> None:
    """Print a single TaskRun as YAML or JSON."""
    _describe(ResourceKind.TASK_RUN, namespace, selector, prefix, name, uid, output, select_last)


@taskrun_app.command("logs")
def taskrun_logs(
    namespace: str = NamespaceOpt,
    selector: str = SelectorOpt,
    prefix: str = PrefixOpt,
    name: str = NameOpt,
    uid: str = UidOpt,
    select_last: bool = SelectLastOpt,
) -> None:
    """Print stored logs of a completed TaskRun."""
    _logs(ResourceKind.TASK_RUN, namespace, selector, prefix, name, uid, select_last)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
