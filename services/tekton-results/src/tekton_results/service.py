"""List and resolve Tekton runs stored in Tekton Results."""

from __future__ import annotations

import logging
import threading
from datetime import UTC, datetime

from tekton_results.decoding import build_detail, decode_run, summarize_run
from tekton_results.exceptions import (
    AmbiguousSelectorError,
    DecodeError,
    NoRunFoundError,
    NotFoundError,
    ResultsAPIError,
)
from tekton_results.filters import build_filter_expression, parent_for_namespace
from tekton_results.kinds import ResourceKind
from tekton_results.models import (
    ListOptions,
    NormalizedRun,
    RunDetail,
    RunSelector,
    RunSummary,
    format_timestamp,
)
from tekton_results.pagination import MAX_PAGE_SIZE, check_cancelled, walk_records
from tekton_results.ports import ResultsStore
from tekton_results.records import (
    ListRecordsRequest,
    StoredRecord,
    log_path_for,
    record_address,
)
from tekton_results.selectors import matches_labels, parse_label_selector

logger = logging.getLogger(__name__)

LIST_FIELDS = (
    "records.name,records.uid,records.data.value.metadata,"
    "records.data.value.status,next_page_token"
)
DETAIL_FIELDS = "records.name,records.uid,records.data.value"
ORDER_BY = "create_time desc"
DESCRIBE_PAGE_SIZE = 50
FALLBACK_NAMESPACE = "default"
PIPELINE_RUN_UID_LABEL = "tekton.dev/pipelineRunUID"
LOG_RULE = "=" * 40


class ResultsService:
    """Read-only queries over a ResultsStore.

    Runs are listed newest first (``create_time desc``). When several runs
    match a selector and ``select_last`` is set, the first one in that order
    is returned; the store's ordering is relied on and never re-sorted here.
    """

    def __init__(self, store: ResultsStore) -> None:
        self._store = store

    def list_pipeline_runs(
        self, options: ListOptions, cancel: threading.Event | None = None
    ) -> list[RunSummary]:
        return self.list_runs(ResourceKind.PIPELINE_RUN, options, cancel)

    def list_task_runs(
        self, options: ListOptions, cancel: threading.Event | None = None
    ) -> list[RunSummary]:
        return self.list_runs(ResourceKind.TASK_RUN, options, cancel)

    def get_pipeline_run(
        self, selector: RunSelector, cancel: threading.Event | None = None
    ) -> RunDetail:
        return self.resolve_run(ResourceKind.PIPELINE_RUN, selector, cancel)

    def get_task_run(
        self, selector: RunSelector, cancel: threading.Event | None = None
    ) -> RunDetail:
        return self.resolve_run(ResourceKind.TASK_RUN, selector, cancel)

    def list_runs(
        self,
        kind: ResourceKind,
        options: ListOptions,
        cancel: threading.Event | None = None,
    ) -> list[RunSummary]:
        """Return up to ``options.limit`` summaries, newest first."""
        labels = parse_label_selector(options.label_selector)
        limit = options.effective_limit

        request = ListRecordsRequest(
            parent=parent_for_namespace(options.namespace),
            filter=build_filter_expression(kind, labels),
            order_by=ORDER_BY,
            page_size=min(limit, MAX_PAGE_SIZE),
            fields=LIST_FIELDS,
        )

        def accept(_: StoredRecord, run: NormalizedRun) -> bool:
            if not matches_labels(run.labels, labels):
                return False
            return not options.prefix or run.name.startswith(options.prefix)

        matches = walk_records(self._store, request, limit, accept, cancel)
        return [summarize_run(m.run, m.record) for m in matches]

    def resolve_run(
        self,
        kind: ResourceKind,
        selector: RunSelector,
        cancel: threading.Event | None = None,
    ) -> RunDetail:
        """Resolve a selector to exactly one run.

        A UID is looked up directly first. If that misses and the kind can be
        stored under a parent run, the namespace is scanned instead. The scan
        applies UID, labels, prefix and exact name in memory and stops after
        the second match.

        Raises:
            MalformedSelectorError: If the label selector cannot be parsed.
            NotFoundError: If the direct UID lookup misses for a kind that
                cannot be nested.
            NoRunFoundError: If the scan matched nothing.
            AmbiguousSelectorError: If several runs matched and
                ``select_last`` is off.
            QueryCancelledError: If ``cancel`` was set.
        """
        labels = parse_label_selector(selector.label_selector)

        if selector.uid:
            detail = self._lookup_by_uid(kind, selector, cancel)
            if detail is not None:
                return detail

        request = ListRecordsRequest(
            parent=parent_for_namespace(selector.namespace),
            filter=build_filter_expression(kind, labels, selector.name),
            order_by=ORDER_BY,
            page_size=DESCRIBE_PAGE_SIZE,
            fields=DETAIL_FIELDS,
        )

        def accept(record: StoredRecord, run: NormalizedRun) -> bool:
            if selector.uid and (run.uid or record.uid) != selector.uid:
                return False
            if not matches_labels(run.labels, labels):
                return False
            if selector.prefix and not run.name.startswith(selector.prefix):
                return False
            return not selector.name or run.name == selector.name

        matches = walk_records(
            self._store, request, 2, accept, cancel, shrink_page_size=False
        )

        if not matches:
            raise NoRunFoundError("no run found that matches the provided filters")
        if len(matches) > 1 and not selector.select_last:
            raise AmbiguousSelectorError(
                [(m.run.namespace, m.run.name) for m in matches]
            )
        first = matches[0]
        return build_detail(first.run, first.record)

    def fetch_logs(self, record_name: str, cancel: threading.Event | None = None) -> str:
        """Download the log stored alongside the record at ``record_name``."""
        check_cancelled(cancel)
        data = self._store.get_log(log_path_for(record_name), cancel)
        return data.decode("utf-8", errors="replace")

    def fetch_pipeline_run_logs(
        self,
        detail: RunDetail,
        namespace: str = "",
        cancel: threading.Event | None = None,
    ) -> str:
        """Concatenate the logs of every TaskRun belonging to a PipelineRun.

        TaskRuns are found through their ``tekton.dev/pipelineRunUID`` label and
        printed in completion order (start time breaks ties, unfinished last),
        each under a header block. A TaskRun whose log cannot be fetched gets
        an error line instead of aborting the whole listing.
        """
        if not detail.summary.uid:
            return "No TaskRuns found for this PipelineRun\n"
        options = ListOptions(
            namespace=namespace,
            label_selector=f"{PIPELINE_RUN_UID_LABEL}={detail.summary.uid}",
            limit=MAX_PAGE_SIZE,
        )
        task_runs = self.list_runs(ResourceKind.TASK_RUN, options, cancel)
        if not task_runs:
            return "No TaskRuns found for this PipelineRun\n"

        task_runs.sort(key=_log_order)
        blocks: list[str] = []
        for task_run in task_runs:
            header = f"TaskRun: {task_run.name}\nStatus: {task_run.reason}"
            if task_run.start_time is not None:
                header += f" | Started: {format_timestamp(task_run.start_time)}"
            if task_run.completion_time is not None:
                header += f" | Completed: {format_timestamp(task_run.completion_time)}"

            try:
                logs = self.fetch_logs(task_run.record_name, cancel)
            except ResultsAPIError as exc:
                logger.info("Fetching logs of TaskRun %s failed: %s", task_run.name, exc)
                body = f"Error fetching logs: {exc}\n"
            else:
                if not logs:
                    body = "(no logs available)\n"
                elif logs.endswith("\n"):
                    body = logs
                else:
                    body = f"{logs}\n"
            blocks.append(f"{LOG_RULE}\n{header}\n{LOG_RULE}\n{body}")
        return "\n\n".join(blocks)

    def _lookup_by_uid(
        self,
        kind: ResourceKind,
        selector: RunSelector,
        cancel: threading.Event | None,
    ) -> RunDetail | None:
        """Fetch ``<ns>/results/<uid>/records/<uid>``; None means scan instead."""
        namespace = selector.namespace or FALLBACK_NAMESPACE
        address = record_address(namespace, selector.uid, selector.uid)
        check_cancelled(cancel)
        try:
            record = self._store.get_record(address, cancel)
        except NotFoundError as exc:
            if kind.may_nest_under_parent:
                logger.info(
                    "Direct lookup missed for %s uid=%s, falling back to namespace scan",
                    kind.display_name, selector.uid,
                )
                return None
            exc.add_note(f"get record by UID {selector.uid}")
            raise
        except ResultsAPIError as exc:
            exc.add_note(f"get record by UID {selector.uid}")
            raise

        try:
            run = decode_run(record)
        except DecodeError as exc:
            exc.add_note("decode run from direct get")
            raise
        return build_detail(run, record)


def _log_order(summary: RunSummary) -> tuple[bool, datetime, bool, datetime]:
    return (
        summary.completion_time is None,
        summary.completion_time or datetime.max.replace(tzinfo=UTC),
        summary.start_time is None,
        summary.start_time or datetime.max.replace(tzinfo=UTC),
    )
