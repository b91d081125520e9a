"""Walk paginated record listings up to a bounded number of accepted items."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, replace

from tekton_results.decoding import decode_run
from tekton_results.exceptions import QueryCancelledError
from tekton_results.models import NormalizedRun
from tekton_results.ports import ResultsStore
from tekton_results.records import ListRecordsRequest, StoredRecord

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 200


@dataclass(frozen=True)
class Match:
    record: StoredRecord
    run: NormalizedRun


Predicate = Callable[[StoredRecord, NormalizedRun], bool]


def check_cancelled(cancel: threading.Event | None) -> None:
    if cancel is not None and cancel.is_set():
        raise QueryCancelledError("query cancelled")


def walk_records(
    store: ResultsStore,
    request: ListRecordsRequest,
    limit: int,
    predicate: Predicate | None = None,
    cancel: threading.Event | None = None,
    shrink_page_size: bool = True,
) -> list[Match]:
    """Collect up to ``limit`` decoded records accepted by ``predicate``.

    Stops once ``limit`` items are accepted or the store returns an empty
    continuation token. With ``shrink_page_size`` each follow-up page asks
    for no more than the remaining budget. The cancellation event is checked
    before every page request.

    Termination assumes the store eventually returns an empty token.

    Raises:
        QueryCancelledError: If ``cancel`` is set before a page is requested.
        DecodeError: If any listed record cannot be decoded.
    """
    matches: list[Match] = []
    if limit <= 0:
        return matches

    req = replace(request)
    while True:
        check_cancelled(cancel)
        logger.debug(
            "Listing records parent=%s page_size=%d token=%r",
            req.parent, req.page_size, req.page_token,
        )
        resp = store.list_records(req, cancel)

        for record in resp.records:
            run = decode_run(record)
            if predicate is not None and not predicate(record, run):
                continue
            matches.append(Match(record=record, run=run))
            if len(matches) >= limit:
                return matches

        if not resp.next_page_token:
            return matches

        req.page_token = resp.next_page_token
        remaining = limit - len(matches)
        if shrink_page_size and 0 < remaining < req.page_size:
            req.page_size = remaining
