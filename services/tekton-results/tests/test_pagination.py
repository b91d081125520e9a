"""Tests for walk_records."""

from __future__ import annotations

import threading
from unittest.mock import MagicMock

import pytest

from conftest import FakeStore, make_record
from tekton_results.exceptions import DecodeError, QueryCancelledError
from tekton_results.pagination import walk_records
from tekton_results.records import ListRecordsRequest, ListRecordsResponse, StoredRecord


def _pages(count: int, size: int) -> list[list[StoredRecord]]:
    return [
        [make_record(f"run-{p}-{i}") for i in range(size)]
        for p in range(count)
    ]


class TestWalkRecords:
    def test_caps_items_and_shrinks_last_page(self) -> None:
        """limit=5 over pages of 3: two calls, five items, second page size 2."""
        store = FakeStore(pages=_pages(3, 3))
        request = ListRecordsRequest(parent="-/results/-", page_size=5)

        matches = walk_records(store, request, limit=5)

        assert len(matches) == 5
        assert len(store.list_calls) == 2
        assert store.list_calls[0].page_size == 5
        assert store.list_calls[1].page_size == 2
        assert store.list_calls[1].page_token == "1"

    def test_stops_when_token_exhausted(self) -> None:
        """An empty next page token ends the walk."""
        store = FakeStore(pages=_pages(2, 2))
        request = ListRecordsRequest(parent="-/results/-", page_size=50)

        matches = walk_records(store, request, limit=50)

        assert [m.run.name for m in matches] == ["run-0-0", "run-0-1", "run-1-0", "run-1-1"]
        assert len(store.list_calls) == 2

    def test_predicate_filters_before_counting(self) -> None:
        """Rejected records do not count towards the limit."""
        store = FakeStore(pages=_pages(2, 3))
        request = ListRecordsRequest(parent="-/results/-", page_size=3)

        matches = walk_records(
            store, request, limit=2, predicate=lambda _, run: run.name.endswith("-1")
        )

        assert [m.run.name for m in matches] == ["run-0-1", "run-1-1"]
        assert len(store.list_calls) == 2

    def test_no_shrink_keeps_page_size(self) -> None:
        """With shrinking off every page keeps the requested size."""
        store = FakeStore(pages=_pages(2, 1))
        request = ListRecordsRequest(parent="-/results/-", page_size=50)

        walk_records(store, request, limit=2, shrink_page_size=False)

        assert [c.page_size for c in store.list_calls] == [50, 50]

    def test_caller_request_not_mutated(self) -> None:
        """The walker works on a copy of the request."""
        store = FakeStore(pages=_pages(2, 1))
        request = ListRecordsRequest(parent="-/results/-", page_size=5)

        walk_records(store, request, limit=5)

        assert request.page_token == ""
        assert request.page_size == 5

    def test_zero_limit_makes_no_calls(self) -> None:
        """A zero limit returns immediately."""
        store = FakeStore(pages=_pages(1, 1))
        assert walk_records(store, ListRecordsRequest(parent="p"), limit=0) == []
        assert store.list_calls == []

    def test_decode_error_aborts(self) -> None:
        """An undecodable record aborts the walk."""
        store = FakeStore(pages=[[StoredRecord(name="broken", value="")]])
        with pytest.raises(DecodeError):
            walk_records(store, ListRecordsRequest(parent="p", page_size=5), limit=5)


class TestCancellation:
    def test_cancel_between_pages_skips_next_request(self) -> None:
        """Cancelling during a page prevents the next request."""
        cancel = threading.Event()
        store = MagicMock()

        def first_page(request: ListRecordsRequest, _: threading.Event) -> ListRecordsResponse:
            cancel.set()
            return ListRecordsResponse(records=[make_record("run-1")], next_page_token="next")

        store.list_records.side_effect = first_page

        with pytest.raises(QueryCancelledError):
            walk_records(
                store, ListRecordsRequest(parent="p", page_size=1), limit=5, cancel=cancel
            )

        assert store.list_records.call_count == 1

    def test_cancelled_before_start(self, cancel: threading.Event) -> None:
        """A pre-set event stops the walk before the first call."""
        cancel.set()
        store = FakeStore(pages=_pages(1, 1))
        with pytest.raises(QueryCancelledError):
            walk_records(store, ListRecordsRequest(parent="p"), limit=5, cancel=cancel)
        assert store.list_calls == []

    def test_event_passed_to_store(self, cancel: threading.Event) -> None:
        """The cancel event is forwarded to the store."""
        store = FakeStore(pages=_pages(1, 1))
        walk_records(store, ListRecordsRequest(parent="p"), limit=5, cancel=cancel)
        assert store.cancels == [cancel]
