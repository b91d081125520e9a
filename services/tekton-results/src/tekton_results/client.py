"""HTTP client for the Tekton Results REST API."""

from __future__ import annotations

import logging
import threading
from typing import Any
from urllib.parse import urlsplit, urlunsplit

import httpx

from tekton_results.config import ResultsSettings
from tekton_results.exceptions import MissingConfigError, NotFoundError, ResultsAPIError
from tekton_results.pagination import check_cancelled
from tekton_results.ports import ResultsStore
from tekton_results.records import ListRecordsRequest, ListRecordsResponse, StoredRecord

logger = logging.getLogger(__name__)

RESULTS_GROUP = "results.tekton.dev"
API_PATH = f"/apis/{RESULTS_GROUP}/v1alpha2"
GRPC_NOT_FOUND = 5


def normalize_base_url(raw: str) -> str:
    """Default the scheme to https and append the Results API path when absent."""
    url = raw.strip()
    if "://" not in url:
        url = f"https://{url}"
    parts = urlsplit(url)
    if not parts.netloc:
        raise MissingConfigError("TEKTON_RESULTS_BASE_URL must include host")
    path = parts.path.rstrip("/")
    if RESULTS_GROUP not in path:
        path = f"{path}{API_PATH}"
    return urlunsplit((parts.scheme, parts.netloc, path, "", ""))


class ResultsClient(ResultsStore):
    """ResultsStore backed by httpx.

    Each method checks the cancellation event before sending; in-flight
    requests are bounded by the configured timeout.
    """

    def __init__(
        self,
        settings: ResultsSettings,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        headers = {"Accept": "application/json"}
        if settings.bearer_token:
            headers["Authorization"] = f"Bearer {settings.bearer_token}"
        self._http = httpx.Client(
            base_url=normalize_base_url(settings.base_url),
            headers=headers,
            timeout=settings.timeout_sec,
            verify=not settings.insecure_skip_verify,
            transport=transport,
        )

    def __enter__(self) -> ResultsClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._http.close()

    def get_record(
        self, record_name: str, cancel: threading.Event | None = None
    ) -> StoredRecord:
        if not record_name:
            raise ValueError("record name is required")
        body = self._get_json(f"parents/{record_name.lstrip('/')}", cancel=cancel)
        return StoredRecord.from_api(body)

    def list_records(
        self, request: ListRecordsRequest, cancel: threading.Event | None = None
    ) -> ListRecordsResponse:
        if not request.parent:
            raise ValueError("parent is required")
        body = self._get_json(
            f"parents/{request.parent.lstrip('/')}/records",
            params=request.query_params(),
            cancel=cancel,
        )
        return ListRecordsResponse.from_api(body)

    def get_log(self, log_path: str, cancel: threading.Event | None = None) -> bytes:
        if not log_path:
            raise ValueError("log path is required")
        return self._get(f"parents/{log_path.lstrip('/')}", cancel=cancel).content

    def _get_json(
        self,
        path: str,
        params: dict[str, str] | None = None,
        cancel: threading.Event | None = None,
    ) -> dict[str, Any]:
        response = self._get(path, params=params, cancel=cancel)
        try:
            body = response.json()
        except ValueError as exc:
            raise ResultsAPIError(
                f"decode response from {response.request.url.path}: {exc}",
                status_code=response.status_code,
            ) from exc
        if not isinstance(body, dict):
            raise ResultsAPIError(
                f"unexpected response body from {response.request.url.path}",
                status_code=response.status_code,
            )
        return body

    def _get(
        self,
        path: str,
        params: dict[str, str] | None = None,
        cancel: threading.Event | None = None,
    ) -> httpx.Response:
        check_cancelled(cancel)
        try:
            response = self._http.get(path, params=params)
        except httpx.HTTPError as exc:
            raise ResultsAPIError(f"perform GET request: {exc}") from exc

        if response.is_success:
            return response

        detail = response.text.strip()
        message = f"results API GET {response.request.url.path}: {detail}"
        if response.status_code == httpx.codes.NOT_FOUND or _is_grpc_not_found(response):
            raise NotFoundError(message, status_code=response.status_code)
        logger.debug("Results API error status=%d body=%s", response.status_code, detail)
        raise ResultsAPIError(message, status_code=response.status_code)


def _is_grpc_not_found(response: httpx.Response) -> bool:
    try:
        body = response.json()
    except ValueError:
        return False
    return isinstance(body, dict) and body.get("code") == GRPC_NOT_FOUND
