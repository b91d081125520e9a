"""Connection settings for the Tekton Results API, read from the environment."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from tekton_results.exceptions import MissingConfigError

logger = logging.getLogger(__name__)

_TRUE_VALUES = {"1", "t", "true", "yes", "on"}
_FALSE_VALUES = {"0", "f", "false", "no", "off"}


@dataclass(frozen=True)
class ResultsSettings:
    base_url: str
    bearer_token: str = ""
    insecure_skip_verify: bool = False
    default_namespace: str = "default"
    timeout_sec: float = 30.0


def load_settings() -> ResultsSettings:
    """Build settings from environment variables.

    Loads env vars from .env at the repo root if present.
    Requires TEKTON_RESULTS_BASE_URL.
    """
    _load_env()

    base_url = os.environ.get("TEKTON_RESULTS_BASE_URL", "").strip()
    if not base_url:
        raise MissingConfigError(
            "Missing TEKTON_RESULTS_BASE_URL.\n"
            "Set it in .env at the repo root or export it."
        )

    return ResultsSettings(
        base_url=base_url,
        bearer_token=os.environ.get("TEKTON_RESULTS_BEARER_TOKEN", "").strip(),
        insecure_skip_verify=_parse_bool(
            "TEKTON_RESULTS_INSECURE_SKIP_VERIFY", default=False
        ),
        default_namespace=os.environ.get("TEKTON_RESULTS_NAMESPACE", "").strip() or "default",
        timeout_sec=_parse_float("TEKTON_RESULTS_TIMEOUT", default=30.0),
    )


def _parse_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    if raw.lower() in _TRUE_VALUES:
        return True
    if raw.lower() in _FALSE_VALUES:
        return False
    logger.warning("Invalid %s value %r, ignoring", name, raw)
    return default


def _parse_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Invalid %s value %r, ignoring", name, raw)
        return default
    if value <= 0:
        logger.warning("Invalid %s value %r, ignoring", name, raw)
        return default
    return value


def _load_env() -> None:
    repo_root = Path(__file__).resolve().parents[4]
    dotenv_path = repo_root / ".env"
    if dotenv_path.exists():
        load_dotenv(dotenv_path)
