"""Dataset fetching.

One fetch per dataset: ``http(s)://`` locations are requested over the
network, everything else is read from the local filesystem. Failures are
reported as ``DataFetchError`` and are not retried.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable, Union

import requests

logger = logging.getLogger(__name__)

Fetcher = Callable[[str], Any]

DEFAULT_TIMEOUT_S = 30.0


class DataFetchError(RuntimeError):
    """Raised when a dataset document cannot be retrieved or decoded."""


def _is_http_url(location: str) -> bool:
    s = location.strip().lower()
    return s.startswith("http://") or s.startswith("https://")


def fetch_json(location: Union[str, Path], timeout: float = DEFAULT_TIMEOUT_S) -> Any:
    """Fetch and decode one JSON document.

    Args:
        location: URL or filesystem path.
        timeout: Network timeout in seconds (URLs only).

    Returns:
        The decoded document.

    Raises:
        DataFetchError: On network, HTTP status, filesystem or JSON errors.
    """
    loc = str(location)
    if _is_http_url(loc):
        logger.debug("GET %s", loc)
        try:
            resp = requests.get(loc.strip(), timeout=timeout)
            resp.raise_for_status()
        except requests.RequestException as e:
            raise DataFetchError(f"Failed to fetch {loc}: {e}") from e
        try:
            return resp.json()
        except ValueError as e:
            raise DataFetchError(f"Invalid JSON from {loc}: {e}") from e

    path = Path(loc).expanduser()
    logger.debug("Reading %s", path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except OSError as e:
        raise DataFetchError(f"Failed to read {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise DataFetchError(f"Invalid JSON in {path}: {e}") from e
