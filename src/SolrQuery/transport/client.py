"""Solr HTTP client.

Issues ``/select`` requests against a single Solr core with retry/backoff for
transient failures. The response JSON is returned as decoded, without
interpretation.
"""

from __future__ import annotations

import random
import time
from typing import Any, Mapping

import requests

from SolrQuery.utils.log import get_logger

log = get_logger("transport")

DEFAULT_TIMEOUT = 30.0
MAX_ATTEMPTS = 4
BASE_PAUSE = 0.8
MAX_SLEEP = 8.0
RETRYABLE_STATUS = {429, 500, 502, 503, 504}

HEADERS = {
    "User-Agent": "solr-query/0.1",
    "Accept": "application/json",
}


def encode_params(
    query: str,
    offset: int,
    limit: int,
    params: Mapping[str, Any],
) -> list[tuple[str, str]]:
    """Flatten the request into ordered key/value pairs.

    List values become repeated keys (``fq=a&fq=b``). ``None`` values are
    dropped; booleans become ``true``/``false``.
    """
    pairs: list[tuple[str, str]] = [
        ("q", query),
        ("start", str(offset)),
        ("rows", str(limit)),
    ]
    for key, value in params.items():
        if key in ("q", "start", "rows", "wt"):
            continue
        if value is None:
            continue
        values = value if isinstance(value, (list, tuple)) else [value]
        for item in values:
            if item is None:
                continue
            if isinstance(item, bool):
                item = "true" if item else "false"
            pairs.append((str(key), str(item)))
    pairs.append(("wt", "json"))
    return pairs


class SolrHttpService:
    """Low-level HTTP client for one Solr core.

    Attributes:
        url: Core base URL, e.g. ``http://localhost:8983/solr/drupal``.
    """

    def __init__(
        self,
        url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        max_attempts: int = MAX_ATTEMPTS,
        session: requests.Session | None = None,
    ) -> None:
        self.url = url.rstrip("/")
        self.timeout = timeout
        self.max_attempts = max(1, max_attempts)
        self._session = session or requests.Session()

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self._session.close()

    def __enter__(self) -> SolrHttpService:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def search(
        self,
        query: str,
        offset: int = 0,
        limit: int = 10,
        params: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Run a ``/select`` request.

        Args:
            query: Query text, already escaped by the builder.
            offset: Index of the first result (``start``).
            limit: Number of results (``rows``).
            params: Remaining request parameters.

        Returns:
            Decoded JSON response.

        Raises:
            requests.HTTPError: On non-retryable HTTP errors, or the last
                retryable error once attempts are exhausted.
        """
        pairs = encode_params(query, offset, limit, params or {})
        log.debug("Solr select url=%s params=%s", self.url, pairs)
        response = self._get_with_retry(f"{self.url}/select", params=pairs)
        response.raise_for_status()
        return response.json()

    def get_fields(self) -> dict[str, Any]:
        """Return the indexed fields reported by the Luke request handler."""
        response = self._get_with_retry(
            f"{self.url}/admin/luke",
            params=[("numTerms", "0"), ("wt", "json")],
        )
        response.raise_for_status()
        payload = response.json()
        fields = payload.get("fields", {}) if isinstance(payload, dict) else {}
        return fields if isinstance(fields, dict) else {}

    def _get_with_retry(self, url: str, *, params: list[tuple[str, str]]) -> requests.Response:
        """Issue GET with retries for transient failures."""
        last_error: Exception | None = None
        for attempt in range(1, self.max_attempts + 1):
            try:
                response = self._session.get(url, params=params, headers=HEADERS, timeout=self.timeout)
                if response.status_code in RETRYABLE_STATUS:
                    raise requests.HTTPError(f"HTTP {response.status_code}", response=response)
                return response
            except (requests.Timeout, requests.ConnectionError, requests.HTTPError) as error:
                last_error = error
                if isinstance(error, requests.HTTPError):
                    status_code = getattr(error.response, "status_code", None)
                    if status_code not in RETRYABLE_STATUS:
                        raise
                if attempt < self.max_attempts:
                    delay = min(BASE_PAUSE * (2 ** (attempt - 1)) + random.uniform(0, 0.3), MAX_SLEEP)
                    log.debug("Solr retry attempt=%d/%d delay=%.2fs error=%s", attempt, self.max_attempts, delay, error)
                    time.sleep(delay)

        assert last_error is not None
        raise last_error
