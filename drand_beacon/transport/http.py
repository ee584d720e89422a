"""
drand_beacon.transport.http
===========================

HTTP transport for drand endpoints, on top of an internal ``httpx.Client``.

Status mapping
--------------
- 200          -> response body (text)
- 404          -> NotFound
- anything else, or a transport failure after retries -> UnexpectedResponse

Timeouts and connection errors are retried with exponential backoff; HTTP
error statuses are not (a 5xx from one node is the caller's cue to try
another endpoint).

Usage
-----
    with HttpTransport(timeout=5.0) as t:
        body = t.fetch("https://api.drand.sh/info")

Timeout, retries and backoff come from the caller (``ClientConfig`` when the
transport is built by ``new_http_client``); unset values use the package
defaults.
"""

from __future__ import annotations

import logging
import os
import time
from typing import Dict, Optional

import httpx

from ..constants import DEFAULT_BACKOFF_BASE_S, DEFAULT_HTTP_RETRIES, DEFAULT_HTTP_TIMEOUT_S
from ..errors import NotFound, UnexpectedResponse

logger = logging.getLogger(__name__)

__all__ = ["HttpTransport"]


class HttpTransport:
    """Synchronous transport with retries; safe to use as a context manager."""

    def __init__(
        self,
        *,
        timeout: Optional[float] = None,
        retries: Optional[int] = None,
        backoff_base: Optional[float] = None,
        user_agent: Optional[str] = None,
        client: Optional[httpx.Client] = None,
        sleep=time.sleep,
    ) -> None:
        self.timeout = float(timeout if timeout is not None else DEFAULT_HTTP_TIMEOUT_S)
        self.retries = int(retries if retries is not None else DEFAULT_HTTP_RETRIES)
        self.backoff_base = float(backoff_base if backoff_base is not None else DEFAULT_BACKOFF_BASE_S)
        self._sleep = sleep

        headers: Dict[str, str] = {"Accept": "application/json"}
        if user_agent:
            headers["User-Agent"] = user_agent

        self._own_client = client is None
        self._client = client or httpx.Client(headers=headers, timeout=self.timeout, follow_redirects=True)

    # --- context management

    def close(self) -> None:
        if self._own_client:
            self._client.close()

    def __enter__(self) -> "HttpTransport":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # --- Transport protocol

    def fetch(self, url: str) -> str:
        resp = self._get_with_retries(url)
        if resp.status_code == httpx.codes.OK:
            return resp.text
        if resp.status_code == httpx.codes.NOT_FOUND:
            raise NotFound(url)
        raise UnexpectedResponse(url, status_code=resp.status_code, detail=resp.text[:200] or None)

    # --- internals

    def _get_with_retries(self, url: str) -> httpx.Response:
        for attempt in range(max(1, self.retries + 1)):
            try:
                return self._client.get(url)
            except (httpx.TimeoutException, httpx.TransportError) as e:
                if attempt >= self.retries:
                    logger.warning("GET %s failed after %d attempt(s): %s", url, attempt + 1, e)
                    raise UnexpectedResponse(url, detail=str(e) or type(e).__name__) from e
                delay = self._backoff(attempt)
                logger.debug("GET %s failed (%s); retrying in %.2fs", url, e, delay)
                self._sleep(delay)
        raise AssertionError("unreachable")

    def _backoff(self, attempt: int) -> float:
        # attempt: 0,1,2,… -> base * 2^attempt with a small deterministic jitter
        base = self.backoff_base
        jitter = 0.1 * base * ((os.getpid() % 7) / 7.0)
        return base * (2 ** attempt) + jitter
