"""
Resilient HTTP executor for provider requests.

Sends a RequestSpec with ``requests``, enforces a timeout, classifies failures
into the errors of ``notetagger.errors`` and retries server-side (5xx) failures
with exponential backoff.

Example:
    executor = RequestExecutor(timeout=30, max_retries=2)
    response = executor.execute(spec)
    print(response.body)
"""
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Any, Callable, Optional, Tuple

import requests

from ..errors import (
    MalformedResponseError,
    RemoteError,
    RequestTimeoutError,
    TransportError,
)
from ..providers.base import RawProviderResponse, RequestSpec

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
DEFAULT_MAX_RETRIES = 2
DEFAULT_INITIAL_BACKOFF = 1.0
DEFAULT_BACKOFF_FACTOR = 2.0


def _error_message(response: requests.Response) -> str:
    """Pull the provider's error message out of a failed response."""
    try:
        payload = response.json()
    except ValueError:
        payload = None

    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            return error["message"]
        if isinstance(error, str) and error:
            return error
        if isinstance(payload.get("message"), str):
            return payload["message"]

    text = response.text if isinstance(response.text, str) else ""
    return text.strip()[:200] or "Request failed"


class RequestExecutor:
    """
    Executes provider requests with a timeout and bounded retries.

    Only RemoteError with a 5xx status is retried. Client errors, timeouts,
    transport failures and undecodable bodies propagate on the first attempt.

    Args:
        timeout: Deadline for each attempt in seconds, body included (default 30)
        max_retries: Additional attempts after the first one (default 2)
        initial_backoff: Delay before the first retry in seconds (default 1)
        backoff_factor: Multiplier applied to the delay per retry (default 2)
        session: Optional requests.Session for connection pooling
        sleep: Function used to wait between attempts
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        max_retries: int = DEFAULT_MAX_RETRIES,
        initial_backoff: float = DEFAULT_INITIAL_BACKOFF,
        backoff_factor: float = DEFAULT_BACKOFF_FACTOR,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep
    ):
        if max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        self.timeout = timeout
        self.max_retries = max_retries
        self.initial_backoff = initial_backoff
        self.backoff_factor = backoff_factor
        self.session = session
        self._sleep = sleep

    def backoff_delay(self, retry_index: int) -> float:
        """Delay before retry number ``retry_index`` (0-based): 1s, 2s, 4s, ..."""
        return self.initial_backoff * (self.backoff_factor ** retry_index)

    def execute(self, spec: RequestSpec) -> RawProviderResponse:
        """
        Send ``spec`` until it succeeds or a non-retryable failure occurs.

        Returns:
            RawProviderResponse with the decoded JSON body

        Raises:
            RemoteError: Non-success status (after retries for 5xx)
            RequestTimeoutError: An attempt exceeded the timeout
            TransportError: No HTTP response was received
            MalformedResponseError: Success status but the body is not JSON
        """
        total_attempts = self.max_retries + 1
        attempt = 0

        while True:
            attempt += 1
            logger.debug("%s %s (attempt %d/%d)", spec.method, spec.url, attempt, total_attempts)
            try:
                status_code, body = self._send(spec)
            except RemoteError as e:
                if not e.is_transient:
                    raise
                if attempt >= total_attempts:
                    logger.error("Request to %s failed after %d attempts: %s", spec.url, attempt, e)
                    raise
                delay = self.backoff_delay(attempt - 1)
                logger.warning("Attempt %d failed: %s. Retrying in %.1fs...", attempt, e, delay)
                self._sleep(delay)
                continue

            return RawProviderResponse(status_code=status_code, body=body, attempts=attempt)

    def _send(self, spec: RequestSpec) -> Tuple[int, Any]:
        # The deadline covers the whole transfer, not only connect and each read
        pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix="notetagger-request")
        try:
            future = pool.submit(self._transfer, spec)
            try:
                response = future.result(timeout=self.timeout)
            except FutureTimeoutError as e:
                future.cancel()
                raise RequestTimeoutError(timeout=self.timeout) from e
        finally:
            pool.shutdown(wait=False)

        if not 200 <= response.status_code < 300:
            raise RemoteError(response.status_code, _error_message(response))

        try:
            body = response.json()
        except ValueError as e:
            raise MalformedResponseError(
                f"Provider returned invalid JSON (HTTP {response.status_code})"
            ) from e

        return response.status_code, body

    def _transfer(self, spec: RequestSpec) -> requests.Response:
        http = self.session if self.session is not None else requests

        try:
            return http.request(
                spec.method,
                spec.url,
                headers=spec.headers,
                json=spec.body,
                params=spec.params,
                timeout=self.timeout,
            )
        except requests.Timeout as e:
            raise RequestTimeoutError(timeout=self.timeout) from e
        except requests.RequestException as e:
            raise TransportError(f"Request to {spec.url} failed: {e}") from e
