"""Outbound JSON REST client with bounded retry and fault translation."""

from __future__ import annotations

from collections.abc import Callable
from collections.abc import Mapping
import logging
import time
from typing import Any
from urllib.parse import urljoin

import requests

from faultline.core.config import OutboundSettings
from faultline.core.error_codes import ErrorCode
from faultline.core.faults import Fault
from faultline.core.retry import RetryExhaustedError
from faultline.core.retry import execute_with_retry

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})


class RetryableStatusError(RuntimeError):
    """Raised for responses whose status is worth retrying."""

    def __init__(self, method: str, url: str, status_code: int) -> None:
        super().__init__(f"{method} {url} returned retryable status {status_code}")
        self.status_code = status_code


RETRYABLE_ERRORS = (requests.Timeout, requests.ConnectionError, RetryableStatusError)


class RestClient:
    """Call a JSON API, retrying transient failures and raising Faults otherwise."""

    def __init__(
        self,
        *,
        base_url: str = "",
        api_token: str = "",
        connect_timeout_seconds: float = 10.0,
        read_timeout_seconds: float = 30.0,
        max_attempts: int = 3,
        retry_delay_seconds: float = 1.0,
        session: requests.Session | None = None,
        sleep_fn: Callable[[float], None] = time.sleep,
    ) -> None:
        if connect_timeout_seconds <= 0 or read_timeout_seconds <= 0:
            raise ValueError("timeouts must be positive")
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if retry_delay_seconds < 0:
            raise ValueError("retry_delay_seconds must be >= 0")

        self._base_url = base_url.rstrip("/")
        self._api_token = api_token
        self._timeout = (connect_timeout_seconds, read_timeout_seconds)
        self._max_attempts = max_attempts
        self._retry_delay_seconds = retry_delay_seconds
        self._session = session or requests.Session()
        self._sleep_fn = sleep_fn

    @classmethod
    def from_settings(cls, settings: OutboundSettings, **overrides: Any) -> RestClient:
        options: dict[str, Any] = {
            "base_url": settings.base_url,
            "api_token": settings.api_token,
            "connect_timeout_seconds": settings.connect_timeout_seconds,
            "read_timeout_seconds": settings.read_timeout_seconds,
            "max_attempts": settings.retry_max_attempts,
            "retry_delay_seconds": settings.retry_delay_seconds,
        }
        options.update(overrides)
        return cls(**options)

    def get(
        self,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, Any] | None = None,
    ) -> Any:
        return self.exchange("GET", url, headers=headers, params=params)

    def post(self, url: str, body: Any = None, *, headers: Mapping[str, str] | None = None) -> Any:
        return self.exchange("POST", url, body=body, headers=headers)

    def put(self, url: str, body: Any = None, *, headers: Mapping[str, str] | None = None) -> Any:
        return self.exchange("PUT", url, body=body, headers=headers)

    def delete(self, url: str, *, headers: Mapping[str, str] | None = None) -> None:
        self.exchange("DELETE", url, headers=headers)

    def exchange(
        self,
        method: str,
        url: str,
        *,
        body: Any = None,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, Any] | None = None,
    ) -> Any:
        """Send one request and return the decoded JSON body (``None`` when empty)."""
        method = method.upper()
        target = self._resolve(url)
        logger.debug("%s request to: %s", method, target)

        def _attempt() -> requests.Response:
            return self._send(method, target, body=body, headers=headers, params=params)

        try:
            response = execute_with_retry(
                _attempt,
                self._max_attempts,
                self._retry_delay_seconds,
                RETRYABLE_ERRORS,
                sleep_fn=self._sleep_fn,
            )
        except RetryExhaustedError as exc:
            raise _fault_for(exc.last_error, method, target) from exc.last_error
        except requests.RequestException as exc:
            raise _fault_for(exc, method, target) from exc

        return self._decode(response, method, target)

    def _send(
        self,
        method: str,
        url: str,
        *,
        body: Any,
        headers: Mapping[str, str] | None,
        params: Mapping[str, Any] | None,
    ) -> requests.Response:
        response = self._session.request(
            method,
            url,
            headers=self._headers(headers),
            params=dict(params) if params else None,
            json=body,
            timeout=self._timeout,
        )
        if response.status_code in RETRYABLE_STATUS_CODES:
            raise RetryableStatusError(method, url, response.status_code)
        response.raise_for_status()
        return response

    def _headers(self, extra: Mapping[str, str] | None) -> dict[str, str]:
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "User-Agent": "faultline-rest/0.1",
        }
        if self._api_token:
            headers["Authorization"] = f"Bearer {self._api_token}"
        if extra:
            headers.update(extra)
        return headers

    def _resolve(self, url: str) -> str:
        if not self._base_url or url.startswith(("http://", "https://")):
            return url
        return urljoin(f"{self._base_url}/", url.lstrip("/"))

    @staticmethod
    def _decode(response: requests.Response, method: str, url: str) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            logger.error("%s %s returned a non-JSON body", method, url)
            raise Fault(
                ErrorCode.EXTERNAL_SERVICE_ERROR,
                "Response from {0} {1} is not valid JSON",
                method,
                url,
                cause=exc,
            ) from exc


def _fault_for(error: BaseException, method: str, url: str) -> Fault:
    """Map a transport or status failure onto the external-dependency band."""
    logger.error("%s request to %s failed: %s", method, url, error)
    if isinstance(error, requests.Timeout):
        return Fault(ErrorCode.EXTERNAL_SERVICE_TIMEOUT, "{0} {1} timed out", method, url, cause=error)
    if isinstance(error, (requests.ConnectionError, RetryableStatusError)):
        return Fault(ErrorCode.EXTERNAL_SERVICE_UNAVAILABLE, "{0} {1} is unavailable", method, url, cause=error)
    return Fault(ErrorCode.EXTERNAL_SERVICE_ERROR, "Failed to call external service", cause=error)
