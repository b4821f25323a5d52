# -*- coding: utf-8 -*-
"""Async HTTP client: one attempt per call, status classification left to callers.

Retries are not done here; callers wrap calls in a RetryPolicy so every
network-facing operation shares the same bounded policy.
"""

from __future__ import annotations

import asyncio
import json as jsonlib
import uuid
import aiohttp
import structlog
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional
from structlog.contextvars import bound_contextvars

from allocation_migrator.config import Settings
from allocation_migrator.exceptions import ServiceAPIError, ServiceUnavailableError


@dataclass(frozen=True, slots=True)
class HttpResponse:
    """Status and body of a completed HTTP exchange."""

    status: int
    text: str
    data: Any = None
    """Parsed JSON body, or None if the body is empty or not JSON."""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def retryable(self) -> bool:
        """True for 5xx and 429 (service-side or rate-limit failures)."""
        return self.status >= 500 or self.status == 429


class AsyncHttpClient:
    """Async HTTP client for the Dune, Safe Transaction Service and JSON-RPC endpoints.

    Injects Settings and optionally an aiohttp.ClientSession. If no session
    is provided, one is created and must be closed via aclose() or used
    as an async context manager.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        session: Optional[aiohttp.ClientSession] = None,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        """Initialize the client.

        Args:
            settings: Configuration (uses settings.api.timeout_seconds).
            session: Optional shared aiohttp session. If None, the client
                creates and owns a session (call aclose() when done).
            get_logger: Logger factory (injected) with default of structlog.get_logger.
            logger_name: Optional logger name (defaults to class name).
        """
        self._settings = settings
        self._session = session
        self._owns_session = session is None
        self._logger = get_logger(logger_name or self.__class__.__name__)

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self._settings.api.timeout_seconds)
            self._session = aiohttp.ClientSession(timeout=timeout)
        return self._session

    async def aclose(self) -> None:
        """Close the session if this client owns it."""
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> AsyncHttpClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    async def request(
        self,
        method: str,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> HttpResponse:
        """Perform one HTTP request and return the response whatever its status.

        Args:
            method: HTTP method (GET, POST, DELETE).
            url: Full URL to request.
            params: Optional query parameters.
            json: Optional JSON-serializable body.
            headers: Optional extra headers.

        Returns:
            HttpResponse with status, raw text and parsed JSON (if any).

        Raises:
            ServiceUnavailableError: On connection errors or timeouts.
        """
        request_id = uuid.uuid4().hex[:12]
        with bound_contextvars(
            http_method=method,
            http_url=url,
            http_request_id=request_id,
        ):
            try:
                session = await self._get_session()
                async with session.request(
                    method, url, params=params, json=json, headers=headers
                ) as response:
                    text = await response.text()
                    status = response.status
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                self._logger.warning(
                    "http_transport_error",
                    error_type=type(e).__name__,
                    error_message=str(e),
                )
                raise ServiceUnavailableError(
                    f"{method} {url} failed: {type(e).__name__}",
                    url=url,
                    cause=e,
                ) from e

            data: Any = None
            if text:
                try:
                    data = jsonlib.loads(text)
                except ValueError:
                    data = None
            self._logger.debug("http_response", http_status_code=status)
            return HttpResponse(status=status, text=text, data=data)

    async def _json(
        self,
        method: str,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        response = await self.request(method, url, params=params, json=json, headers=headers)
        if response.ok:
            return response.data
        error_cls = ServiceUnavailableError if response.retryable else ServiceAPIError
        self._logger.warning(
            f"http_{method.lower()}_failed",
            http_url=url,
            http_status_code=response.status,
            http_body=response.text[:500],
        )
        raise error_cls(
            f"{method} failed with status {response.status}: {url}",
            url=url,
            status_code=response.status,
            body=response.text,
        )

    async def get(
        self,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """Perform a GET request and return parsed JSON.

        Raises:
            ServiceUnavailableError: On transport errors, 5xx or 429.
            ServiceAPIError: On any other non-2xx status.
        """
        return await self._json("GET", url, params=params, headers=headers)

    async def post(
        self,
        url: str,
        *,
        json: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """Perform a POST request with JSON body and return parsed JSON.

        Raises:
            ServiceUnavailableError: On transport errors, 5xx or 429.
            ServiceAPIError: On any other non-2xx status.
        """
        return await self._json("POST", url, json=json or {}, headers=headers)
