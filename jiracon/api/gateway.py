"""Request gateway — thin async client for the Jira REST API.

Usage:
    async with RequestGateway(base_url, username, token) as gateway:
        issue = await gateway.get("/rest/api/2/issue/:issueIdOrKey", {"issueIdOrKey": "DEV-1"})

Path templates carry ``:name`` placeholders that are filled from ``params``;
the consumed keys are not sent with the request.
"""

from __future__ import annotations

import contextlib
import json
import logging
import re
from typing import Any, Optional
from urllib.parse import quote

import httpx
from rich.console import Console

from jiracon.exceptions import GatewayError, RemoteError, TransportError

logger = logging.getLogger(__name__)

# Methods whose params travel as a JSON body instead of a query string
_BODY_METHODS = {"POST", "PUT", "PATCH"}


def path_replace(path: str, params: dict[str, Any]) -> tuple[str, dict[str, Any]]:
    """Fill ``/:name/`` and trailing ``/:name`` placeholders from params.

    Returns the filled path and a copy of params without the consumed keys.
    """
    remaining = dict(params)
    for key in list(remaining):
        pattern = re.compile(r"/:" + re.escape(str(key)) + r"(?=/|$)")
        if pattern.search(path):
            value = quote(str(remaining.pop(key)), safe="")
            path = pattern.sub(lambda _m: "/" + value, path)
    return path, remaining


def error_message(status_code: int, body: Any) -> str:
    """Human-readable message from a Jira error body.

    Jira reports field problems as ``{"errors": {field: message}}`` and
    everything else as ``{"errorMessages": [...]}``; the latter wins.
    """
    message = ""
    if isinstance(body, dict):
        errors = body.get("errors")
        if errors and isinstance(errors, dict):
            message = "\n".join(f"{key}: {value}" for key, value in errors.items())
        error_messages = body.get("errorMessages")
        if error_messages and isinstance(error_messages, list):
            message = ", ".join(str(m) for m in error_messages)
    return message or f"The request failed with status {status_code}"


class RequestGateway:
    """Async HTTP gateway for Jira.

    Args:
        base_url:  Jira site, e.g. "https://acme.atlassian.net"
        username:  Account e-mail / user name (basic auth)
        password:  API token or password (basic auth)
        timeout:   Request timeout in seconds (default 30)
        console:   rich Console used for the loading spinner
        transport: Optional httpx transport (tests pass httpx.MockTransport)

    Safe for concurrent use: all calls share one pooled httpx.AsyncClient.
    """

    def __init__(
        self,
        base_url: str,
        username: str = "",
        password: str = "",
        timeout: float = 30.0,
        console: Optional[Console] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._auth = httpx.BasicAuth(username, password) if username else None
        self._timeout = timeout
        self._console = console or Console(stderr=True)
        self._transport = transport
        self._http: Optional[httpx.AsyncClient] = None

    # ── Lifecycle ──────────────────────────────────────────────────────────

    async def __aenter__(self) -> "RequestGateway":
        await self.connect()
        return self

    async def __aexit__(self, *_) -> None:
        await self.close()

    async def connect(self) -> None:
        """Open the HTTP session."""
        if self._http is None:
            self._http = httpx.AsyncClient(
                base_url=self.base_url,
                auth=self._auth,
                timeout=self._timeout,
                headers={"Accept": "application/json"},
                transport=self._transport,
            )

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._http:
            await self._http.aclose()
            self._http = None

    # ── Calls ──────────────────────────────────────────────────────────────

    async def call(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, Any]] = None,
        show_spinner: bool = True,
    ) -> Any:
        """Make one API call.

        Args:
            method:       GET, POST, PUT, DELETE
            path:         Path template, e.g. "/rest/api/2/issue/:issueIdOrKey"
            params:       Placeholder values + query (GET/DELETE) or body (POST/PUT)
            show_spinner: Show the loading spinner while waiting

        Returns:
            Parsed JSON body, or None for empty responses (204).

        Raises:
            TransportError: no response was received.
            RemoteError:    status outside 200-299.
        """
        if self._http is None:
            await self.connect()

        method = method.upper()
        endpoint, remaining = path_replace(path, params or {})
        request_kwargs: dict[str, Any] = {}
        if method in _BODY_METHODS:
            request_kwargs["json"] = remaining
        elif remaining:
            request_kwargs["params"] = remaining

        spinner = self._console.status("[yellow]loading[/yellow]") if show_spinner else contextlib.nullcontext()
        logger.debug("%s %s", method, endpoint)
        try:
            with spinner:
                response = await self._http.request(method, endpoint, **request_kwargs)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, endpoint, exc)
            raise TransportError(
                f"Request to {endpoint} failed: {exc}", method=method, path=endpoint,
            ) from exc

        body = self._parse_body(response)
        if not (200 <= response.status_code < 300):
            message = error_message(response.status_code, body)
            logger.warning("%s %s -> %s: %s", method, endpoint, response.status_code, message)
            raise RemoteError(
                message,
                status_code=response.status_code,
                body=body,
                method=method,
                path=endpoint,
            )
        return body

    async def get(self, path: str, params: Optional[dict] = None, show_spinner: bool = True) -> Any:
        return await self.call("GET", path, params, show_spinner)

    async def post(self, path: str, params: Optional[dict] = None, show_spinner: bool = True) -> Any:
        return await self.call("POST", path, params, show_spinner)

    async def put(self, path: str, params: Optional[dict] = None, show_spinner: bool = True) -> Any:
        return await self.call("PUT", path, params, show_spinner)

    async def delete(self, path: str, params: Optional[dict] = None, show_spinner: bool = True) -> Any:
        return await self.call("DELETE", path, params, show_spinner)

    # ── Helpers ────────────────────────────────────────────────────────────

    @staticmethod
    def _parse_body(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except (json.JSONDecodeError, ValueError):
            return response.text


__all__ = ["RequestGateway", "GatewayError", "path_replace", "error_message"]
