from __future__ import annotations

import logging
from typing import Any, Optional

import requests

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0
RPC_PREFIX = "/api/trpc"


class RpcError(Exception):
    """A remote procedure failed: non-2xx status, transport error or bad body."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status = status


def _unwrap_superjson(value: Any) -> Any:
    if isinstance(value, dict) and "json" in value:
        return value["json"]
    return value


def _extract_result(body: Any) -> Any:
    """
    tRPC wraps payloads as {"result": {"data": ...}}. With the superjson
    transformer enabled the payload sits one level deeper under "json".
    """
    if not isinstance(body, dict):
        return None
    result = body.get("result") or {}
    data = result.get("data") if isinstance(result, dict) else None
    return _unwrap_superjson(data)


def _extract_error_message(body: Any) -> Optional[str]:
    if not isinstance(body, dict):
        return None
    error = _unwrap_superjson(body.get("error"))
    if isinstance(error, dict):
        message = error.get("message")
        if message:
            return str(message)
    return None


class RpcClient:
    """
    One HTTP session against the backend. The session's cookie jar holds the
    login cookie, so every call forwards it.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def url_for(self, procedure: str) -> str:
        return f"{self.base_url}{RPC_PREFIX}/{procedure}"

    def query(self, procedure: str, fallback: str = "Request failed") -> Any:
        return self._call("GET", procedure, None, fallback)

    def mutate(self, procedure: str, payload: Any = None, fallback: str = "Request failed") -> Any:
        return self._call("POST", procedure, payload, fallback)

    def _call(self, method: str, procedure: str, payload: Any, fallback: str) -> Any:
        url = self.url_for(procedure)
        kwargs: dict[str, Any] = {"timeout": self.timeout}
        if method == "POST":
            kwargs["json"] = {"json": payload}

        try:
            response = self.session.request(method, url, **kwargs)
        except requests.RequestException as e:
            logger.warning("%s %s failed: %s", method, procedure, e)
            raise RpcError(fallback) from e

        try:
            body = response.json()
        except ValueError:
            body = None

        if not response.ok:
            message = _extract_error_message(body) or fallback
            logger.info("%s %s returned %s: %s", method, procedure, response.status_code, message)
            raise RpcError(message, status=response.status_code)

        if body is None and response.content:
            raise RpcError(fallback, status=response.status_code)

        return _extract_result(body)
