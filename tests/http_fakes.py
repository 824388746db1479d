from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

import requests


@dataclass
class FakeResponse:
    status_code: int = 200
    json_data: Any = None
    text_data: str | None = None

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    @property
    def content(self) -> bytes:
        if self.text_data is not None:
            return self.text_data.encode()
        if self.json_data is None:
            return b""
        return json.dumps(self.json_data).encode()

    def json(self) -> Any:
        if self.text_data is not None:
            return json.loads(self.text_data)
        if self.json_data is None:
            raise requests.JSONDecodeError("Expecting value", "", 0)
        return self.json_data


def ok(data: Any) -> FakeResponse:
    return FakeResponse(200, {"result": {"data": data}})


def error(status: int, message: str | None = None) -> FakeResponse:
    body = {"error": {"message": message}} if message else {"error": {}}
    return FakeResponse(status, body)


class FakeSession:
    """Stands in for requests.Session; replies from a queue in call order."""

    def __init__(self, responses: list[FakeResponse | Exception] | None = None) -> None:
        self._responses = list(responses or [])
        self.requests: list[tuple[str, str, dict[str, Any]]] = []

    def queue(self, *responses: FakeResponse | Exception) -> None:
        self._responses.extend(responses)

    def request(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        self.requests.append((method, url, kwargs))
        if not self._responses:
            msg = "No fake responses available"
            raise AssertionError(msg)
        item = self._responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    @property
    def procedures(self) -> list[str]:
        return [url.rsplit("/", 1)[-1] for _, url, _ in self.requests]
