from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..http_client import HttpClient


@dataclass
class BaseClient:
    http: HttpClient
    app_id: str | None = None
    device_id: str | None = None

    def _client_headers(self) -> dict[str, str]:
        headers: dict[str, str] = {}
        if self.app_id:
            headers["X-App-ID"] = self.app_id
        if self.device_id:
            headers["X-Device-ID"] = self.device_id
        return headers

    def _request(self, method: str, path: str, **kwargs: Any):
        headers = kwargs.pop("headers", {})
        merged = {**self._client_headers(), **headers}
        return self.http.request(method, path, headers=merged, **kwargs)


def expect_object(payload: object, what: str) -> dict[str, Any]:
    if not isinstance(payload, dict):
        raise ValueError(f"Expected {what} response to be a JSON object")
    return payload


def expect_rows(payload: object, what: str) -> list[Any]:
    if isinstance(payload, dict):
        payload = payload.get("rows", payload.get("items"))
    if not isinstance(payload, list):
        raise ValueError(f"Expected {what} response to be a JSON array")
    return payload
