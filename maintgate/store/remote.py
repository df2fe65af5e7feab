from typing import Any

import httpx
from pydantic import ValidationError

from maintgate.schemas import MaintenanceState
from maintgate.store.base import StateStore, StateStoreFailedError


class HttpStateStore(StateStore):
    """State kept as a JSON document behind a plain GET/PUT endpoint."""

    def __init__(self, url: str, *, timeout_sec: float = 10.0, headers: dict[str, str] | None = None, transport: Any | None = None) -> None:
        self.url = url
        self.timeout_sec = timeout_sec
        self.headers = dict(headers or {})
        self._transport = transport

    @property
    def kind(self) -> str:
        return "http"

    def _client(self) -> httpx.Client:
        return httpx.Client(timeout=self.timeout_sec, headers=self.headers, transport=self._transport)

    def load(self) -> MaintenanceState | None:
        if not self.url:
            raise StateStoreFailedError("State store operation failed.")
        try:
            with self._client() as client:
                response = client.get(self.url)
        except httpx.HTTPError as exc:
            raise StateStoreFailedError("State store operation failed.") from exc
        if response.status_code == 404:
            return None
        if response.status_code >= 400:
            raise StateStoreFailedError("State store operation failed.")
        if not response.content.strip():
            return None
        try:
            payload: Any = response.json()
        except ValueError as exc:
            raise StateStoreFailedError("State store operation failed.") from exc
        if payload is None:
            return None
        try:
            return MaintenanceState.model_validate(payload)
        except ValidationError as exc:
            raise StateStoreFailedError("State store operation failed.") from exc

    def save(self, state: MaintenanceState) -> None:
        if not self.url:
            raise StateStoreFailedError("State store operation failed.")
        try:
            with self._client() as client:
                response = client.put(self.url, json=state.to_wire())
        except httpx.HTTPError as exc:
            raise StateStoreFailedError("State store operation failed.") from exc
        if response.status_code >= 400:
            raise StateStoreFailedError("State store operation failed.")
