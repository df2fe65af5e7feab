import hmac
import inspect
import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Union

from fastapi import Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from maintgate.observability.logging import log_event
from maintgate.observability.timing import Timer
from maintgate.schemas import MaintenanceResponseOptions, MaintenanceState, ServerMode

logger = logging.getLogger("maintgate.gate")

ReadStateHook = Callable[[], Union[MaintenanceState, None, Awaitable[Union[MaintenanceState, None]]]]
WriteStateHook = Callable[[MaintenanceState], Union[None, Awaitable[None]]]

ACCESS_KEY_PARAM = "accessKey"
UNAUTHORIZED_MESSAGE = "You not authorized to perform this action"
INVALID_OPTIONS_MESSAGE = "Maintenance response options must be {statusCode, body}"


class MaintenanceNotConfiguredError(Exception):
    pass


class InvalidResponseOptionsError(Exception):
    pass


@dataclass(frozen=True)
class GateConfig:
    management_path: str = "/maintenance"
    protected_prefix: str = "/api"
    access_key: str | None = None
    refresh_interval_ms: int = 60000
    read_external_state: ReadStateHook | None = None
    write_external_state: WriteStateHook | None = None


def wall_clock_ms() -> float:
    return time.time() * 1000


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class MaintenanceGate:
    """Per-request maintenance decision plus a TTL'd view of the shared state.

    ``handle`` returns a response when the gate answers the request itself
    (blocked API call or management command) and ``None`` to pass through.
    The only suspension points are the external read and write hooks; the
    local state is not locked and relies on the event loop serializing access.
    """

    def __init__(self, config: GateConfig | None = None, *, clock: Callable[[], float] = wall_clock_ms) -> None:
        self.config = config or GateConfig()
        self._clock = clock
        self.state = MaintenanceState()
        self.last_refreshed_at = clock()

    @property
    def mode(self) -> ServerMode:
        return self.state.mode

    def is_maintenance_mode(self) -> bool:
        return self.state.mode == ServerMode.maintenance

    def is_protected_path(self, path: str) -> bool:
        return self.config.protected_prefix in path

    def is_management_path(self, path: str) -> bool:
        return path.endswith(self.config.management_path)

    def snapshot(self) -> MaintenanceState:
        return self.state.model_copy(deep=True)

    async def handle(self, request: Request) -> JSONResponse | None:
        await self.refresh()
        path = request.url.path
        request.state.maintenance_mode = self.state.mode.value

        # Blocking wins over the management check when both paths match.
        if self.is_maintenance_mode() and self.is_protected_path(path):
            request.state.gate_action = "blocked"
            return self._blocked_response()

        if self.is_management_path(path):
            request.state.gate_action = "management"
            response = await self._handle_management(request)
            request.state.maintenance_mode = self.state.mode.value
            return response

        request.state.gate_action = "passthrough"
        return None

    def is_refresh_due(self, now: float | None = None) -> bool:
        current = self._clock() if now is None else now
        return current - self.last_refreshed_at >= self.config.refresh_interval_ms

    async def refresh(self) -> bool:
        read_state = self.config.read_external_state
        if read_state is None:
            return False
        now = self._clock()
        if not self.is_refresh_due(now):
            return False

        timer = Timer()
        with timer.measure("refresh_ms"):
            external = await _maybe_await(read_state())
        if external is None:
            log_event(
                logger,
                {"event": "maintenance.refresh_skipped", "refresh_ms": timer.get("refresh_ms")},
                level=logging.DEBUG,
            )
            return False
        if not isinstance(external, MaintenanceState):
            external = MaintenanceState.model_validate(external)

        self.state.mode = external.mode
        self.state.response_options = external.response_options
        self.last_refreshed_at = now
        log_event(
            logger,
            {
                "event": "maintenance.refreshed",
                "mode": self.state.mode.value,
                "refresh_ms": timer.get("refresh_ms"),
            },
        )
        return True

    async def activate(self, response_options: MaintenanceResponseOptions | None = None) -> MaintenanceState:
        self.state.mode = ServerMode.maintenance
        if response_options is not None:
            self.state.response_options = response_options
        write_ms = await self._persist()
        log_event(logger, {"event": "maintenance.activated", "mode": self.state.mode.value, "write_ms": write_ms})
        return self.snapshot()

    async def deactivate(self) -> MaintenanceState:
        self.state.mode = ServerMode.default
        write_ms = await self._persist()
        log_event(logger, {"event": "maintenance.deactivated", "mode": self.state.mode.value, "write_ms": write_ms})
        return self.snapshot()

    async def _persist(self) -> int | None:
        write_state = self.config.write_external_state
        if write_state is None:
            return None
        timer = Timer()
        with timer.measure("write_ms"):
            await _maybe_await(write_state(self.snapshot()))
        return timer.get("write_ms")

    def _blocked_response(self) -> JSONResponse:
        options = self.state.response_options
        if options is None:
            raise MaintenanceNotConfiguredError("Maintenance mode is active but no response options were set.")
        return JSONResponse(status_code=options.status_code, content=options.body)

    def _is_authorized(self, request: Request) -> bool:
        expected = self.config.access_key
        if not expected:
            return True
        provided = request.query_params.get(ACCESS_KEY_PARAM)
        if provided is None:
            return False
        return hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))

    def _mode_message(self) -> str:
        return f"Server in {self.state.mode.value} mode now"

    def _state_payload(self) -> dict[str, Any]:
        options = self.state.response_options
        return {
            "message": self._mode_message(),
            "maintenanceResponseOptions": options.model_dump(mode="json", by_alias=True) if options else None,
        }

    async def _read_response_options(self, request: Request) -> MaintenanceResponseOptions | None:
        raw = await request.body()
        if not raw.strip():
            return None
        try:
            payload = json.loads(raw)
        except ValueError as exc:
            raise InvalidResponseOptionsError(INVALID_OPTIONS_MESSAGE) from exc
        if payload is None:
            return None
        try:
            return MaintenanceResponseOptions.model_validate(payload)
        except ValidationError as exc:
            raise InvalidResponseOptionsError(INVALID_OPTIONS_MESSAGE) from exc

    async def _handle_management(self, request: Request) -> JSONResponse:
        method = request.method.upper()
        if not self._is_authorized(request):
            log_event(
                logger,
                {"event": "maintenance.unauthorized", "method": method, "path": request.url.path},
                level=logging.WARNING,
            )
            return JSONResponse(status_code=401, content={"message": UNAUTHORIZED_MESSAGE})

        if method == "GET":
            return JSONResponse(status_code=200, content={"message": self._mode_message()})

        if method == "POST":
            try:
                options = await self._read_response_options(request)
            except InvalidResponseOptionsError as exc:
                return JSONResponse(status_code=422, content={"message": str(exc)})
            await self.activate(options)
        elif method == "DELETE":
            await self.deactivate()
        else:
            log_event(
                logger,
                {"event": "maintenance.method_not_allowed", "method": method, "path": request.url.path},
                level=logging.WARNING,
            )
            return JSONResponse(status_code=405, content={"message": f"{method} is not allowed for this endpoint"})

        return JSONResponse(status_code=200, content=self._state_payload())
