from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from maintgate.maintenance.gate import MaintenanceNotConfiguredError
from maintgate.schemas import ErrorResponse
from maintgate.store.base import StateStoreFailedError

# Gate failures are raised from middleware, above the router's exception
# middleware, so they only reach the server-error handler registered for
# Exception. The table below keeps the error codes distinguishable there.
ERROR_CONTRACT: list[tuple[type[Exception], str, str]] = [
    (StateStoreFailedError, "STATE_STORE_FAILED", "State store operation failed."),
    (MaintenanceNotConfiguredError, "MAINTENANCE_NOT_CONFIGURED", "Maintenance response is not configured."),
]


def _request_id_from_state(request: Request) -> str:
    value = getattr(request.state, "request_id", "")
    return value if isinstance(value, str) and value else "unknown-request-id"


def _error_response(request: Request, *, code: str, message: str, status_code: int) -> JSONResponse:
    request_id = _request_id_from_state(request)
    request.state.error_code = code
    body = ErrorResponse(code=code, message=message, request_id=request_id).model_dump()
    return JSONResponse(status_code=status_code, content=body)


def resolve_error_code(exc: Exception) -> tuple[str, str]:
    for error_type, code, message in ERROR_CONTRACT:
        if isinstance(exc, error_type):
            return code, message
    return "INTERNAL_ERROR", "Internal server error."


def install_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(Exception)
    async def internal_error_handler(request: Request, exc: Exception):
        code, message = resolve_error_code(exc)
        return _error_response(request, code=code, message=message, status_code=500)
