import logging
import time

from fastapi import FastAPI, Request

from maintgate.observability.logging import log_event

logger = logging.getLogger("maintgate.requests")

OPTIONAL_STATE_KEYS = ("maintenance_mode", "gate_action", "error_code")


def _latency_ms(start: float) -> int:
    return int(round((time.perf_counter() - start) * 1000))


def install_observability_middleware(app: FastAPI) -> None:
    @app.middleware("http")
    async def observability_middleware(request: Request, call_next):  # type: ignore[override]
        start = time.perf_counter()
        request_id = getattr(request.state, "request_id", "unknown-request-id")

        try:
            response = await call_next(request)
        except Exception as exc:
            log_event(
                logger,
                {
                    "event": "request.failed",
                    "request_id": request_id,
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": 500,
                    "latency_ms": _latency_ms(start),
                    "error_type": type(exc).__name__,
                    "gate_action": getattr(request.state, "gate_action", None),
                },
                level=logging.ERROR,
            )
            raise

        event = {
            "event": "request.completed",
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "latency_ms": _latency_ms(start),
        }
        for key in OPTIONAL_STATE_KEYS:
            value = getattr(request.state, key, None)
            if value is not None:
                event[key] = value

        log_event(logger, event)
        return response
