import logging

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from maintgate.api.exception_handlers import install_exception_handlers
from maintgate.config import GateSettings, build_gate_config
from maintgate.maintenance.gate import MaintenanceGate
from maintgate.middleware.maintenance import install_maintenance_gate
from maintgate.middleware.observability import install_observability_middleware
from maintgate.middleware.request_id import REQUEST_ID_HEADER, install_request_id_middleware
from maintgate.observability.logging import log_event, setup_logging
from maintgate.schemas import HealthResponse
from maintgate.store.factory import get_state_store

logger = logging.getLogger("maintgate.app")


def create_app(gate: MaintenanceGate | None = None) -> FastAPI:
    load_dotenv()
    setup_logging()
    settings = GateSettings.from_env()
    if settings.environment == "prod" and not settings.access_key:
        raise RuntimeError("An access key is required when MAINTGATE_ENV=prod.")

    if gate is None:
        store = get_state_store(settings)
        gate = MaintenanceGate(build_gate_config(settings, store))
        store_kind = store.kind if store is not None else "none"
    else:
        # An injected gate brings its own hooks; the env store is not used.
        store_kind = "custom"

    app = FastAPI(
        title="maintgate",
        version="0.1.0",
        docs_url=None if settings.environment == "prod" else "/docs",
        redoc_url=None if settings.environment == "prod" else "/redoc",
        openapi_url=None if settings.environment == "prod" else "/openapi.json",
    )
    # Starlette runs the last installed middleware first: CORS, request id, logging, then the gate.
    install_maintenance_gate(app, gate)
    install_observability_middleware(app)
    install_request_id_middleware(app)
    if settings.cors_enabled:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.resolve_cors_allow_origins(),
            allow_methods=["*"],
            allow_headers=[REQUEST_ID_HEADER, "Content-Type", "Authorization"],
        )
    install_exception_handlers(app)

    log_event(
        logger,
        {
            "event": "app.configured",
            "environment": settings.environment,
            "store": store_kind,
            "management_path": gate.config.management_path,
            "protected_prefix": gate.config.protected_prefix,
            "refresh_interval_ms": gate.config.refresh_interval_ms,
            "access_key_configured": bool(gate.config.access_key),
        },
    )

    @app.get("/health", response_model=HealthResponse)
    def health() -> HealthResponse:
        return HealthResponse(status="ok", maintenance_mode=gate.mode, store=store_kind)

    @app.get("/api/status")
    def api_status(request: Request) -> dict[str, str]:
        return {"status": "ok", "request_id": request.state.request_id}

    return app


app = create_app()
