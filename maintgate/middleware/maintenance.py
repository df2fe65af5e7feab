from fastapi import FastAPI, Request

from maintgate.maintenance.gate import MaintenanceGate


def install_maintenance_gate(app: FastAPI, gate: MaintenanceGate) -> None:
    @app.middleware("http")
    async def maintenance_gate_middleware(request: Request, call_next):  # type: ignore[override]
        response = await gate.handle(request)
        if response is not None:
            return response
        return await call_next(request)
