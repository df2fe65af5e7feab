from maintgate.maintenance.gate import (
    GateConfig,
    MaintenanceGate,
    MaintenanceNotConfiguredError,
    ReadStateHook,
    WriteStateHook,
)

__all__ = ["GateConfig", "MaintenanceGate", "MaintenanceNotConfiguredError", "ReadStateHook", "WriteStateHook"]
