from maintgate.schemas import MaintenanceState
from maintgate.store.base import StateStore


class MemoryStateStore(StateStore):
    def __init__(self, state: MaintenanceState | None = None) -> None:
        self._state = state.model_copy(deep=True) if state is not None else None

    @property
    def kind(self) -> str:
        return "memory"

    def load(self) -> MaintenanceState | None:
        if self._state is None:
            return None
        return self._state.model_copy(deep=True)

    def save(self, state: MaintenanceState) -> None:
        self._state = state.model_copy(deep=True)
