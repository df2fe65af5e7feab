from abc import ABC, abstractmethod

from maintgate.schemas import MaintenanceState


class StateStoreFailedError(Exception):
    pass


class StateStore(ABC):
    """Client of the store that holds maintenance state shared by all replicas."""

    @property
    @abstractmethod
    def kind(self) -> str:
        raise NotImplementedError

    @abstractmethod
    def load(self) -> MaintenanceState | None:
        """Return the stored state, or ``None`` when nothing has been saved yet."""
        raise NotImplementedError

    @abstractmethod
    def save(self, state: MaintenanceState) -> None:
        raise NotImplementedError
