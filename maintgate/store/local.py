import json
import os
from pathlib import Path
from uuid import uuid4

from pydantic import ValidationError

from maintgate.schemas import MaintenanceState
from maintgate.store.base import StateStore, StateStoreFailedError


class LocalStateStore(StateStore):
    """JSON document on a filesystem every replica can see (e.g. a shared volume)."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    @property
    def kind(self) -> str:
        return "local"

    def load(self) -> MaintenanceState | None:
        if not self.path.exists():
            return None
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
            return MaintenanceState.model_validate(payload)
        except (OSError, ValueError, ValidationError):
            return None

    def save(self, state: MaintenanceState) -> None:
        try:
            data = json.dumps(state.to_wire(), ensure_ascii=False, indent=2)
            self._atomic_write_text(data)
        except StateStoreFailedError:
            raise
        except Exception as exc:
            raise StateStoreFailedError("State store operation failed.") from exc

    def _atomic_write_text(self, text: str) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self.path.with_name(f"{self.path.name}.tmp.{uuid4().hex}")
            with tmp.open("w", encoding="utf-8") as f:
                f.write(text)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, self.path)
        except Exception as exc:
            raise StateStoreFailedError("State store operation failed.") from exc
