from pathlib import Path

from maintgate.config import GateSettings
from maintgate.store.base import StateStore, StateStoreFailedError
from maintgate.store.local import LocalStateStore
from maintgate.store.memory import MemoryStateStore
from maintgate.store.remote import HttpStateStore
from maintgate.store.s3 import s3_from_env


def get_state_store(settings: GateSettings) -> StateStore | None:
    store_kind = settings.store_kind
    if store_kind == "none":
        return None
    if store_kind == "memory":
        return MemoryStateStore()
    if store_kind == "local":
        return LocalStateStore(Path(settings.state_file))
    if store_kind == "s3":
        return s3_from_env()
    if store_kind == "http":
        return HttpStateStore(settings.http_state_url, timeout_sec=settings.http_timeout_sec)
    raise StateStoreFailedError(f"Unknown state store: {store_kind}")
