import os
from dataclasses import dataclass

from maintgate.maintenance.gate import GateConfig
from maintgate.store.base import StateStore
from maintgate.store.hooks import store_hooks

STORE_KINDS = {"none", "memory", "local", "s3", "http"}


def _is_enabled(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _parse_refresh_interval(raw: str) -> int:
    try:
        value = int(raw.strip())
    except ValueError as exc:
        raise ValueError("MAINTGATE_REFRESH_INTERVAL_MS must be an integer number of milliseconds.") from exc
    if value < 0:
        raise ValueError("MAINTGATE_REFRESH_INTERVAL_MS must not be negative.")
    return value


def _parse_timeout_sec(raw: str) -> float:
    try:
        value = float(raw.strip())
    except ValueError as exc:
        raise ValueError("MAINTGATE_HTTP_TIMEOUT_SEC must be a number of seconds.") from exc
    if value <= 0:
        raise ValueError("MAINTGATE_HTTP_TIMEOUT_SEC must be positive.")
    return value


@dataclass(frozen=True)
class GateSettings:
    environment: str = "dev"
    management_path: str = "/maintenance"
    protected_prefix: str = "/api"
    access_key: str | None = None
    refresh_interval_ms: int = 60000
    store_kind: str = "none"
    state_file: str = "./data/maintenance_state.json"
    http_state_url: str = ""
    http_timeout_sec: float = 10.0
    cors_enabled: bool = False
    cors_allow_origins: tuple[str, ...] | None = None

    @classmethod
    def from_env(cls) -> "GateSettings":
        store_kind = os.getenv("MAINTGATE_STORE", "none").strip().lower() or "none"
        if store_kind not in STORE_KINDS:
            raise ValueError(f"MAINTGATE_STORE must be one of {sorted(STORE_KINDS)}.")

        raw_origins = os.getenv("MAINTGATE_CORS_ALLOW_ORIGINS")
        origins = None
        if raw_origins is not None:
            origins = tuple(item.strip() for item in raw_origins.split(",") if item.strip())

        return cls(
            environment=os.getenv("MAINTGATE_ENV", "dev").strip().lower(),
            management_path=os.getenv("MAINTGATE_MANAGEMENT_PATH", "/maintenance"),
            protected_prefix=os.getenv("MAINTGATE_PROTECTED_PREFIX", "/api"),
            access_key=os.getenv("MAINTGATE_ACCESS_KEY", "").strip() or None,
            refresh_interval_ms=_parse_refresh_interval(os.getenv("MAINTGATE_REFRESH_INTERVAL_MS", "60000")),
            store_kind=store_kind,
            state_file=os.getenv("MAINTGATE_STATE_FILE", "./data/maintenance_state.json"),
            http_state_url=os.getenv("MAINTGATE_HTTP_STATE_URL", "").strip(),
            http_timeout_sec=_parse_timeout_sec(os.getenv("MAINTGATE_HTTP_TIMEOUT_SEC", "10")),
            cors_enabled=_is_enabled(os.getenv("MAINTGATE_CORS_ENABLED", "0")),
            cors_allow_origins=origins,
        )

    def resolve_cors_allow_origins(self) -> list[str]:
        if self.cors_allow_origins is None:
            return ["*"] if self.environment == "dev" else []
        return list(self.cors_allow_origins)


def build_gate_config(settings: GateSettings, store: StateStore | None = None) -> GateConfig:
    read_hook = write_hook = None
    if store is not None:
        read_hook, write_hook = store_hooks(store)
    return GateConfig(
        management_path=settings.management_path,
        protected_prefix=settings.protected_prefix,
        access_key=settings.access_key,
        refresh_interval_ms=settings.refresh_interval_ms,
        read_external_state=read_hook,
        write_external_state=write_hook,
    )
