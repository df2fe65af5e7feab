import pytest


class FakeClock:
    def __init__(self, start_ms: float = 1_000_000.0) -> None:
        self.now_ms = start_ms

    def __call__(self) -> float:
        return self.now_ms

    def advance(self, ms: float) -> None:
        self.now_ms += ms


@pytest.fixture(autouse=True)
def _isolated_maintgate_env(monkeypatch, tmp_path):
    for name in [
        "MAINTGATE_ENV",
        "MAINTGATE_MANAGEMENT_PATH",
        "MAINTGATE_PROTECTED_PREFIX",
        "MAINTGATE_ACCESS_KEY",
        "MAINTGATE_REFRESH_INTERVAL_MS",
        "MAINTGATE_STORE",
        "MAINTGATE_S3_BUCKET",
        "MAINTGATE_S3_KEY",
        "MAINTGATE_HTTP_STATE_URL",
        "MAINTGATE_HTTP_TIMEOUT_SEC",
        "MAINTGATE_CORS_ENABLED",
        "MAINTGATE_CORS_ALLOW_ORIGINS",
    ]:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("MAINTGATE_STATE_FILE", str(tmp_path / "state.json"))


@pytest.fixture
def clock():
    return FakeClock()
