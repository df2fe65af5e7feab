import json
import os
from typing import Any

from maintgate.schemas import MaintenanceState
from maintgate.store.base import StateStore, StateStoreFailedError

MISSING_KEY_CODES = {"NoSuchKey", "404"}


class S3StateStore(StateStore):
    def __init__(self, bucket: str, key: str = "maintgate/state.json", s3_client: Any | None = None) -> None:
        self.bucket = bucket
        self.key = key.lstrip("/")
        self._s3_client = s3_client

    @property
    def kind(self) -> str:
        return "s3"

    @property
    def client(self):
        if self._s3_client is not None:
            return self._s3_client
        try:
            import boto3  # type: ignore
        except Exception as exc:
            raise StateStoreFailedError("State store operation failed.") from exc
        self._s3_client = boto3.client("s3")
        return self._s3_client

    def load(self) -> MaintenanceState | None:
        if not self.bucket:
            raise StateStoreFailedError("State store operation failed.")
        try:
            obj = self.client.get_object(Bucket=self.bucket, Key=self.key)
        except Exception as exc:
            if _error_code(exc) in MISSING_KEY_CODES:
                return None
            raise StateStoreFailedError("State store operation failed.") from exc
        try:
            raw = obj["Body"].read().decode("utf-8")
            return MaintenanceState.model_validate(json.loads(raw))
        except Exception as exc:
            raise StateStoreFailedError("State store operation failed.") from exc

    def save(self, state: MaintenanceState) -> None:
        body = json.dumps(state.to_wire(), ensure_ascii=False).encode("utf-8")
        try:
            if not self.bucket:
                raise StateStoreFailedError("State store operation failed.")
            self.client.put_object(Bucket=self.bucket, Key=self.key, Body=body, ContentType="application/json")
        except StateStoreFailedError:
            raise
        except Exception as exc:
            raise StateStoreFailedError("State store operation failed.") from exc


def _error_code(exc: Exception) -> str:
    response = getattr(exc, "response", None)
    if not isinstance(response, dict):
        return ""
    error = response.get("Error")
    if not isinstance(error, dict):
        return ""
    return str(error.get("Code", ""))


def s3_from_env() -> "S3StateStore":
    bucket = os.getenv("MAINTGATE_S3_BUCKET", "")
    key = os.getenv("MAINTGATE_S3_KEY", "maintgate/state.json")
    return S3StateStore(bucket=bucket, key=key)
