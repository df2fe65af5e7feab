#!/usr/bin/env python3
import os
import sys
from typing import Any

import httpx


def _required_env(name: str) -> str:
    value = os.getenv(name, "").strip()
    if not value:
        raise SystemExit(f"Missing required environment variable: {name}")
    return value


def _json_body(response: httpx.Response) -> dict[str, Any]:
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def _assert_status(endpoint: str, response: httpx.Response, expected: int) -> dict[str, Any]:
    body = _json_body(response)
    if response.status_code != expected:
        message = body.get("message", body.get("code", "unknown"))
        raise SystemExit(f"{endpoint} expected {expected}, got {response.status_code} ({message})")
    return body


def _print_result(endpoint: str, status_code: int, extra: str = "") -> None:
    print(f"{endpoint} -> {status_code}" + (f" {extra}" if extra else ""))


def main() -> int:
    base_url = _required_env("SMOKE_BASE_URL").rstrip("/")
    access_key = _required_env("SMOKE_ACCESS_KEY")
    management_path = os.getenv("SMOKE_MANAGEMENT_PATH", "/maintenance")
    api_path = os.getenv("SMOKE_API_PATH", "/api/status")
    timeout_sec = float(os.getenv("SMOKE_TIMEOUT_SEC", "30"))

    blocked_payload = {"statusCode": 503, "body": {"message": "smoke maintenance window"}}
    management_url = f"{base_url}{management_path}"
    auth_params = {"accessKey": access_key}

    with httpx.Client(timeout=timeout_sec) as client:
        health = client.get(f"{base_url}/health")
        _assert_status("GET /health", health, 200)
        _print_result("GET /health", health.status_code, extra=f"mode={_json_body(health).get('maintenance_mode')}")

        no_auth = client.get(management_url)
        _assert_status(f"GET {management_path} (no key)", no_auth, 401)
        _print_result(f"GET {management_path} (no key)", no_auth.status_code)

        activate = client.post(management_url, params=auth_params, json=blocked_payload)
        activate_body = _assert_status(f"POST {management_path}", activate, 200)
        _print_result(f"POST {management_path}", activate.status_code, extra=activate_body.get("message", ""))

        try:
            blocked = client.get(f"{base_url}{api_path}")
            blocked_body = _assert_status(f"GET {api_path} (maintenance)", blocked, 503)
            if blocked_body != blocked_payload["body"]:
                raise SystemExit(f"GET {api_path} (maintenance) returned an unexpected body")
            _print_result(f"GET {api_path} (maintenance)", blocked.status_code)
        finally:
            deactivate = client.delete(management_url, params=auth_params)
            deactivate_body = _assert_status(f"DELETE {management_path}", deactivate, 200)
            _print_result(f"DELETE {management_path}", deactivate.status_code, extra=deactivate_body.get("message", ""))

        passthrough = client.get(f"{base_url}{api_path}")
        _assert_status(f"GET {api_path} (default)", passthrough, 200)
        _print_result(f"GET {api_path} (default)", passthrough.status_code)

    print("Smoke completed.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
