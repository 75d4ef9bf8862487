"""Post-deploy smoke checks executed from the app container.

Signs a short-lived access token with the deployed SECRET_KEY, reads the slot
catalog, the caller's sessions and the availability status. Nothing is booked.
"""

from __future__ import annotations

import json
import os
import urllib.error
import urllib.request
from uuid import uuid4

from app.core.security import create_access_token

BASE_URL = os.environ.get("SMOKE_BASE_URL", "http://localhost:8000")


def request(
    path: str,
    *,
    headers: dict[str, str] | None = None,
    expected: int = 200,
) -> bytes:
    req_headers = {"Accept": "application/json"}
    if headers:
        req_headers.update(headers)

    request_obj = urllib.request.Request(f"{BASE_URL}{path}", method="GET", headers=req_headers)
    try:
        with urllib.request.urlopen(request_obj, timeout=30) as response:
            content = response.read()
            status = response.getcode()
    except urllib.error.HTTPError as exc:  # pragma: no cover - runtime smoke script
        body_text = exc.read().decode("utf-8", errors="ignore")
        raise RuntimeError(f"GET {path} -> {exc.code}: {body_text}") from exc

    if status != expected:
        raise RuntimeError(f"GET {path} -> {status}, expected {expected}")
    return content


def main() -> None:
    for endpoint in ["/health", "/ready", "/docs", "/metrics", "/api/v1/advising/slots"]:
        request(endpoint)

    token = create_access_token(subject=str(uuid4()), expires_minutes=5, role="student")
    auth = {"Authorization": f"Bearer {token}"}

    caller = json.loads(request("/api/v1/identity/me", headers=auth).decode("utf-8"))
    if caller["role"] != "student":
        raise RuntimeError(f"Unexpected caller role: {caller['role']}")

    sessions = json.loads(request("/api/v1/advising/sessions/my", headers=auth).decode("utf-8"))
    if sessions["upcoming"] or sessions["past"]:
        raise RuntimeError("Fresh smoke caller should have no sessions")

    request("/api/v1/availability/status", headers=auth)

    print("Smoke checks passed.")


if __name__ == "__main__":
    main()
