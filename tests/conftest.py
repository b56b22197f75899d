import io
import json
import os
import urllib.request
from typing import Any, Dict, List, Optional
from urllib.error import HTTPError

import pytest

WEBHOOK_URL = "https://hooks.example/T1"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Drop any SLACK_* / GITHUB_* values inherited from the runner."""
    for key in list(os.environ):
        if key.startswith(("SLACK_", "GITHUB_")):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def scenario_env(monkeypatch: pytest.MonkeyPatch) -> Dict[str, str]:
    env = {
        "SLACK_WEBHOOK_URL": WEBHOOK_URL,
        "SLACK_STATUS": "Success",
        "SLACK_AUTHOR": "Jane Doe",
        "SLACK_EMAIL": "",
        "SLACK_COMMIT_ID": "abcdef1234567",
        "SLACK_COMMIT_MSG": "Fix bug\n\nDetails...",
        "SLACK_COMMIT_URL": "https://git/x/commit/abcdef1234567",
        "GITHUB_REPOSITORY": "acme/widget",
        "GITHUB_WORKFLOW": "CI",
        "GITHUB_RUN_ID": "42",
        "GITHUB_RUN_NUMBER": "7",
    }
    for key, value in env.items():
        monkeypatch.setenv(key, value)
    return env


class FakeResponse:
    def __init__(self, status: int, body: bytes) -> None:
        self.status = status
        self.reason = "OK"
        self._body = body

    def getcode(self) -> int:
        return self.status

    def read(self) -> bytes:
        return self._body

    def __enter__(self) -> "FakeResponse":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        return None


class FakeUrlopen:
    """Stand-in for ``urllib.request.urlopen`` that records every request."""

    def __init__(self) -> None:
        self.requests: List[urllib.request.Request] = []
        self.timeouts: List[Optional[float]] = []
        self.status = 200
        self.body = b"ok"
        self.exc: Optional[BaseException] = None

    def __call__(self, req: urllib.request.Request, timeout: Optional[float] = None) -> FakeResponse:
        self.requests.append(req)
        self.timeouts.append(timeout)
        if self.exc is not None:
            raise self.exc
        if not (200 <= self.status < 300):
            raise HTTPError(req.full_url, self.status, "Internal Server Error", None, io.BytesIO(self.body))
        return FakeResponse(self.status, self.body)

    @property
    def call_count(self) -> int:
        return len(self.requests)

    def sent_payload(self) -> Dict[str, Any]:
        return json.loads(self.requests[-1].data.decode("utf-8"))


@pytest.fixture
def fake_urlopen(monkeypatch: pytest.MonkeyPatch) -> FakeUrlopen:
    fake = FakeUrlopen()
    monkeypatch.setattr(urllib.request, "urlopen", fake)
    return fake
