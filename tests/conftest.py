from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

import pytest
import requests

from contractgen.project_state.models import DeploymentResult
from contractgen.utils.errors import RequestFailure

_NOT_JSON = object()


class FakeResponse:
    def __init__(self, payload: Any = None, status_code: int = 200) -> None:
        self._payload = payload
        self.status_code = status_code
        self.text = "" if payload is _NOT_JSON else str(payload)

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)

    def json(self) -> Any:
        if self._payload is _NOT_JSON:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self._payload


class RecordingPost:
    """Stand-in for requests.post that records calls and replays queued responses."""

    def __init__(self, *responses: Any) -> None:
        self.responses = list(responses)
        self.calls: List[Dict[str, Any]] = []

    def __call__(self, url: str, json: Any = None, headers: Optional[Dict[str, str]] = None, **kwargs: Any):
        self.calls.append({"url": url, "json": json, "headers": headers, **kwargs})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def not_json():
    return _NOT_JSON


@pytest.fixture
def fake_post(monkeypatch):
    def install(*responses: Any) -> RecordingPost:
        post = RecordingPost(*responses)
        monkeypatch.setattr(requests, "post", post)
        return post

    return install


def completion_payload(content: str) -> Dict[str, Any]:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


class FakeWriter:
    def __init__(self, reply: Tuple[str, str] = ("contract C {}", "explained"), error: Optional[Exception] = None):
        self.reply = reply
        self.error = error
        self.requests = []

    def run(self, request):
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.reply


class FakeDeployer:
    def __init__(
        self,
        address: str = "0xabc",
        upload_error: Optional[Exception] = None,
        deploy_error: Optional[Exception] = None,
    ):
        self.address = address
        self.upload_error = upload_error
        self.deploy_error = deploy_error
        self.uploads: List[Tuple[str, Dict[str, str]]] = []
        self.deploys: List[Tuple[str, str]] = []

    def upload_metadata(self, code, metadata):
        self.uploads.append((code, metadata))
        if self.upload_error is not None:
            raise self.upload_error
        return "QmHash"

    def deploy(self, code, name):
        self.deploys.append((code, name))
        if self.deploy_error is not None:
            raise self.deploy_error
        return DeploymentResult(address=self.address, transaction_id="0xtx", status="success")


@pytest.fixture
def network_down():
    return RequestFailure("connection refused")
