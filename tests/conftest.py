"""Shared fixtures: isolated token storage and fake sync endpoints."""

import json
from typing import Any, Callable, Dict, List
from urllib.parse import parse_qs

import httpx
import pytest

from sync import SyncClient
from utils.storage import TokenStorage

SYNC_ENDPOINT = "https://sync.test/api/v1/sync"


@pytest.fixture(autouse=True)
def no_env_token(monkeypatch):
    monkeypatch.delenv("TODOIST_API_TOKEN", raising=False)


@pytest.fixture
def storage(tmp_path) -> TokenStorage:
    return TokenStorage(config_file=str(tmp_path / "todoist-cli" / "config.json"))


def decode_commands(request: httpx.Request) -> List[Dict[str, Any]]:
    """Commands submitted in a form-encoded sync request"""
    form = parse_qs(request.content.decode())
    return json.loads(form["commands"][0])


def decode_form(request: httpx.Request) -> Dict[str, Any]:
    return {key: values[0] for key, values in parse_qs(request.content.decode()).items()}


class FakeSyncServer:
    """Records sync requests and answers through a responder function

    The responder receives the decoded form and returns (status, body).
    """

    def __init__(self, responder: Callable[[Dict[str, Any]], tuple]):
        self.responder = responder
        self.requests: List[httpx.Request] = []

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status, body = self.responder(decode_form(request))
        if isinstance(body, (dict, list)):
            return httpx.Response(status, json=body)
        return httpx.Response(status, text=body)

    @property
    def commands(self) -> List[Dict[str, Any]]:
        return [
            cmd
            for request in self.requests
            if "commands" in decode_form(request)
            for cmd in decode_commands(request)
        ]

    def client(self, token: str = "test-token-123") -> SyncClient:
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(self.handle))
        return SyncClient(token, SYNC_ENDPOINT, http_client=http_client)


def all_ok(form: Dict[str, Any]) -> tuple:
    """Accept every submitted command"""
    if "commands" not in form:
        return 200, {}
    commands = json.loads(form["commands"])
    return 200, {
        "sync_status": {cmd["uuid"]: "ok" for cmd in commands},
        "temp_id_mapping": {},
    }


@pytest.fixture
def ok_server() -> FakeSyncServer:
    return FakeSyncServer(all_ok)
