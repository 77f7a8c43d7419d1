"""Tests for the sync client against a fake sync endpoint."""

import json

import httpx
import pytest

from errors import ErrorKind
from sync import (
    CommandFailure,
    SyncBatchError,
    SyncClient,
    SyncCommand,
    SyncCommandError,
    SyncTransportError,
)
from tests.conftest import SYNC_ENDPOINT, FakeSyncServer, decode_form


class TestExecute:
    @pytest.mark.asyncio
    async def test_request_shape(self, ok_server):
        command = SyncCommand("item_complete", {"id": "123"})
        await ok_server.client("secret-token-1").execute([command])

        request = ok_server.requests[0]
        assert request.method == "POST"
        assert str(request.url) == SYNC_ENDPOINT
        assert request.headers["Authorization"] == "Bearer secret-token-1"
        assert request.headers["Content-Type"] == "application/x-www-form-urlencoded"
        assert ok_server.commands == [command.to_dict()]

    @pytest.mark.asyncio
    async def test_all_ok(self, ok_server):
        commands = [SyncCommand("item_complete", {"id": str(i)}) for i in range(3)]
        response = await ok_server.client().execute(commands)
        assert set(response.sync_status) == {command.uuid for command in commands}

    @pytest.mark.asyncio
    async def test_command_failure_names_failing_command(self):
        ok_command = SyncCommand("item_complete", {"id": "1"}, uuid="uuid1")
        bad_command = SyncCommand("item_complete", {"id": "2"}, uuid="uuid2")
        server = FakeSyncServer(lambda form: (200, {
            "sync_status": {
                "uuid1": "ok",
                "uuid2": {"error": "Item not found", "error_code": 22},
            },
            "temp_id_mapping": {},
        }))

        with pytest.raises(SyncCommandError) as exc_info:
            await server.client().execute([ok_command, bad_command])

        error = exc_info.value
        assert error.kind is ErrorKind.COMMAND_ERROR
        assert error.message == "Item not found"
        assert error.command_uuid == "uuid2"
        assert error.command_type == "item_complete"
        assert error.error_code == 22
        assert [uuid for uuid, _ in error.failures] == ["uuid2"]

    @pytest.mark.asyncio
    async def test_first_failure_in_submission_order(self):
        commands = [SyncCommand("filter_delete", {"id": str(i)}, uuid=f"u{i}") for i in range(3)]
        server = FakeSyncServer(lambda form: (200, {
            "sync_status": {
                "u2": {"error": "second"},
                "u1": {"error": "first"},
                "u0": "ok",
            },
        }))

        with pytest.raises(SyncCommandError) as exc_info:
            await server.client().execute(commands)
        assert exc_info.value.command_uuid == "u1"
        assert exc_info.value.message == "first"
        assert all(isinstance(status, CommandFailure) for _, status in exc_info.value.failures)
        assert len(exc_info.value.failures) == 2

    @pytest.mark.asyncio
    async def test_batch_error(self):
        server = FakeSyncServer(lambda form: (200, {"error": "Invalid token", "error_code": 401}))

        with pytest.raises(SyncBatchError) as exc_info:
            await server.client().execute([SyncCommand("item_complete", {"id": "1"})])
        assert exc_info.value.kind is ErrorKind.BATCH_ERROR
        assert "Invalid token" in exc_info.value.message
        assert exc_info.value.error_code == 401

    @pytest.mark.asyncio
    async def test_transport_error_status(self):
        server = FakeSyncServer(lambda form: (503, "Service Unavailable"))

        with pytest.raises(SyncTransportError) as exc_info:
            await server.client().execute([SyncCommand("item_complete", {"id": "1"})])
        assert exc_info.value.kind is ErrorKind.TRANSPORT_ERROR
        assert exc_info.value.status_code == 503

    @pytest.mark.asyncio
    async def test_transport_error_on_non_json_body(self):
        server = FakeSyncServer(lambda form: (200, "<html>maintenance</html>"))

        with pytest.raises(SyncTransportError):
            await server.client().execute([SyncCommand("item_complete", {"id": "1"})])

    @pytest.mark.asyncio
    async def test_network_failure(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = SyncClient("tok-1234567", SYNC_ENDPOINT,
                            http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))
        with pytest.raises(SyncTransportError):
            await client.execute([SyncCommand("item_complete", {"id": "1"})])

    @pytest.mark.asyncio
    async def test_missing_status_counts_as_success(self):
        server = FakeSyncServer(lambda form: (200, {"sync_status": {}}))
        response = await server.client().execute([SyncCommand("item_complete", {"id": "1"})])
        assert response.sync_status == {}

    @pytest.mark.asyncio
    async def test_temp_id_resolution(self):
        command = SyncCommand("reminder_add", {"item_id": "5"}, temp_id="t1")
        server = FakeSyncServer(lambda form: (200, {
            "sync_status": {command.uuid: "ok"},
            "temp_id_mapping": {"t1": "9988"},
        }))

        response = await server.client().execute([command])
        assert response.resolve_command_id(command) == "9988"

    @pytest.mark.asyncio
    async def test_empty_batch_rejected_without_request(self, ok_server):
        with pytest.raises(ValueError):
            await ok_server.client().execute([])
        assert ok_server.requests == []

    @pytest.mark.asyncio
    async def test_duplicate_uuids_rejected_without_request(self, ok_server):
        commands = [SyncCommand("item_complete", {"id": "1"}, uuid="same"),
                    SyncCommand("item_complete", {"id": "2"}, uuid="same")]
        with pytest.raises(ValueError):
            await ok_server.client().execute(commands)
        assert ok_server.requests == []


class TestRead:
    @pytest.mark.asyncio
    async def test_full_sync_request(self):
        server = FakeSyncServer(lambda form: (200, {"filters": [], "sync_token": "abc"}))
        data = await server.client().read(["filters"])

        form = decode_form(server.requests[0])
        assert form["sync_token"] == "*"
        assert json.loads(form["resource_types"]) == ["filters"]
        assert data["sync_token"] == "abc"

    @pytest.mark.asyncio
    async def test_incremental_token(self):
        server = FakeSyncServer(lambda form: (200, {}))
        await server.client().read(["user"], sync_token="tok-42")
        assert decode_form(server.requests[0])["sync_token"] == "tok-42"


class TestClientLifecycle:
    @pytest.mark.asyncio
    async def test_shared_client_is_not_closed(self, ok_server):
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(ok_server.handle))
        async with SyncClient("tok-1234567", SYNC_ENDPOINT, http_client=http_client):
            pass
        assert not http_client.is_closed
        await http_client.aclose()

    @pytest.mark.asyncio
    async def test_owned_client_is_closed(self):
        client = SyncClient("tok-1234567", SYNC_ENDPOINT)
        await client.aclose()
        assert client._client.is_closed
