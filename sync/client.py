"""Client for the Todoist sync command endpoint"""

import json
import logging
from typing import Any, Dict, Iterable, List, Optional

import httpx

import settings
from .exceptions import SyncBatchError, SyncCommandError, SyncTransportError
from .models import CommandFailure, SyncBatchResponse, SyncCommand, serialize_commands

logger = logging.getLogger(__name__)


class SyncClient:
    """Submits batched commands and resource reads to a sync endpoint

    The client keeps no state between calls other than the bearer token and
    the HTTP client; nothing is retried.

    Args:
        token: Bearer token for the Authorization header
        endpoint: Sync endpoint URL
        http_client: Shared ``httpx.AsyncClient``; one is created (and owned) otherwise
        timeout: Request timeout used for an owned client
    """

    def __init__(
        self,
        token: str,
        endpoint: str = settings.SYNC_URL,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[httpx.Timeout] = None,
    ):
        self.token = token
        self.endpoint = endpoint
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=timeout or httpx.Timeout(settings.REQUEST_TIMEOUT, connect=settings.CONNECT_TIMEOUT)
        )

    async def __aenter__(self) -> "SyncClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _post(self, form: Dict[str, str]) -> Dict[str, Any]:
        """POST a form to the endpoint and return the decoded JSON body

        Raises:
            SyncTransportError: Network failure, non-2xx status or a non-JSON body
            SyncBatchError: The body carries a top-level error
        """
        try:
            response = await self._client.post(
                self.endpoint,
                data=form,
                headers={"Authorization": f"Bearer {self.token}"},
            )
        except httpx.RequestError as e:
            raise SyncTransportError(f"Sync API request failed: {e}") from e

        logger.debug(f"Sync API response status: {response.status_code}")

        if not response.is_success:
            raise SyncTransportError(
                f"Sync API error: {response.status_code}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise SyncTransportError(
                "Sync API returned an invalid JSON body",
                status_code=response.status_code,
            ) from e

        if not isinstance(payload, dict):
            raise SyncTransportError(
                "Sync API returned an unexpected body",
                status_code=response.status_code,
            )

        if payload.get("error"):
            error_code = payload.get("error_code")
            raise SyncBatchError(
                f"Sync API error: {payload['error']}",
                error_code=error_code if isinstance(error_code, int) else None,
            )

        return payload

    async def execute(self, commands: Iterable[SyncCommand]) -> SyncBatchResponse:
        """Submit commands as one batch

        Args:
            commands: Non-empty commands with unique uuids

        Returns:
            SyncBatchResponse; every command in it succeeded

        Raises:
            ValueError: Empty batch or duplicate uuids
            SyncTransportError: The request did not get a 2xx JSON answer
            SyncBatchError: The whole batch was rejected
            SyncCommandError: At least one command failed
        """
        commands = list(commands)
        if not commands:
            raise ValueError("At least one sync command is required")

        uuids = [command.uuid for command in commands]
        if len(set(uuids)) != len(uuids):
            raise ValueError("Sync command uuids must be unique within a batch")

        logger.debug(f"Submitting sync batch: {[command.type for command in commands]}")
        payload = await self._post({"commands": serialize_commands(commands)})
        response = SyncBatchResponse.from_payload(payload)

        failures: List[tuple] = []
        for command in commands:
            status = response.status_for(command)
            if status is None:
                logger.warning(f"No sync status returned for {command.type} ({command.uuid})")
            elif isinstance(status, CommandFailure):
                failures.append((command, status))

        if failures:
            command, failure = failures[0]
            logger.debug(f"{len(failures)} of {len(commands)} sync commands failed")
            raise SyncCommandError(
                failure.error,
                command_uuid=command.uuid,
                command_type=command.type,
                error_code=failure.error_code,
                failures=[(failed.uuid, status) for failed, status in failures],
            )

        return response

    async def read(self, resource_types: Iterable[str], sync_token: str = "*") -> Dict[str, Any]:
        """Fetch resources through the sync read path

        Args:
            resource_types: e.g. ["reminders"] or ["user", "user_settings"]
            sync_token: "*" for a full sync

        Returns:
            The decoded response body

        Raises:
            SyncTransportError, SyncBatchError
        """
        form = {
            "sync_token": sync_token,
            "resource_types": json.dumps(list(resource_types)),
        }
        return await self._post(form)
