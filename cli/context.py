"""Per-invocation state shared by CLI handlers"""

from typing import Optional

import httpx

import settings
from resources.user_settings import UserProfile, fetch_user
from sync import SyncClient
from utils.storage import TokenStorage


class CommandContext:
    """Lazily built clients and cached account data for one CLI run

    One ``httpx.AsyncClient`` backs both sync endpoints. Everything is
    computed at most once per context until invalidated.
    """

    def __init__(self, storage: Optional[TokenStorage] = None,
                 http_client: Optional[httpx.AsyncClient] = None):
        self.storage = storage or TokenStorage()
        self._http_client = http_client
        self._owns_http_client = http_client is None
        self._sync_client: Optional[SyncClient] = None
        self._legacy_sync_client: Optional[SyncClient] = None
        self._user: Optional[UserProfile] = None

    @property
    def http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=httpx.Timeout(settings.REQUEST_TIMEOUT, connect=settings.CONNECT_TIMEOUT)
            )
        return self._http_client

    @property
    def token(self) -> str:
        return self.storage.require()

    @property
    def sync(self) -> SyncClient:
        """Client for the unified v1 sync endpoint"""
        if self._sync_client is None:
            self._sync_client = SyncClient(self.token, settings.SYNC_URL, http_client=self.http_client)
        return self._sync_client

    @property
    def legacy_sync(self) -> SyncClient:
        """Client for the v9 endpoint (filters, live notifications)"""
        if self._legacy_sync_client is None:
            self._legacy_sync_client = SyncClient(self.token, settings.SYNC_V9_URL, http_client=self.http_client)
        return self._legacy_sync_client

    async def current_user(self) -> UserProfile:
        if self._user is None:
            self._user = await fetch_user(self.sync)
        return self._user

    def invalidate_clients(self):
        """Forget sync clients bound to the previous token"""
        self._sync_client = None
        self._legacy_sync_client = None

    def invalidate_user(self):
        self._user = None

    def invalidate(self):
        """Forget everything derived from the token (after login or logout)"""
        self.invalidate_clients()
        self.invalidate_user()

    async def aclose(self):
        if self._owns_http_client and self._http_client is not None:
            await self._http_client.aclose()
        self._http_client = None
        self.invalidate()
