"""
Per-chat client context.

Each Telegram user gets their own API client (and so their own backend
session cookie), auth store, modal store and busy flags. Handlers receive the
``Session`` through ``SessionMiddleware``.
"""

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from typing import Callable, Dict, Optional, Set

import httpx

from .api_client import ApiClient
from .auth_store import AuthStore
from .modal_store import ModalStore
from .storefront import StorefrontApi

logger = logging.getLogger(__name__)


class BusyError(Exception):
    """An action with the same key is already in flight."""


class BusyFlags:
    """Named in-flight guards. Not a queue: a second request is refused."""

    def __init__(self):
        self._keys: Set[str] = set()

    def __bool__(self) -> bool:
        return bool(self._keys)

    def is_busy(self, key: str) -> bool:
        return key in self._keys

    def acquire(self, key: str) -> bool:
        if key in self._keys:
            return False
        self._keys.add(key)
        return True

    def release(self, key: str) -> None:
        self._keys.discard(key)

    @asynccontextmanager
    async def busy(self, key: str):
        if not self.acquire(key):
            raise BusyError(key)
        try:
            yield
        finally:
            self.release(key)


class Session:
    """Client state for one Telegram user."""

    def __init__(self, telegram_id: int, client: ApiClient):
        self.telegram_id = telegram_id
        self.client = client
        self.api = StorefrontApi(client)
        self.auth = AuthStore(self.api)
        self.modals = ModalStore()
        self.flags = BusyFlags()
        self.last_seen = 0.0

    @property
    def user(self):
        return self.auth.auth_user

    async def ensure_auth_checked(self) -> None:
        """Runs auth/check once, on the first interaction of this chat."""
        if self.auth.is_checking_auth:
            await self.auth.check_auth()

    async def close(self) -> None:
        await self.client.close()


class SessionRegistry:
    """Creates sessions lazily, drops idle ones and closes the rest on shutdown."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.base_url = base_url
        self.timeout = timeout
        self.transport = transport
        self.clock = clock
        self._sessions: Dict[int, Session] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def get(self, telegram_id: int) -> Session:
        session = self._sessions.get(telegram_id)
        if session is None:
            client = ApiClient(self.base_url, timeout=self.timeout, transport=self.transport)
            session = Session(telegram_id, client)
            self._sessions[telegram_id] = session
            logger.debug("Created session for %s", telegram_id)
        session.last_seen = self.clock()
        return session

    async def evict_idle(self, max_idle: float) -> int:
        """Closes sessions untouched for ``max_idle`` seconds; busy ones stay."""
        now = self.clock()
        idle = [
            telegram_id for telegram_id, session in self._sessions.items()
            if now - session.last_seen > max_idle and not session.flags
        ]
        for telegram_id in idle:
            await self._sessions.pop(telegram_id).close()
        if idle:
            logger.info("Evicted %d idle sessions, %d left", len(idle), len(self._sessions))
        return len(idle)

    async def sweep(self, max_idle: float, interval: float) -> None:
        """Runs ``evict_idle`` every ``interval`` seconds until cancelled."""
        logger.info("Session sweeper started (every %.0fs, idle limit %.0fs)", interval, max_idle)
        while True:
            await asyncio.sleep(interval)
            try:
                await self.evict_idle(max_idle)
            except httpx.HTTPError as e:
                logger.error("Session sweep failed: %s", e)

    async def close_all(self) -> None:
        for session in self._sessions.values():
            await session.close()
        logger.info("Closed %d sessions", len(self._sessions))
        self._sessions.clear()
