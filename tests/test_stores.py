"""
Unit tests for auth/modal stores and per-chat sessions
"""

import unittest
from unittest.mock import AsyncMock, Mock

import httpx
from pydantic import ValidationError

from lfdc.app.models import User
from lfdc.app.services.api_client import ApiError
from lfdc.app.services.auth_store import AuthStore
from lfdc.app.services.modal_store import Modal, ModalStore
from lfdc.app.services.sessions import BusyError, BusyFlags, SessionRegistry
from lfdc.app.services.store import Store

USER = User(id="u1", username="mayank")


class TestStore(unittest.TestCase):

    def test_subscribers_notified_once_per_set(self):
        store = ModalStore()
        listener = Mock()
        unsubscribe = store.subscribe(listener)
        store.set(current=Modal.LOGIN)
        listener.assert_called_once_with(store)
        unsubscribe()
        store.close_modals()
        listener.assert_called_once()

    def test_unknown_field_rejected(self):
        with self.assertRaises(AttributeError):
            Store().set(nope=1)

    def test_failing_listener_does_not_break_set(self):
        store = ModalStore()
        store.subscribe(Mock(side_effect=RuntimeError("boom")))
        store.open_signup()
        self.assertTrue(store.is_signup_open)


class TestModalStore(unittest.TestCase):
    """Only one modal is open at a time"""

    def test_opening_replaces_current(self):
        modals = ModalStore()
        modals.open_login()
        modals.open_signup()
        self.assertFalse(modals.is_login_open)
        self.assertTrue(modals.is_signup_open)
        modals.open_logout()
        self.assertTrue(modals.is_logout_open)
        modals.close_modals()
        self.assertIsNone(modals.current)


class TestAuthStore(unittest.IsolatedAsyncioTestCase):
    """Test cases for AuthStore"""

    def setUp(self):
        self.api = AsyncMock()
        self.store = AuthStore(self.api)

    async def test_check_auth_success(self):
        self.api.check_auth.return_value = USER
        await self.store.check_auth()
        self.assertEqual(self.store.auth_user, USER)
        self.assertFalse(self.store.is_checking_auth)

    async def test_check_auth_failure_means_logged_out(self):
        self.api.check_auth.side_effect = ApiError("Unauthorized", 401)
        await self.store.check_auth()
        self.assertIsNone(self.store.auth_user)
        self.assertFalse(self.store.is_checking_auth)

    async def test_login_flag_raised_during_request(self):
        seen = []

        async def login(username, password):
            seen.append(self.store.is_logging_in)
            return USER

        self.api.login.side_effect = login
        self.assertTrue(await self.store.login("mayank", "pw"))
        self.assertEqual(seen, [True])
        self.assertFalse(self.store.is_logging_in)
        self.assertTrue(self.store.is_authenticated)

    async def test_login_failure(self):
        self.api.login.side_effect = ApiError("Invalid credentials", 401)
        self.assertFalse(await self.store.login("mayank", "bad"))
        self.assertFalse(self.store.is_logging_in)
        self.assertIsNone(self.store.auth_user)
        self.assertEqual(self.store.last_error, "Invalid credentials")

    async def test_failed_signup_keeps_user(self):
        self.store.auth_user = USER
        self.api.signup.side_effect = ApiError("Username taken", 400)
        self.assertFalse(await self.store.signup("mayank", "pw"))
        self.assertEqual(self.store.auth_user, USER)
        self.assertFalse(self.store.is_signing_up)

    async def test_logout(self):
        self.store.auth_user = USER
        self.assertTrue(await self.store.logout())
        self.assertIsNone(self.store.auth_user)
        self.assertFalse(self.store.is_logging_out)

    async def test_update_profile(self):
        updated = User(id="u1", username="mayank", bio="new bio")
        self.api.update_profile.return_value = updated
        self.assertTrue(await self.store.update_profile(bio="new bio"))
        self.assertEqual(self.store.auth_user.bio, "new bio")
        sent = self.api.update_profile.await_args.args[0]
        self.assertEqual(sent.to_payload(), {"bio": "new bio"})

    async def test_update_profile_validates_before_request(self):
        with self.assertRaises(ValidationError):
            await self.store.update_profile(email="nope")
        self.api.update_profile.assert_not_awaited()
        self.assertFalse(self.store.is_updating_profile)


class TestBusyFlags(unittest.IsolatedAsyncioTestCase):
    """Test cases for in-flight guards"""

    def test_second_acquire_refused(self):
        flags = BusyFlags()
        self.assertTrue(flags.acquire("checkout"))
        self.assertFalse(flags.acquire("checkout"))
        self.assertTrue(flags.acquire("fight"))
        flags.release("checkout")
        self.assertFalse(flags.is_busy("checkout"))

    async def test_busy_context(self):
        flags = BusyFlags()
        async with flags.busy("fight"):
            self.assertTrue(flags.is_busy("fight"))
            with self.assertRaises(BusyError):
                async with flags.busy("fight"):
                    pass
        self.assertFalse(flags.is_busy("fight"))

    async def test_released_on_error(self):
        flags = BusyFlags()
        with self.assertRaises(ApiError):
            async with flags.busy("cart:p1"):
                raise ApiError("boom")
        self.assertFalse(flags.is_busy("cart:p1"))


class TestSessionRegistry(unittest.IsolatedAsyncioTestCase):
    """Test cases for per-chat sessions"""

    def setUp(self):
        self.calls = []

        def handler(request):
            self.calls.append(request.url.path)
            return httpx.Response(401, json={"message": "Unauthorized"})

        self.registry = SessionRegistry("http://backend.example/api", transport=httpx.MockTransport(handler))

    async def asyncTearDown(self):
        await self.registry.close_all()

    async def test_one_session_per_user(self):
        first = self.registry.get(1)
        self.assertIs(self.registry.get(1), first)
        self.assertIsNot(self.registry.get(2), first)
        self.assertIsNot(self.registry.get(2).client, first.client)
        self.assertEqual(len(self.registry), 2)

    async def test_auth_checked_once(self):
        session = self.registry.get(1)
        await session.ensure_auth_checked()
        await session.ensure_auth_checked()
        self.assertEqual(self.calls, ["/api/auth/check"])
        self.assertIsNone(session.user)

    async def test_close_all_empties_registry(self):
        self.registry.get(1)
        await self.registry.close_all()
        self.assertEqual(len(self.registry), 0)


class FakeClock:

    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class TestIdleSessions(unittest.IsolatedAsyncioTestCase):
    """Test cases for idle session eviction"""

    def setUp(self):
        self.clock = FakeClock()
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json={}))
        self.registry = SessionRegistry("http://backend.example/api", transport=transport, clock=self.clock)

    async def asyncTearDown(self):
        await self.registry.close_all()

    async def test_idle_sessions_are_closed(self):
        stale = self.registry.get(1)
        self.clock.now += 500
        self.registry.get(2)
        self.clock.now += 600

        evicted = await self.registry.evict_idle(max_idle=1000)

        self.assertEqual(evicted, 1)
        self.assertEqual(len(self.registry), 1)
        self.assertTrue(stale.client._client.is_closed)
        self.assertIsNot(self.registry.get(1), stale)

    async def test_activity_keeps_session(self):
        first = self.registry.get(1)
        self.clock.now += 900
        self.registry.get(1)
        self.clock.now += 900

        self.assertEqual(await self.registry.evict_idle(max_idle=1000), 0)
        self.assertIs(self.registry.get(1), first)

    async def test_busy_session_is_kept(self):
        session = self.registry.get(1)
        session.flags.acquire("checkout")
        self.clock.now += 5000

        self.assertEqual(await self.registry.evict_idle(max_idle=1000), 0)
        self.assertEqual(len(self.registry), 1)


class TestAuthCheckBody(unittest.IsolatedAsyncioTestCase):
    """Test cases for auth/check answers that are not a user"""

    async def check(self, body):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json=body))
        registry = SessionRegistry("http://backend.example/api", transport=transport)
        session = registry.get(1)
        try:
            await session.ensure_auth_checked()
            return session
        finally:
            await registry.close_all()

    async def test_null_body_means_logged_out(self):
        session = await self.check(None)
        self.assertIsNone(session.user)
        self.assertFalse(session.auth.is_checking_auth)

    async def test_body_without_user_fields_means_logged_out(self):
        session = await self.check({"message": "Not authenticated"})
        self.assertIsNone(session.user)
        self.assertFalse(session.auth.is_checking_auth)


if __name__ == '__main__':
    unittest.main()
