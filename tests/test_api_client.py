"""
Unit tests for the backend HTTP client
"""

import unittest

import httpx

from lfdc.app.services.api_client import ApiClient, ApiError, ApiUnavailable

BASE_URL = "http://backend.example/api/"


class TestApiClient(unittest.IsolatedAsyncioTestCase):
    """Test cases for ApiClient"""

    async def asyncTearDown(self):
        await self.client.close()

    def make_client(self, handler):
        self.requests = []

        def record(request):
            self.requests.append(request)
            return handler(request)

        self.client = ApiClient(BASE_URL, transport=httpx.MockTransport(record))
        return self.client

    async def test_paths_are_relative_to_base(self):
        """Leading slashes don't escape the /api prefix"""
        client = self.make_client(lambda request: httpx.Response(200, json=[]))
        await client.get("/product/")
        await client.get("cart/")
        self.assertEqual(self.requests[0].url.path, "/api/product/")
        self.assertEqual(self.requests[1].url.path, "/api/cart/")

    async def test_returns_decoded_json(self):
        client = self.make_client(lambda request: httpx.Response(200, json={"_id": "u1", "username": "mayank"}))
        data = await client.get("auth/check")
        self.assertEqual(data["username"], "mayank")

    async def test_empty_body_returns_none(self):
        client = self.make_client(lambda request: httpx.Response(204))
        self.assertIsNone(await client.post("auth/logout"))

    async def test_error_status_raises_with_backend_message(self):
        client = self.make_client(lambda request: httpx.Response(401, json={"message": "Invalid credentials"}))
        with self.assertRaises(ApiError) as ctx:
            await client.post("auth/login", {"username": "a", "password": "b"})
        self.assertEqual(ctx.exception.message, "Invalid credentials")
        self.assertEqual(ctx.exception.status_code, 401)

    async def test_error_without_json_uses_reason_phrase(self):
        client = self.make_client(lambda request: httpx.Response(500, text="oops"))
        with self.assertRaises(ApiError) as ctx:
            await client.get("product/")
        self.assertEqual(ctx.exception.message, "Internal Server Error")

    async def test_network_failure_raises_unavailable(self):
        def fail(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = self.make_client(fail)
        with self.assertRaises(ApiUnavailable):
            await client.get("product/")

    async def test_timeout_raises_unavailable(self):
        def slow(request):
            raise httpx.ReadTimeout("timed out", request=request)

        client = self.make_client(slow)
        with self.assertRaises(ApiUnavailable) as ctx:
            await client.get("product/")
        self.assertEqual(ctx.exception.message, "Request timed out")

    async def test_delete_sends_json_body(self):
        client = self.make_client(lambda request: httpx.Response(200, json={}))
        await client.delete("cart/remove", {"productId": "p1", "size": "M"})
        request = self.requests[0]
        self.assertEqual(request.method, "DELETE")
        self.assertIn(b'"productId"', request.content)

    async def test_session_cookie_is_kept(self):
        """Cookie set on login is sent with later requests"""
        def handler(request):
            if request.url.path.endswith("auth/login"):
                return httpx.Response(200, json={"_id": "u1", "username": "mayank"},
                                      headers={"Set-Cookie": "jwt=token123; Path=/"})
            return httpx.Response(200, json={"_id": "u1", "username": "mayank"})

        client = self.make_client(handler)
        await client.post("auth/login", {"username": "mayank", "password": "pw"})
        await client.get("auth/check")
        self.assertIn("jwt=token123", self.requests[1].headers.get("cookie", ""))


if __name__ == '__main__':
    unittest.main()
