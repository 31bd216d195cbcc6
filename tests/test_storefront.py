"""
Unit tests for the storefront endpoint layer
"""

import json
import unittest
from decimal import Decimal

import httpx

from lfdc.app.models import (
    BattleRequest, EntityRanking, PaymentConfirmation, ShippingDetails, UserRanking,
)
from lfdc.app.services.api_client import ApiClient
from lfdc.app.services.storefront import StorefrontApi


class Backend:
    """Records requests and answers from a (method, path) -> (status, body) table."""

    def __init__(self, responses=None):
        self.responses = responses or {}
        self.requests = []

    def __call__(self, request):
        self.requests.append(request)
        status, body = self.responses.get((request.method, request.url.path), (200, {}))
        return httpx.Response(status, json=body)

    def last(self):
        request = self.requests[-1]
        body = json.loads(request.content) if request.content else None
        return request.method, request.url.path, body


class StorefrontTestCase(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.backend = Backend()
        self.client = ApiClient("http://backend.example/api/", transport=httpx.MockTransport(self.backend))
        self.api = StorefrontApi(self.client)

    async def asyncTearDown(self):
        await self.client.close()


class TestCatalogAndCart(StorefrontTestCase):
    """Test cases for product and cart endpoints"""

    async def test_list_products(self):
        self.backend.responses[("GET", "/api/product/")] = (200, [
            {"_id": "p1", "name": "Lafda Tee", "price": 799, "images": ["https://img/1.jpg"]},
        ])
        products = await self.api.list_products()
        self.assertEqual(products[0].id, "p1")
        self.assertEqual(products[0].price, Decimal("799"))
        self.assertEqual(products[0].cover, "https://img/1.jpg")

    async def test_get_product_unwraps_envelope(self):
        self.backend.responses[("GET", "/api/product/p1")] = (200, {
            "product": {"_id": "p1", "name": "Lafda Tee", "price": 799},
        })
        product = await self.api.get_product("p1")
        self.assertEqual(product.name, "Lafda Tee")

    async def test_add_to_cart_payload(self):
        await self.api.add_to_cart("p1", "L", quantity=1)
        self.assertEqual(self.backend.last(), ("POST", "/api/cart/add", {"productId": "p1", "quantity": 1, "size": "L"}))

    async def test_update_cart_item_payload(self):
        await self.api.update_cart_item("p1", "M", "decrease")
        self.assertEqual(self.backend.last(), ("PUT", "/api/cart/update", {"productId": "p1", "size": "M", "action": "decrease"}))

    async def test_update_cart_item_rejects_unknown_action(self):
        with self.assertRaises(ValueError):
            await self.api.update_cart_item("p1", "M", "double")
        self.assertEqual(self.backend.requests, [])

    async def test_remove_cart_item_uses_delete_body(self):
        await self.api.remove_cart_item("p1", "M")
        self.assertEqual(self.backend.last(), ("DELETE", "/api/cart/remove", {"productId": "p1", "size": "M"}))


class TestOrders(StorefrontTestCase):
    """Test cases for the checkout endpoints"""

    async def test_create_order_for_cart_and_product(self):
        self.backend.responses[("POST", "/api/order/create-order")] = (200, {
            "razorpayOrder": {"id": "order_1", "amount": 159800, "currency": "INR"},
            "orderItems": [{"product": {"_id": "p1", "name": "Lafda Tee"}, "quantity": 2, "size": "M"}],
        })
        created = await self.api.create_order()
        self.assertEqual(self.backend.last()[2], {})
        self.assertEqual(created.razorpay_order.id, "order_1")
        self.assertEqual(created.razorpay_order.amount, 159800)
        self.assertEqual(len(created.order_items), 1)

        await self.api.create_order("p1")
        self.assertEqual(self.backend.last()[2], {"productId": "p1"})

    async def test_verify_payment(self):
        self.backend.responses[("POST", "/api/order/verify")] = (200, {"success": True})
        ok = await self.api.verify_payment(PaymentConfirmation(
            razorpay_order_id="order_1", razorpay_payment_id="pay_1", razorpay_signature="sig",
        ))
        self.assertTrue(ok)
        self.assertEqual(self.backend.last()[2], {
            "razorpay_order_id": "order_1", "razorpay_payment_id": "pay_1", "razorpay_signature": "sig",
        })

    async def test_verify_payment_failure(self):
        self.backend.responses[("POST", "/api/order/verify")] = (200, {"success": False})
        ok = await self.api.verify_payment(PaymentConfirmation(
            razorpay_order_id="order_1", razorpay_payment_id="pay_1", razorpay_signature="sig",
        ))
        self.assertFalse(ok)

    async def test_submit_order_payload(self):
        shipping = ShippingDetails(name="Mayank", address="12 MG Road", phone="9876543210", pincode="560001")
        await self.api.submit_order("pay_1", shipping, [{"product": "p1", "quantity": 1}], from_cart=True)
        self.assertEqual(self.backend.last()[2], {
            "paymentId": "pay_1",
            "shippingDetails": {"name": "Mayank", "address": "12 MG Road", "phone": "9876543210", "pincode": "560001"},
            "orderItems": [{"product": "p1", "quantity": 1}],
            "fromCart": True,
        })


class TestReviews(StorefrontTestCase):
    """Test cases for review and comment endpoints"""

    async def test_create_review(self):
        await self.api.create_review("p1", "Great fit", 5)
        self.assertEqual(self.backend.last(), ("POST", "/api/review/create", {"productId": "p1", "text": "Great fit", "rating": 5}))

    async def test_create_review_rejects_bad_rating(self):
        with self.assertRaises(ValueError):
            await self.api.create_review("p1", "meh", 0)
        self.assertEqual(self.backend.requests, [])

    async def test_votes_and_reports(self):
        await self.api.like_review("r1")
        self.assertEqual(self.backend.last()[:2], ("POST", "/api/review/like/r1"))
        await self.api.dislike_comment("c1")
        self.assertEqual(self.backend.last()[:2], ("POST", "/api/comment/dislike/c1"))
        await self.api.report_comment("c1", "spam")
        self.assertEqual(self.backend.last()[2], {"commentId": "c1", "reason": "spam"})
        await self.api.delete_review("r1")
        self.assertEqual(self.backend.last()[:2], ("DELETE", "/api/review/delete/r1"))


class TestGameAndStats(StorefrontTestCase):
    """Test cases for arena and leaderboard endpoints"""

    async def test_fight_sends_ids(self):
        self.backend.responses[("POST", "/api/game/fight")] = (200, {"result": "Chaos ensues.", "winner": {"_id": "c1", "name": "Mayank"}})
        result = await self.api.fight(BattleRequest(
            character_id1="c1", weapon_id1="w1", character_id2="c2",
            weapon_id2="w2", stage_id="s1", announcer_id="a1",
        ))
        self.assertEqual(result.result, "Chaos ensues.")
        self.assertEqual(result.winner.name, "Mayank")
        self.assertEqual(self.backend.last()[2], {
            "characterId1": "c1", "weaponId1": "w1", "characterId2": "c2",
            "weaponId2": "w2", "stageId": "s1", "announcerId": "a1",
        })

    async def test_users_leaderboard(self):
        self.backend.responses[("GET", "/api/stats/userLeaderboards")] = (200, {"topUsers": [
            {"user": {"_id": "u1", "username": "mayank"}, "totalBattles": 12, "battlesWon": 7},
        ]})
        rows = await self.api.leaderboard("users")
        self.assertIsInstance(rows[0], UserRanking)
        self.assertEqual(rows[0].total_battles, 12)

    async def test_entity_leaderboard(self):
        self.backend.responses[("GET", "/api/stats/weaponLeaderboards")] = (200, {"topWeapons": [
            {"_id": "w1", "name": "Chappal", "played": 10, "wins": 6, "winRatio": 0.6},
        ]})
        rows = await self.api.leaderboard("weapons")
        self.assertIsInstance(rows[0], EntityRanking)
        self.assertAlmostEqual(rows[0].win_ratio, 0.6)

    async def test_announcer_leaderboard(self):
        self.backend.responses[("GET", "/api/stats/announcerLeaderboards")] = (200, {"topAnnouncers": [
            {"_id": "a1", "name": "Bhau", "image": "https://img/a1.png", "timesPicked": 42},
        ]})
        rows = await self.api.leaderboard("announcers")
        self.assertEqual(self.backend.last()[1], "/api/stats/announcerLeaderboards")
        self.assertEqual(rows[0].times_picked, 42)

    async def test_unknown_leaderboard(self):
        with self.assertRaises(ValueError):
            await self.api.leaderboard("shoes")


if __name__ == '__main__':
    unittest.main()
