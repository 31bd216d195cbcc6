"""
Typed wrappers over the LFDC backend endpoints.

Every method is one request; results are parsed into the mirrors from
``lfdc.app.models``. Errors propagate as ``ApiError``.
"""

from typing import List, Optional

from ..models import (
    BattleRequest,
    BattleResult,
    Cart,
    CartAction,
    CreatedOrder,
    EntityRanking,
    GameDetails,
    Order,
    PaymentConfirmation,
    Product,
    ProfileUpdate,
    Review,
    ShippingDetails,
    User,
    UserRanking,
    UserStats,
)
from .api_client import ApiClient


# Leaderboard tab -> (endpoint, list key in the response)
LEADERBOARDS = {
    "users": ("stats/userLeaderboards", "topUsers"),
    "characters": ("stats/characterLeaderboards", "topCharacters"),
    "stages": ("stats/stageLeaderboards", "topStages"),
    "weapons": ("stats/weaponLeaderboards", "topWeapons"),
    "announcers": ("stats/announcerLeaderboards", "topAnnouncers"),
}


class StorefrontApi:
    """Endpoint layer over a session-bound ``ApiClient``."""

    def __init__(self, client: ApiClient):
        self.client = client

    # ---- auth ----

    async def check_auth(self) -> User:
        return User.model_validate(await self.client.get("auth/check"))

    async def signup(self, username: str, password: str) -> User:
        data = await self.client.post("auth/signup", {"username": username, "password": password})
        return User.model_validate(data)

    async def login(self, username: str, password: str) -> User:
        data = await self.client.post("auth/login", {"username": username, "password": password})
        return User.model_validate(data)

    async def logout(self) -> None:
        await self.client.post("auth/logout")

    async def update_profile(self, update: ProfileUpdate) -> User:
        data = await self.client.patch("auth/update-profile", update.to_payload())
        return User.model_validate(data)

    async def get_user(self, username: str) -> User:
        return User.model_validate(await self.client.get(f"user/{username}"))

    # ---- catalog ----

    async def list_products(self) -> List[Product]:
        data = await self.client.get("product/")
        return [Product.model_validate(p) for p in data or []]

    async def get_product(self, product_id: str) -> Product:
        data = await self.client.get(f"product/{product_id}")
        # Some product routes wrap the document as {"product": {...}}
        if isinstance(data, dict) and isinstance(data.get("product"), dict):
            data = data["product"]
        return Product.model_validate(data)

    # ---- cart ----

    async def get_cart(self) -> Cart:
        data = await self.client.get("cart/")
        return Cart.model_validate(data or {})

    async def add_to_cart(self, product_id: str, size: Optional[str], quantity: int = 1) -> None:
        await self.client.post("cart/add", {"productId": product_id, "quantity": quantity, "size": size})

    async def update_cart_item(self, product_id: str, size: Optional[str], action: CartAction) -> None:
        if action not in ("increase", "decrease"):
            raise ValueError(f"Unknown cart action: {action}")
        await self.client.put("cart/update", {"productId": product_id, "size": size, "action": action})

    async def remove_cart_item(self, product_id: str, size: Optional[str]) -> None:
        await self.client.delete("cart/remove", {"productId": product_id, "size": size})

    # ---- orders ----

    async def list_orders(self) -> List[Order]:
        data = await self.client.get("order/")
        return [Order.model_validate(o) for o in data or []]

    async def get_order(self, order_id: str) -> Order:
        return Order.model_validate(await self.client.get(f"order/{order_id}"))

    async def create_order(self, product_id: Optional[str] = None) -> CreatedOrder:
        """Reserves a gateway order for the whole cart, or for one product when given."""
        body = {"productId": product_id} if product_id else {}
        return CreatedOrder.model_validate(await self.client.post("order/create-order", body))

    async def verify_payment(self, confirmation: PaymentConfirmation) -> bool:
        data = await self.client.post("order/verify", confirmation.to_payload())
        return bool(isinstance(data, dict) and data.get("success"))

    async def submit_order(
        self,
        payment_id: str,
        shipping: ShippingDetails,
        order_items: list,
        from_cart: bool,
    ) -> dict:
        return await self.client.post("order/submit", {
            "paymentId": payment_id,
            "shippingDetails": shipping.to_payload(),
            "orderItems": order_items,
            "fromCart": from_cart,
        })

    # ---- reviews ----

    async def list_reviews(self, product_id: str) -> List[Review]:
        data = await self.client.get(f"review/reviews/{product_id}")
        return [Review.model_validate(r) for r in data or []]

    async def get_review(self, review_id: str) -> Review:
        return Review.model_validate(await self.client.get(f"review/{review_id}"))

    async def create_review(self, product_id: str, text: str, rating: int) -> None:
        if not 1 <= rating <= 5:
            raise ValueError("Rating must be between 1 and 5")
        await self.client.post("review/create", {"productId": product_id, "text": text, "rating": rating})

    async def delete_review(self, review_id: str) -> None:
        await self.client.delete(f"review/delete/{review_id}")

    async def like_review(self, review_id: str) -> None:
        await self.client.post(f"review/like/{review_id}")

    async def dislike_review(self, review_id: str) -> None:
        await self.client.post(f"review/dislike/{review_id}")

    async def report_review(self, review_id: str, reason: str) -> None:
        await self.client.post("review/report", {"reviewId": review_id, "reason": reason})

    # ---- comments ----

    async def create_comment(self, review_id: str, text: str) -> None:
        await self.client.post("comment/create", {"reviewId": review_id, "text": text})

    async def delete_comment(self, comment_id: str) -> None:
        await self.client.delete(f"comment/delete/{comment_id}")

    async def like_comment(self, comment_id: str) -> None:
        await self.client.post(f"comment/like/{comment_id}")

    async def dislike_comment(self, comment_id: str) -> None:
        await self.client.post(f"comment/dislike/{comment_id}")

    async def report_comment(self, comment_id: str, reason: str) -> None:
        await self.client.post("comment/report", {"commentId": comment_id, "reason": reason})

    # ---- game ----

    async def game_details(self) -> GameDetails:
        return GameDetails.model_validate(await self.client.get("game/details"))

    async def fight(self, request: BattleRequest) -> BattleResult:
        data = await self.client.post("game/fight", request.to_payload())
        return BattleResult.model_validate(data)

    # ---- stats ----

    async def user_stats(self) -> UserStats:
        return UserStats.model_validate(await self.client.get("stats/user"))

    async def leaderboard(self, tab: str) -> list:
        """Rows of one leaderboard tab, already ranked by the backend."""
        try:
            path, key = LEADERBOARDS[tab]
        except KeyError:
            raise ValueError(f"Unknown leaderboard: {tab}") from None
        data = await self.client.get(path) or {}
        rows = data.get(key, []) if isinstance(data, dict) else data
        model = UserRanking if tab == "users" else EntityRanking
        return [model.model_validate(row) for row in rows or []]
