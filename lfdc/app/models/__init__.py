"""
Mirrors of LFDC backend entities.
"""

from .base import BackendModel
from .user import User, Author, ProfileUpdate
from .product import Product
from .cart import Cart, CartItem, CartAction
from .order import (
    Order, OrderItem, OrderStatus, ShippingDetails,
    GatewayOrder, CreatedOrder, PaymentConfirmation,
    normalize_phone, normalize_pincode,
)
from .review import Review, Comment
from .game import (
    GameEntity, Character, Weapon, Stage, Announcer,
    GameDetails, BattleRequest, BattleResult,
)
from .stats import UserStats, BattleSummary, UserRanking, EntityRanking

__all__ = [
    "BackendModel",
    # User
    "User", "Author", "ProfileUpdate",
    # Product
    "Product",
    # Cart
    "Cart", "CartItem", "CartAction",
    # Order
    "Order", "OrderItem", "OrderStatus", "ShippingDetails",
    "GatewayOrder", "CreatedOrder", "PaymentConfirmation",
    "normalize_phone", "normalize_pincode",
    # Review
    "Review", "Comment",
    # Game
    "GameEntity", "Character", "Weapon", "Stage", "Announcer",
    "GameDetails", "BattleRequest", "BattleResult",
    # Stats
    "UserStats", "BattleSummary", "UserRanking", "EntityRanking",
]
