"""
Bot command and callback handlers.
"""

from aiogram import Router

from .start import router as start_router
from .auth import router as auth_router
from .catalog import router as catalog_router
from .cart import router as cart_router
from .checkout import router as checkout_router
from .orders import router as orders_router
from .reviews import router as reviews_router
from .profile import router as profile_router
from .play import router as play_router
from .leaderboards import router as leaderboards_router

router = Router()

# start goes first so /start and /menu always escape an unfinished form
router.include_router(start_router)
router.include_router(auth_router)
router.include_router(catalog_router)
router.include_router(cart_router)
router.include_router(checkout_router)
router.include_router(orders_router)
router.include_router(reviews_router)
router.include_router(profile_router)
router.include_router(play_router)
router.include_router(leaderboards_router)
