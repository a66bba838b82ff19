# prizebot/handlers/user/router.py
from aiogram import Router

from prizebot.handlers.user.start import router as start_router
from prizebot.handlers.user.games import router as games_router
from prizebot.handlers.user.coupons import router as coupons_router

router = Router(name="user")

router.include_router(start_router)
router.include_router(games_router)
router.include_router(coupons_router)
