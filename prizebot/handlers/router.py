# prizebot/handlers/router.py
from aiogram import Router

from prizebot.handlers.admin.router import router as admin_router
from prizebot.handlers.user.router import router as user_router
from prizebot.handlers.common import router as common_router

router = Router(name="root")

# admin first so /games_admin never falls into the player handlers
router.include_router(admin_router)
router.include_router(user_router)
router.include_router(common_router)
