# prizebot/handlers/admin/router.py
from aiogram import Router

from prizebot.handlers.admin.panel import router as panel_router
from prizebot.handlers.admin.games_admin import router as games_admin_router

router = Router(name="admin")

router.include_router(panel_router)
router.include_router(games_admin_router)
