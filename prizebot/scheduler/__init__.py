# prizebot/scheduler/__init__.py
from __future__ import annotations

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from prizebot.database.session import Database
from prizebot.scheduler.jobs import build_scheduler


def setup_scheduler(db: Database) -> AsyncIOScheduler:
    scheduler = build_scheduler(db=db)
    scheduler.start()
    return scheduler
