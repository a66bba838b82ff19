# prizebot/scheduler/jobs.py
from __future__ import annotations

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from prizebot.database.session import Database
from prizebot.services.games import GameService
from prizebot.utils.dates import utc_now

log = logging.getLogger(__name__)


async def deactivate_ended_games(db: Database) -> int:
    """
    Switches off games whose end date passed, so admin listings match what
    players can actually open.
    """
    async with db.session() as session:
        ids = await GameService.deactivate_ended(session, utc_now())
    if ids:
        log.info("Deactivated ended games: %s", ", ".join(map(str, ids)))
    return len(ids)


def build_scheduler(db: Database) -> AsyncIOScheduler:
    """
    Creates and returns an AsyncIOScheduler with our jobs registered.
    """
    scheduler = AsyncIOScheduler(timezone="UTC")

    scheduler.add_job(
        deactivate_ended_games,
        trigger=CronTrigger(minute="*/10", timezone="UTC"),
        kwargs={"db": db},
        id="deactivate_ended_games",
        replace_existing=True,
        coalesce=True,
        misfire_grace_time=300,
    )

    return scheduler
