# prizebot/main.py
import asyncio
import logging

from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode
from aiogram.types import BotCommand

from prizebot.config import Settings
from prizebot.database import Database

# IMPORTANT: register models
from prizebot.database.models import *  # noqa: F401,F403

from prizebot.handlers.router import router as handlers_router
from prizebot.scheduler import setup_scheduler
from prizebot.services.play import PlayService
from prizebot.utils.middleware import DbSessionMiddleware

log = logging.getLogger("prizebot")

BOT_COMMANDS = [
    BotCommand(command="games", description="Games running now"),
    BotCommand(command="scratch", description="Scratch a card"),
    BotCommand(command="wheel", description="Spin the wheel"),
    BotCommand(command="flip", description="Flip a card"),
    BotCommand(command="mycoupons", description="My coupons"),
    BotCommand(command="help", description="How it works"),
]


def setup_logging(is_dev: bool) -> None:
    """
    App logs at INFO (DEBUG in dev); SQLAlchemy, driver and scheduler
    loggers at WARNING+.
    """
    logging.basicConfig(
        level=logging.DEBUG if is_dev else logging.INFO,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    for name in ("sqlalchemy", "sqlalchemy.engine", "sqlalchemy.pool", "aiosqlite", "apscheduler"):
        logging.getLogger(name).setLevel(logging.WARNING)


def build_dispatcher(settings: Settings, db: Database) -> Dispatcher:
    dp = Dispatcher()
    dp.workflow_data.update(
        settings=settings,
        db=db,
        play_service=PlayService.from_settings(settings),
    )
    dp.update.middleware(DbSessionMiddleware(db))
    dp.include_router(handlers_router)
    return dp


async def _shutdown(*steps) -> None:
    for name, step in steps:
        try:
            result = step()
            if asyncio.iscoroutine(result):
                await result
        except Exception:
            log.exception("Failed to %s", name)


async def main() -> None:
    settings = Settings.load()
    setup_logging(settings.is_dev)

    db = Database(settings.database_url)
    await db.init_models()
    log.info("DB initialized (%s)", settings.database_url.split("://", 1)[0])

    bot = Bot(
        token=settings.bot_token,
        default=DefaultBotProperties(parse_mode=ParseMode.HTML),
    )
    dp = build_dispatcher(settings, db)

    scheduler = setup_scheduler(db)
    log.info("Scheduler started")

    try:
        await bot.set_my_commands(BOT_COMMANDS)
        await dp.start_polling(bot)
    except (asyncio.CancelledError, KeyboardInterrupt):
        pass
    except Exception:
        log.exception("Bot crashed")
        raise
    finally:
        await _shutdown(
            ("shutdown scheduler", lambda: scheduler.shutdown(wait=False)),
            ("close DB", db.close),
            ("close bot session", bot.session.close),
        )


if __name__ == "__main__":
    asyncio.run(main())
