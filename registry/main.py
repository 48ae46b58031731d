"""
Carnival Registry — bootstrap helpers.
`python -m registry.main` creates the schema on the configured database and exits.
"""
import asyncio
import logging
import sys

from aiogram import Bot
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode

from registry.config import settings
from registry.models.base import Base, engine
from registry.services.event_service import EventSink, LoggingEventSink, TelegramEventSink

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    stream=sys.stdout,
)
logger = logging.getLogger(__name__)


async def create_tables() -> None:
    """Create all database tables."""
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables ready.")
    except Exception as e:
        logger.critical(
            "Cannot connect to database %s: %s",
            settings.DATABASE_URL.split("@")[-1],   # hide credentials in log
            e,
        )
        raise


def build_event_sink() -> EventSink:
    """Telegram sink when a bot token and chat ids are configured, log sink otherwise."""
    if settings.notifications_enabled:
        bot = Bot(
            token=settings.BOT_TOKEN,
            default=DefaultBotProperties(parse_mode=ParseMode.MARKDOWN),
        )
        logger.info("Event notifications go to %d Telegram chat(s)", len(settings.notify_chat_ids_list))
        return TelegramEventSink(bot, settings.notify_chat_ids_list)
    return LoggingEventSink()


async def main() -> None:
    logger.info("Preparing carnival registry database…")
    try:
        await create_tables()
    finally:
        await engine.dispose()
    logger.info("Done.")


if __name__ == "__main__":
    asyncio.run(main())
