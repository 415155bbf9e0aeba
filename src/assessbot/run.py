import asyncio
import logging
import traceback
from aiogram import Bot, Dispatcher
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from .attempts import BackgroundRecorder, SqlAttemptRecorder
from .config import Settings, load_settings
from .conversation import Conversation
from .db import ensure_schema, make_engine, make_sessionmaker
from .handlers import register_handlers
from .questions import SqlQuestionRepository
from .session_store import SessionStore, make_session_store

async def _notify_admins(bot: Bot, admin_ids: list[int], message: str) -> None:
    chunk_size = 4000
    chunks = [message[i : i + chunk_size] for i in range(0, len(message), chunk_size)] or [message]
    for admin_id in admin_ids:
        for chunk in chunks:
            await bot.send_message(admin_id, chunk, parse_mode=None)

def build_conversation(
    settings: Settings,
    *,
    sessionmaker: async_sessionmaker[AsyncSession],
    store: SessionStore,
    recorder: BackgroundRecorder,
) -> Conversation:
    return Conversation(
        store=store,
        questions=SqlQuestionRepository(sessionmaker),
        recorder=recorder,
        sections=settings.sections,
        start_commands=settings.start_commands,
        test_name=settings.test_name,
        ttl_s=settings.session_ttl_s,
    )

async def main():
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    settings = load_settings()
    bot = Bot(settings.bot_token)
    engine = make_engine(settings)
    store = make_session_store(settings)
    recorder = None
    try:
        await ensure_schema(engine)
        sessionmaker = make_sessionmaker(engine)
        recorder = BackgroundRecorder(SqlAttemptRecorder(sessionmaker))
        conversation = build_conversation(
            settings, sessionmaker=sessionmaker, store=store, recorder=recorder
        )

        dp = Dispatcher()
        register_handlers(dp, settings=settings, conversation=conversation)

        await dp.start_polling(bot)
    except Exception:
        error_text = traceback.format_exc()
        logging.getLogger(__name__).exception("bot_run_failed")
        try:
            await _notify_admins(
                bot,
                settings.admin_ids,
                f"Bot error detected:\n\n{error_text}",
            )
        except Exception:
            logging.getLogger(__name__).exception("failed_to_notify_admins")
        raise
    finally:
        if recorder is not None:
            await recorder.drain()
        await store.close()
        await engine.dispose()
        await bot.session.close()

if __name__ == "__main__":
    asyncio.run(main())
