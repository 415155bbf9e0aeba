import asyncio

import pytest
from aiogram import Bot
from aiogram.exceptions import TelegramBadRequest

from tests.telegram_harness.session import RecordingSession


def test_recording_session_keeps_messages_per_chat() -> None:
    async def _run() -> None:
        session = RecordingSession()
        bot = Bot(token="123456:TEST", session=session)

        message = await bot.send_message(chat_id=999, text="Question:\n1) A\n2) B")

        assert message.text == "Question:\n1) A\n2) B"
        assert session.texts(999) == ["Question:\n1) A\n2) B"]
        assert session.calls[-1]["method"] == "SendMessage"

    asyncio.run(_run())


def test_recording_session_fails_configured_chats() -> None:
    async def _run() -> None:
        session = RecordingSession(fail_chat_ids={5})
        bot = Bot(token="123456:TEST", session=session)
        with pytest.raises(TelegramBadRequest):
            await bot.send_message(chat_id=5, text="hi")
        assert session.texts(5) == []

    asyncio.run(_run())
