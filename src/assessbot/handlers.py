from __future__ import annotations
import logging
from dataclasses import dataclass

from aiogram import Bot, Dispatcher, F
from aiogram.exceptions import TelegramAPIError
from aiogram.types import Message

from .config import Settings
from .conversation import Conversation

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class InboundMessage:
    sender_id: str
    chat_id: int
    text: str

def inbound_from_message(m: Message) -> InboundMessage | None:
    if m.from_user is None or m.text is None:
        return None
    return InboundMessage(sender_id=str(m.from_user.id), chat_id=m.chat.id, text=m.text)

class BotChannel:
    """Outbound side: one plain-text message per call, never retried."""

    def __init__(self, bot: Bot):
        self._bot = bot

    async def send(self, to: int | str, text: str) -> bool:
        try:
            await self._bot.send_message(to, text, parse_mode=None)
        except TelegramAPIError:
            logger.warning("send_failed chat_id=%s", to, exc_info=True)
            return False
        return True

def register_handlers(dp: Dispatcher, *, settings: Settings, conversation: Conversation):
    logger.info(
        "handlers_registered sections=%s start_commands=%s",
        ",".join(conversation.sections),
        ",".join(settings.start_commands),
    )

    # ---------- every text message is one turn ----------
    @dp.message(F.text)
    async def on_text(m: Message):
        inbound = inbound_from_message(m)
        if inbound is None:
            return
        try:
            replies = await conversation.handle(inbound.sender_id, inbound.text)
        except Exception:
            # no reply for this turn; the participant resends
            logger.exception("turn_failed user_id=%s", inbound.sender_id)
            return
        channel = BotChannel(m.bot)
        for reply in replies:
            await channel.send(inbound.chat_id, reply)
