"""
Chat Adapter: runs turns for a conversation one at a time and supports proactive
(out-of-band) turns through continue_conversation.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from contextlib import asynccontextmanager

from handover.config import get_settings
from handover.models.conversation import Activity, ConversationRef
from handover.modules.chat.base import ChatTransport, TurnContext

logger = logging.getLogger(__name__)

TurnHandler = Callable[[TurnContext], Awaitable[None]]

TURN_ERROR_TEXT = "Oops. Something went wrong!"


def build_transport(kind: str | None = None) -> ChatTransport:
    settings = get_settings()
    kind = kind or settings.chat_transport
    if kind == "connector":
        from handover.modules.chat.connector import ConnectorTransport
        return ConnectorTransport(timeout=settings.peer_timeout_seconds)
    from handover.modules.chat.outbox import OutboxTransport
    return OutboxTransport()


class ChatAdapter:
    def __init__(self, transport: ChatTransport, callback_url: str | None = None):
        self.transport = transport
        self.callback_url = callback_url
        # conversation id -> (lock, number of turns holding or waiting for it)
        self._locks: dict[str, tuple[asyncio.Lock, int]] = {}

    @asynccontextmanager
    async def _turn(self, conversation_id: str):
        """Hold the conversation lock for one turn. The lock is dropped once no turn needs it."""
        lock, users = self._locks.get(conversation_id, (None, 0))
        if lock is None:
            lock = asyncio.Lock()
        self._locks[conversation_id] = (lock, users + 1)
        try:
            async with lock:
                yield
        finally:
            lock, users = self._locks[conversation_id]
            if users == 1:
                del self._locks[conversation_id]
            else:
                self._locks[conversation_id] = (lock, users - 1)

    async def process_activity(self, activity: Activity, handler: TurnHandler) -> TurnContext:
        """Run handler for an inbound activity. Errors are reported to the conversation, not raised."""
        ref = activity.conversation_reference(callback_url=self.callback_url)
        context = TurnContext(self.transport, ref, activity)
        async with self._turn(activity.conversation_id):
            try:
                await handler(context)
            except Exception as e:
                logger.exception("[onTurnError] conversation %s: %s", activity.conversation_id, e)
                await self._on_turn_error(context)
        return context

    async def continue_conversation(self, ref: ConversationRef, callback: TurnHandler) -> TurnContext:
        """Run callback as a proactive turn of ref's conversation. Errors propagate to the caller."""
        context = TurnContext(self.transport, ref)
        async with self._turn(ref.conversation_id):
            await callback(context)
        return context

    async def _on_turn_error(self, context: TurnContext) -> None:
        try:
            await context.send_text(TURN_ERROR_TEXT)
        except Exception as e:
            logger.error("Could not report turn error to %s: %s", context.conversation_id, e)
