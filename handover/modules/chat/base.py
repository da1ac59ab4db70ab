"""
Base interface for chat transports.
The dialogs work with TurnContext only, never with transport-specific formats.
"""

from typing import Protocol

from handover.models.conversation import Activity, ConversationRef


class ChatTransport(Protocol):
    """Interface that both the outbox and the connector transports implement."""

    async def send(self, ref: ConversationRef, activity: dict) -> None:
        """Deliver an outgoing activity to the conversation behind ref."""
        ...


def text_activity(text: str) -> dict:
    return {"type": "message", "text": text}


def card_activity(attachment: dict) -> dict:
    return {"type": "message", "attachments": [attachment]}


class TurnContext:
    """One turn of a conversation: the inbound activity (None for proactive turns) and a way to reply."""

    def __init__(self, transport: ChatTransport, ref: ConversationRef, activity: Activity | None = None):
        self.transport = transport
        self.ref = ref
        self.activity = activity
        self.sent: list[dict] = []

    @property
    def conversation_id(self) -> str:
        return self.ref.conversation_id

    async def send_text(self, text: str) -> None:
        await self._send(text_activity(text))

    async def send_card(self, attachment: dict) -> None:
        await self._send(card_activity(attachment))

    async def _send(self, activity: dict) -> None:
        await self.transport.send(self.ref, activity)
        self.sent.append(activity)
