"""Connector transport: posts replies to the channel service URL of the conversation."""

import logging

import httpx

from handover.models.conversation import ConversationRef

logger = logging.getLogger(__name__)


class ConnectorTransport:
    def __init__(self, timeout: float = 10.0, transport: httpx.AsyncBaseTransport | None = None):
        self._timeout = timeout
        self._transport = transport

    async def send(self, ref: ConversationRef, activity: dict) -> None:
        if not ref.service_url:
            raise ValueError(f"Conversation {ref.conversation_id} has no serviceUrl")

        url = f"{ref.service_url.rstrip('/')}/v3/conversations/{ref.conversation_id}/activities"
        payload = {
            **activity,
            "conversation": {"id": ref.conversation_id},
            "channelId": ref.channel_id,
        }
        if ref.bot:
            payload["from"] = ref.bot.model_dump(exclude_none=True)
        if ref.user:
            payload["recipient"] = ref.user.model_dump(exclude_none=True)

        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            response = await client.post(url, json=payload)
            response.raise_for_status()
        logger.debug("Activity posted to %s", url)
