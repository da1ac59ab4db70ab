"""
Peer Client: the private HTTP channel between the user bot and the TA bot.
No call is retried; failures surface as PeerUnavailableError.
"""

import logging

import httpx

from handover.config import get_settings
from handover.errors import PeerUnavailableError
from handover.models.case import Case
from handover.models.conversation import ConversationRef
from handover.models.handover import Decision

logger = logging.getLogger(__name__)


class PeerClient:
    def __init__(
        self,
        ta_bot_url: str | None = None,
        user_bot_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        settings = get_settings()
        self.ta_bot_url = (ta_bot_url or settings.ta_bot_url).rstrip("/")
        self.user_bot_url = (user_bot_url or settings.user_bot_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.peer_timeout_seconds
        self._transport = transport

    async def _post(self, url: str, payload: dict) -> dict:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.post(url, json=payload)
                resp.raise_for_status()
                return resp.json()
        except httpx.HTTPStatusError as e:
            logger.error("Peer call %s answered %s: %s", url, e.response.status_code, e.response.text[:200])
            raise PeerUnavailableError(url, f"HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.error("Peer call %s failed: %s", url, e)
            raise PeerUnavailableError(url, str(e) or type(e).__name__) from e

    async def submit_handover(self, case: Case, conversation_ref: ConversationRef) -> dict:
        """Send a case to the TA bot (POST /api/handover)."""
        return await self._post(
            f"{self.ta_bot_url}/api/handover",
            {"case": case.model_dump(by_alias=True), "conversationRef": conversation_ref.to_wire()},
        )

    async def send_ta_response(self, conversation_ref: ConversationRef, decision: Decision, comment: str) -> dict:
        """Send the TA decision back to the process owning the user conversation (POST /api/ta-response)."""
        base_url = (conversation_ref.callback_url or self.user_bot_url).rstrip("/")
        return await self._post(
            f"{base_url}/api/ta-response",
            {"conversationRef": conversation_ref.to_wire(), "decision": decision, "comment": comment},
        )
