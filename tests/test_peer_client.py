"""
Tests for the HTTP channel between the two bots.
"""

from __future__ import annotations

import httpx
import pytest

from handover.errors import PeerUnavailableError
from handover.models.conversation import ConversationRef


class TestSubmitHandover:
    @pytest.mark.asyncio
    async def test_posts_case_and_reply_channel(self, peers, peer_recorder, catalog):
        ref = ConversationRef.for_conversation("u1").model_copy(update={"callback_url": "http://user-bot.test"})

        answer = await peers.submit_handover(catalog.find_by_case_number("123"), ref)

        assert answer == {"status": "pending"}
        url, body = peer_recorder.requests[0]
        assert url == "http://ta-bot.test/api/handover"
        assert body["case"]["is247"] is True
        assert body["case"]["sendingEngineer"] == "Naveed Khan"
        assert body["conversationRef"] == {
            "conversation": {"id": "u1"},
            "channelId": "emulator",
            "callbackUrl": "http://user-bot.test",
        }

    @pytest.mark.asyncio
    async def test_error_status_raises(self, peers, peer_recorder, catalog):
        peer_recorder.status_code = 500

        with pytest.raises(PeerUnavailableError) as exc:
            await peers.submit_handover(catalog.find_by_case_number("123"), ConversationRef.for_conversation("u1"))

        assert exc.value.reason == "HTTP 500"
        assert exc.value.url == "http://ta-bot.test/api/handover"

    @pytest.mark.asyncio
    async def test_connection_error_raises(self, peers, peer_recorder, catalog):
        peer_recorder.fail_with = httpx.ConnectError("refused")

        with pytest.raises(PeerUnavailableError):
            await peers.submit_handover(catalog.find_by_case_number("123"), ConversationRef.for_conversation("u1"))


class TestSendTAResponse:
    @pytest.mark.asyncio
    async def test_routes_to_callback_url(self, peers, peer_recorder):
        ref = ConversationRef.for_conversation("u1").model_copy(update={"callback_url": "http://other-user-bot.test/"})

        await peers.send_ta_response(ref, "approve", "ok")

        url, body = peer_recorder.requests[0]
        assert url == "http://other-user-bot.test/api/ta-response"
        assert body == {
            "conversationRef": {
                "conversation": {"id": "u1"},
                "channelId": "emulator",
                "callbackUrl": "http://other-user-bot.test/",
            },
            "decision": "approve",
            "comment": "ok",
        }

    @pytest.mark.asyncio
    async def test_falls_back_to_configured_user_bot(self, peers, peer_recorder):
        await peers.send_ta_response(ConversationRef.for_conversation("u1"), "reject", "no")
        assert peer_recorder.requests[0][0] == "http://user-bot.test/api/ta-response"
