"""
End-to-end tests: both bots wired together in-process
======================================================

The user bot and the TA bot talk over their real HTTP routes through
httpx.ASGITransport; chat replies are read back from the outbox transport.
"""

from __future__ import annotations

from unittest.mock import AsyncMock

import httpx
import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from handover import ta_main, user_main
from handover.models.dialog import UserDialogState, UserStep
from handover.modules.chat.outbox import OutboxTransport
from handover.modules.coordinator.manager import NO_PENDING_TEXT, PENDING_BANNER_TEXT
from handover.modules.dialogs.ta_dialog import ACKNOWLEDGED_TEXT, GREETING_TEXT
from handover.modules.dialogs.user_dialog import CHECKING_TEXT, SENT_TEXT
from handover.modules.peers.client import PeerClient
from handover.modules.storage.reports import ReportStore

USER = "engineer-1"
TA = "approver-1"


@pytest.fixture
def reports_dir(tmp_path):
    return tmp_path / "reports"


@pytest.fixture
def bots(reports_dir):
    user_app = user_main.create_app(
        transport=OutboxTransport(),
        reports=ReportStore(reports_dir=reports_dir, bucket=""),
    )
    ta_app = ta_main.create_app(
        transport=OutboxTransport(),
        reports=ReportStore(reports_dir=reports_dir, bucket=""),
    )
    user_app.state.dialog.peers = PeerClient(
        ta_bot_url="http://ta-bot.test",
        user_bot_url="http://user-bot.test",
        timeout=5.0,
        transport=httpx.ASGITransport(app=ta_app),
    )
    ta_app.state.coordinator.peers = PeerClient(
        ta_bot_url="http://ta-bot.test",
        user_bot_url="http://user-bot.test",
        timeout=5.0,
        transport=httpx.ASGITransport(app=user_app),
    )
    return user_app, ta_app


def _message(conversation_id: str, bot_id: str, text=None, value=None) -> dict:
    body = {
        "type": "message",
        "conversation": {"id": conversation_id},
        "from": {"id": f"{conversation_id}-person"},
        "recipient": {"id": bot_id},
    }
    if text is not None:
        body["text"] = text
    if value is not None:
        body["value"] = value
    return body


def _joined(conversation_id: str, bot_id: str) -> dict:
    return {
        "type": "conversationUpdate",
        "conversation": {"id": conversation_id},
        "recipient": {"id": bot_id},
        "membersAdded": [{"id": bot_id}, {"id": f"{conversation_id}-person"}],
    }


def _texts(activities: list[dict]) -> list[str]:
    return [a["text"] for a in activities if "text" in a]


def _cards(activities: list[dict]) -> list[dict]:
    return [a["attachments"][0]["content"] for a in activities if "attachments" in a]


class Chat:
    def __init__(self, client: httpx.AsyncClient, conversation_id: str, bot_id: str):
        self.client = client
        self.conversation_id = conversation_id
        self.bot_id = bot_id

    async def join(self) -> list[dict]:
        resp = await self.client.post("/api/messages", json=_joined(self.conversation_id, self.bot_id))
        resp.raise_for_status()
        return resp.json()["activities"]

    async def say(self, text=None, value=None) -> list[dict]:
        resp = await self.client.post("/api/messages", json=_message(self.conversation_id, self.bot_id, text, value))
        resp.raise_for_status()
        return resp.json()["activities"]

    async def poll(self) -> list[dict]:
        resp = await self.client.get(f"/api/conversations/{self.conversation_id}/activities")
        resp.raise_for_status()
        return resp.json()["activities"]


@pytest_asyncio.fixture
async def chats(bots):
    user_app, ta_app = bots
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=user_app), base_url="http://user-bot.test") as user_client:
        async with httpx.AsyncClient(transport=httpx.ASGITransport(app=ta_app), base_url="http://ta-bot.test") as ta_client:
            yield Chat(user_client, USER, "user-bot"), Chat(ta_client, TA, "ta-bot")


async def _request_handover(user: Chat, case_number: str) -> list[dict]:
    await user.say(text="handover")
    await user.say(value={"caseNumber": case_number})
    return await user.say(value={"confirmation": "Yes"})


# ═══════════════════════════════════════════════════════════════════════════════
# FULL FLOWS
# ═══════════════════════════════════════════════════════════════════════════════


class TestHandoverFlow:
    @pytest.mark.asyncio
    async def test_connected_ta_approves(self, chats, bots, reports_dir):
        user, ta = chats
        user_app, _ = bots

        assert _texts(await ta.join()) == [GREETING_TEXT, NO_PENDING_TEXT]

        replies = await _request_handover(user, "123")
        assert _texts(replies) == [CHECKING_TEXT, SENT_TEXT]

        pushed = await ta.poll()
        assert len(_cards(pushed)) == 1
        assert _cards(pushed)[0]["actions"][0]["data"] == {"action": "acknowledge"}

        replies = await ta.say(value={"action": "acknowledge"})
        assert _texts(replies) == [ACKNOWLEDGED_TEXT]

        replies = await ta.say(value={"action": "approve", "comments": "go ahead"})
        assert _texts(replies) == ["APPROVED: Handover approved. Comments: go ahead"]

        delivered = _texts(await user.poll())
        assert delivered[0] == "The handover is approved with the following comment: go ahead"
        assert delivered[1].startswith("Updated the Sharepoint")
        state = await user_app.state.states.get(USER, UserDialogState)
        assert state.step == UserStep.NONE

        files = list(reports_dir.glob("handover_*.txt"))
        assert len(files) == 1
        assert "Valid: true" in files[0].read_text()

    @pytest.mark.asyncio
    async def test_request_waits_for_ta_to_connect(self, chats, bots):
        user, ta = chats
        _, ta_app = bots

        await _request_handover(user, "456")
        snapshot = await ta_app.state.coordinator.status_snapshot()
        assert snapshot["pendingHandovers"] == [USER]

        replies = await ta.join()
        assert _texts(replies) == [GREETING_TEXT, PENDING_BANNER_TEXT]
        assert len(_cards(replies)) == 1
        assert ta_app.state.coordinator.pending_count() == 0

        await ta.say(value={"action": "acknowledge"})
        await ta.say(value={"action": "reject", "comments": "needs more info"})

        assert _texts(await user.poll()) == ["Handover rejected. TA comment: needs more info"]

    @pytest.mark.asyncio
    async def test_ineligible_case_never_reaches_ta(self, chats, bots, reports_dir):
        user, ta = chats
        _, ta_app = bots
        await ta.join()

        replies = await _request_handover(user, "789")

        assert "Severity is B" in _texts(replies)[1]
        assert await ta.poll() == []
        assert ta_app.state.coordinator.current_handover is None
        assert "Valid: false" in next(reports_dir.glob("handover_*.txt")).read_text()


# ═══════════════════════════════════════════════════════════════════════════════
# ROUTES
# ═══════════════════════════════════════════════════════════════════════════════


HANDOVER_BODY = {
    "case": {
        "caseNumber": "123",
        "severity": "A",
        "is247": True,
        "title": "IPsec Tunnel down and BGP down",
        "description": "Production tunnel down",
        "vertical": "Hybrid",
        "sap": "Azure/VPN Gateway",
        "sendingEngineer": "Naveed Khan",
        "taReviewer": "Ravi Kumar",
    },
    "conversationRef": {"conversation": {"id": "u1"}, "channelId": "emulator", "callbackUrl": "http://user-bot.test"},
}


class TestTARoutes:
    def test_handover_accepted(self, bots):
        _, ta_app = bots
        client = TestClient(ta_app)

        resp = client.post("/api/handover", json=HANDOVER_BODY)

        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "pending"
        assert body["conversationId"] == "u1"
        assert body["caseNumber"] == "123"
        assert "timestamp" in body

        status = client.get("/api/status").json()
        assert status["pendingHandovers"] == ["u1"]
        assert status["currentHandover"]["request"]["case"]["case_number"] == "123"

    def test_handover_failure_is_500(self, bots):
        _, ta_app = bots
        ta_app.state.coordinator.submit = AsyncMock(side_effect=RuntimeError("boom"))

        resp = TestClient(ta_app).post("/api/handover", json=HANDOVER_BODY)

        assert resp.status_code == 500
        assert resp.json() == {"error": "Failed to process handover request"}

    def test_invalid_handover_body_is_rejected(self, bots):
        _, ta_app = bots
        resp = TestClient(ta_app).post("/api/handover", json={"case": {}})
        assert resp.status_code == 422

    def test_health(self, bots):
        _, ta_app = bots
        resp = TestClient(ta_app).get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"


class TestUserRoutes:
    def test_ta_response_delivered(self, bots):
        user_app, _ = bots
        client = TestClient(user_app)

        resp = client.post(
            "/api/ta-response",
            json={"conversationRef": {"conversation": {"id": "u1"}}, "decision": "reject", "comment": "no"},
        )

        assert resp.status_code == 200
        assert resp.json() == {"status": "delivered"}
        activities = client.get("/api/conversations/u1/activities").json()["activities"]
        assert _texts(activities) == ["Handover rejected. TA comment: no"]

    def test_unknown_decision_is_rejected(self, bots):
        user_app, _ = bots
        client = TestClient(user_app)

        resp = client.post(
            "/api/ta-response",
            json={"conversationRef": {"conversation": {"id": "u1"}}, "decision": "approved", "comment": "ok"},
        )

        assert resp.status_code == 422
        assert client.get("/api/conversations/u1/activities").json()["activities"] == []

    def test_ta_response_failure_is_500(self, bots):
        user_app, _ = bots
        user_app.state.dialog.apply_ta_response = AsyncMock(side_effect=RuntimeError("boom"))

        resp = TestClient(user_app).post(
            "/api/ta-response",
            json={"conversationRef": {"conversation": {"id": "u1"}}, "decision": "approve", "comment": "ok"},
        )

        assert resp.status_code == 500
        assert resp.json() == {"error": "Failed to deliver response"}

    def test_turn_error_is_reported_in_chat(self, bots):
        user_app, _ = bots
        user_app.state.states.get = AsyncMock(side_effect=RuntimeError("boom"))

        resp = TestClient(user_app).post("/api/messages", json=_message("u1", "user-bot", text="handover"))

        assert resp.status_code == 200
        assert _texts(resp.json()["activities"]) == ["Oops. Something went wrong!"]

    def test_health(self, bots):
        user_app, _ = bots
        assert TestClient(user_app).get("/health").json()["status"] == "ok"
