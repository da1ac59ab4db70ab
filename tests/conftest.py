"""Shared fixtures for the handover bot tests."""

from __future__ import annotations

import json

import httpx
import pytest

from handover.models.conversation import Activity, ChannelAccount, ConversationAccount
from handover.modules.cases.catalog import CaseCatalog
from handover.modules.chat.adapter import ChatAdapter
from handover.modules.chat.outbox import OutboxTransport
from handover.modules.peers.client import PeerClient
from handover.modules.storage.reports import ReportStore
from handover.modules.storage.state import ConversationStateStore


class PeerRecorder:
    """httpx MockTransport handler that records every request and answers with a canned status."""

    def __init__(self):
        self.requests: list[tuple[str, dict]] = []
        self.status_code = 200
        self.fail_with: Exception | None = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else {}
        self.requests.append((str(request.url), body))
        if self.fail_with is not None:
            raise self.fail_with
        if self.status_code >= 400:
            return httpx.Response(self.status_code, json={"error": "boom"})
        if request.url.path.endswith("/api/handover"):
            return httpx.Response(200, json={"status": "pending"})
        return httpx.Response(200, json={"status": "delivered"})


@pytest.fixture
def outbox():
    return OutboxTransport()


@pytest.fixture
def adapter(outbox):
    return ChatAdapter(outbox, callback_url="http://user-bot.test")


@pytest.fixture
def states():
    return ConversationStateStore()


@pytest.fixture
def catalog():
    return CaseCatalog()


@pytest.fixture
def reports(tmp_path):
    return ReportStore(reports_dir=tmp_path / "reports", bucket="")


@pytest.fixture
def peer_recorder():
    return PeerRecorder()


@pytest.fixture
def peers(peer_recorder):
    return PeerClient(
        ta_bot_url="http://ta-bot.test",
        user_bot_url="http://user-bot.test",
        timeout=1.0,
        transport=httpx.MockTransport(peer_recorder),
    )


@pytest.fixture
def make_activity():
    """Factory for inbound activities."""

    def _make(
        conversation_id: str,
        text: str | None = None,
        value: dict | None = None,
        type: str = "message",
        members_added: list[str] | None = None,
    ) -> Activity:
        return Activity(
            type=type,
            text=text,
            value=value,
            conversation=ConversationAccount(id=conversation_id),
            from_=ChannelAccount(id=f"{conversation_id}-person"),
            recipient=ChannelAccount(id="bot"),
            members_added=[ChannelAccount(id=m) for m in (members_added or [])],
        )

    return _make
