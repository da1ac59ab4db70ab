import logging

from fastapi import FastAPI

from handover.config import get_settings, reload_settings

reload_settings()
logging.basicConfig(level=get_settings().log_level)
logger = logging.getLogger(__name__)

from handover.modules.chat.adapter import ChatAdapter, build_transport
from handover.modules.chat.base import ChatTransport
from handover.modules.coordinator.manager import HandoverCoordinator
from handover.modules.dialogs.ta_dialog import TADialog
from handover.modules.peers.client import PeerClient
from handover.modules.storage.reports import ReportStore
from handover.modules.storage.state import ConversationStateStore
from handover.modules.ta.webhook import router as ta_router


def create_app(
    transport: ChatTransport | None = None,
    peers: PeerClient | None = None,
    reports: ReportStore | None = None,
) -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title="Handover TA Bot",
        description="Routes handover requests to the technical approver and reports the decision back",
        version="0.1.0",
    )
    app.state.adapter = ChatAdapter(transport or build_transport(), callback_url=settings.ta_bot_url)
    app.state.states = ConversationStateStore()
    app.state.coordinator = HandoverCoordinator(
        adapter=app.state.adapter,
        state_store=app.state.states,
        peers=peers or PeerClient(),
    )
    app.state.dialog = TADialog(
        state_store=app.state.states,
        coordinator=app.state.coordinator,
        reports=reports or ReportStore(),
    )

    app.include_router(ta_router, prefix="/api", tags=["ta-bot"])

    @app.get("/health")
    async def health():
        return {"status": "ok", "environment": settings.environment}

    return app


app = create_app()
