import logging

from fastapi import FastAPI

from handover.config import get_settings, reload_settings

reload_settings()
logging.basicConfig(level=get_settings().log_level)
logger = logging.getLogger(__name__)

from handover.modules.cases.catalog import CaseCatalog
from handover.modules.chat.adapter import ChatAdapter, build_transport
from handover.modules.chat.base import ChatTransport
from handover.modules.dialogs.user_dialog import UserDialog
from handover.modules.peers.client import PeerClient
from handover.modules.storage.reports import ReportStore
from handover.modules.storage.state import ConversationStateStore
from handover.modules.user.webhook import router as user_router


def create_app(
    transport: ChatTransport | None = None,
    peers: PeerClient | None = None,
    reports: ReportStore | None = None,
    catalog: CaseCatalog | None = None,
) -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title="Handover User Bot",
        description="Lets an engineer pick a case and request TA handover approval",
        version="0.1.0",
    )
    app.state.adapter = ChatAdapter(transport or build_transport(), callback_url=settings.user_bot_url)
    app.state.states = ConversationStateStore()
    app.state.dialog = UserDialog(
        state_store=app.state.states,
        catalog=catalog or CaseCatalog(),
        peers=peers or PeerClient(),
        reports=reports or ReportStore(),
    )

    app.include_router(user_router, prefix="/api", tags=["user-bot"])

    @app.get("/health")
    async def health():
        return {"status": "ok", "environment": settings.environment}

    return app


app = create_app()
