import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from handover.models.conversation import Activity
from handover.models.handover import TAResponse
from handover.modules.chat.base import TurnContext
from handover.modules.chat.outbox import OutboxTransport

router = APIRouter()
logger = logging.getLogger(__name__)


def _outbox_reply(request: Request, conversation_id: str) -> dict:
    transport = request.app.state.adapter.transport
    if isinstance(transport, OutboxTransport):
        return {"status": "ok", "activities": transport.drain(conversation_id)}
    return {"status": "ok"}


@router.post("/messages")
async def receive_activity(activity: Activity, request: Request):
    """Chat ingress of the user bot."""
    logger.info(
        "Incoming [%s] in %s: text=%s value=%s",
        activity.type,
        activity.conversation_id,
        (activity.text or "")[:80],
        activity.value,
    )
    await request.app.state.adapter.process_activity(activity, request.app.state.dialog.on_turn)
    return _outbox_reply(request, activity.conversation_id)


@router.get("/conversations/{conversation_id}/activities")
async def poll_activities(conversation_id: str, request: Request):
    """Fetch messages pushed into a conversation outside of a turn (outbox transport only)."""
    return _outbox_reply(request, conversation_id)


@router.post("/ta-response")
async def receive_ta_response(body: TAResponse, request: Request):
    """Deliver the TA verdict into the originating user conversation and end its handover flow."""
    dialog = request.app.state.dialog

    async def deliver(context: TurnContext) -> None:
        await dialog.apply_ta_response(context, body.decision, body.comment)

    try:
        await request.app.state.adapter.continue_conversation(body.conversation_ref, deliver)
    except Exception as e:
        logger.exception("Error delivering TA response to %s: %s", body.conversation_ref.conversation_id, e)
        return JSONResponse(status_code=500, content={"error": "Failed to deliver response"})
    return {"status": "delivered"}
