import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from handover.models.conversation import Activity
from handover.models.handover import HandoverAccepted, HandoverSubmission
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
    """Chat ingress of the TA bot."""
    logger.info(
        "Incoming [%s] in TA conversation %s: text=%s value=%s",
        activity.type,
        activity.conversation_id,
        (activity.text or "")[:80],
        activity.value,
    )
    await request.app.state.adapter.process_activity(activity, request.app.state.dialog.on_turn)
    return _outbox_reply(request, activity.conversation_id)


@router.get("/conversations/{conversation_id}/activities")
async def poll_activities(conversation_id: str, request: Request):
    """Fetch messages pushed into a TA conversation outside of a turn (outbox transport only)."""
    return _outbox_reply(request, conversation_id)


@router.post("/handover")
async def receive_handover(body: HandoverSubmission, request: Request):
    """Accept a handover request from the user bot."""
    logger.info(
        "Handover request for case %s from conversation %s",
        body.case.case_number,
        body.conversation_ref.conversation_id,
    )
    try:
        await request.app.state.coordinator.submit(body.case, body.conversation_ref)
    except Exception as e:
        logger.exception("Failed to process handover request: %s", e)
        return JSONResponse(status_code=500, content={"error": "Failed to process handover request"})

    accepted = HandoverAccepted(
        conversation_id=body.conversation_ref.conversation_id,
        case_number=body.case.case_number,
    )
    return accepted.model_dump(mode="json", by_alias=True)


@router.get("/status")
async def status(request: Request):
    """Coordinator status snapshot."""
    return await request.app.state.coordinator.status_snapshot()
