"""
Handover Coordinator: owns the lifecycle of a handover request on the TA side.

A submitted case is pushed straight into the most recently seen TA session when
that session is idle; otherwise it waits in the pending queue until a TA session
flushes it. Decisions travel back over the reply channel captured at submission.

All shared state (current handover, pending queue, TA session, reply channels)
is reached only through this object and guarded by one lock. The lock is never
held across chat or HTTP I/O.
"""

import asyncio
import logging
from datetime import datetime, timezone

from handover.errors import PeerUnavailableError, TASessionBusyError
from handover.models.case import Case
from handover.models.conversation import ConversationRef
from handover.models.dialog import TADialogState, TAStep
from handover.models.handover import CurrentHandover, Decision, DeliveryResult, HandoverRequest
from handover.modules.cards.templates import render_card
from handover.modules.chat.adapter import ChatAdapter
from handover.modules.chat.base import TurnContext
from handover.modules.coordinator.pending import PendingQueue
from handover.modules.peers.client import PeerClient
from handover.modules.storage.state import ConversationStateStore

logger = logging.getLogger(__name__)

NO_PENDING_TEXT = "No pending handover requests. I'll notify you when a new handover request arrives."
PENDING_BANNER_TEXT = (
    '**PENDING HANDOVER REQUEST** - Please review the case details above and click "Acknowledge" to proceed.'
)


class HandoverCoordinator:
    def __init__(self, adapter: ChatAdapter, state_store: ConversationStateStore, peers: PeerClient):
        self._adapter = adapter
        self._states = state_store
        self.peers = peers
        self._lock = asyncio.Lock()
        self._pending = PendingQueue()
        self._current: CurrentHandover | None = None
        self._ta_session: ConversationRef | None = None
        self._reply_channels: dict[str, ConversationRef] = {}

    @property
    def current_handover(self) -> CurrentHandover | None:
        return self._current

    @property
    def ta_session(self) -> ConversationRef | None:
        return self._ta_session

    def pending_count(self) -> int:
        return len(self._pending)

    def has_pending(self) -> bool:
        return len(self._pending) > 0

    async def register_ta_session(self, ref: ConversationRef) -> None:
        """Remember the most recently seen TA conversation as the delivery target."""
        async with self._lock:
            self._ta_session = ref

    async def submit(self, case: Case, reply_channel: ConversationRef) -> HandoverRequest:
        """Accept a case from the user bot: deliver it to the TA now, or queue it."""
        request = HandoverRequest(case=case, reply_channel=reply_channel)
        async with self._lock:
            self._current = CurrentHandover(request=request)
            self._reply_channels[request.origin_id] = reply_channel
            ta_session = self._ta_session

        logger.info("Handover submitted: case %s from conversation %s", case.case_number, request.origin_id)

        if ta_session is None:
            logger.info("No active TA session, storing case %s for later", case.case_number)
            await self._enqueue(request)
            return request

        async def deliver(ta_context: TurnContext) -> None:
            await self._present(ta_context, request)

        try:
            await self._adapter.continue_conversation(ta_session, deliver)
        except TASessionBusyError as e:
            logger.info("Case %s queued: %s", case.case_number, e)
            await self._enqueue(request)
        except Exception as e:
            logger.warning("Delivery of case %s to TA %s failed, queued: %s", case.case_number, ta_session.conversation_id, e)
            await self._enqueue(request)
        else:
            await self._mark(request, "delivered", ta_conversation_id=ta_session.conversation_id)
            logger.info("Case %s delivered to TA conversation %s", case.case_number, ta_session.conversation_id)

        return request

    async def flush_pending_if_any(self, ta_context: TurnContext) -> HandoverRequest | None:
        """Present the oldest pending request in this TA session, or say there is nothing pending."""
        async with self._lock:
            request = self._pending.pop_oldest()

        if request is None:
            await ta_context.send_text(NO_PENDING_TEXT)
            return None

        try:
            await self._present(ta_context, request, pending=True)
        except TASessionBusyError as e:
            logger.info("Flush skipped: %s", e)
            async with self._lock:
                self._pending.push_front(request)
            return None
        except Exception:
            async with self._lock:
                self._pending.push_front(request)
            raise

        async with self._lock:
            self._current = CurrentHandover(
                request=request,
                status="delivered",
                ta_conversation_id=ta_context.conversation_id,
            )
        logger.info(
            "Pending case %s (from %s) presented to TA conversation %s",
            request.case.case_number,
            request.origin_id,
            ta_context.conversation_id,
        )
        return request

    async def deliver_decision(self, origin_id: str | None, decision: Decision, comment: str) -> DeliveryResult:
        """Send the TA decision to the user conversation that submitted the case. Never retried."""
        async with self._lock:
            if origin_id:
                ref = self._reply_channels.pop(origin_id, None) or ConversationRef.for_conversation(origin_id)
            elif self._current is not None:
                ref = self._current.request.reply_channel
                self._reply_channels.pop(ref.conversation_id, None)
            else:
                ref = None

        if ref is None:
            logger.error("Decision %s has no reply channel to deliver to", decision)
            return DeliveryResult(delivered=False, error="No handover reply channel available")

        try:
            await self.peers.send_ta_response(ref, decision, comment)
        except PeerUnavailableError as e:
            logger.error("Decision %s for conversation %s not delivered: %s", decision, ref.conversation_id, e)
            await self._mark_origin(ref.conversation_id, "delivery_failed")
            return DeliveryResult(delivered=False, origin_id=ref.conversation_id, error=str(e))

        await self._mark_origin(ref.conversation_id, decision)
        logger.info("Decision %s delivered to conversation %s", decision, ref.conversation_id)
        return DeliveryResult(delivered=True, origin_id=ref.conversation_id)

    async def status_snapshot(self) -> dict:
        async with self._lock:
            return {
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "currentHandover": self._current.model_dump(mode="json") if self._current else None,
                "pendingHandovers": self._pending.origin_ids(),
                "taConversationId": self._ta_session.conversation_id if self._ta_session else None,
                "replyChannels": list(self._reply_channels),
            }

    async def clear(self) -> None:
        async with self._lock:
            self._pending.clear()
            self._current = None
            self._ta_session = None
            self._reply_channels.clear()
        logger.info("Coordinator state cleared")

    async def _present(self, ta_context: TurnContext, request: HandoverRequest, pending: bool = False) -> None:
        """Put a TA session into waitingAcknowledgment for request and show the acknowledgment card."""
        state = await self._states.get(ta_context.conversation_id, TADialogState)
        if state.step != TAStep.NONE:
            raise TASessionBusyError(ta_context.conversation_id, state.step.value)

        state.advance(TAStep.WAITING_ACKNOWLEDGMENT)
        state.handover_data = request.case
        state.original_conversation_id = request.origin_id

        await ta_context.send_card(render_card("ta_handover", request.case))
        if pending:
            await ta_context.send_text(PENDING_BANNER_TEXT)
        await self._states.set(ta_context.conversation_id, state)

    async def _enqueue(self, request: HandoverRequest) -> None:
        async with self._lock:
            replaced = self._pending.put(request)
            if self._current is not None and self._current.request is request:
                self._current.status = "pending"
            count = len(self._pending)
        logger.info(
            "Case %s from %s pending (%s, queue size %d)",
            request.case.case_number,
            request.origin_id,
            "replaced earlier entry" if replaced else "new entry",
            count,
        )

    async def _mark(self, request: HandoverRequest, status: str, ta_conversation_id: str | None = None) -> None:
        async with self._lock:
            if self._current is not None and self._current.request is request:
                self._current.status = status
                self._current.ta_conversation_id = ta_conversation_id
                self._current.updated_at = datetime.now(timezone.utc)

    async def _mark_origin(self, origin_id: str, status: str) -> None:
        async with self._lock:
            if self._current is not None and self._current.request.origin_id == origin_id:
                self._current.status = status
                self._current.updated_at = datetime.now(timezone.utc)
