"""
TA Dialog: per-conversation flow of the technical-approver bot.

none -> waitingAcknowledgment -> waitingApproval -> completed -> none

A session only leaves none through the coordinator (immediate delivery or a
flush of the pending queue). Once a decision is processed the session returns
to none, ready for the next handover.
"""

import json
import logging
from datetime import datetime, timezone

from handover.models.dialog import TADialogState, TAStep
from handover.models.handover import Decision
from handover.modules.cards.templates import render_card
from handover.modules.chat.base import TurnContext
from handover.modules.coordinator.manager import HandoverCoordinator
from handover.modules.reports.generator import log_handover_operation, report_for_ta_decision
from handover.modules.storage.reports import ReportStore
from handover.modules.storage.state import ConversationStateStore

logger = logging.getLogger(__name__)

GREETING_TEXT = "Hello! I'm the TA Bot. I handle handover requests from the User Bot."
IDLE_TEXT = 'TA Bot is ready. Send "status" for a status report, "clear" to reset storage.'
ACKNOWLEDGED_TEXT = "Handover acknowledged. Please review and approve/reject."
CLEARED_TEXT = "All storage cleared."
DEFAULT_COMMENT = "No comments provided"
CLEAR_COMMAND = "clear"

ACTIONS_BY_STEP = {
    TAStep.WAITING_ACKNOWLEDGMENT: {"acknowledge"},
    TAStep.WAITING_APPROVAL: {"approve", "reject"},
}
KNOWN_ACTIONS = {"acknowledge", "approve", "reject"}


class TADialog:
    def __init__(
        self,
        state_store: ConversationStateStore,
        coordinator: HandoverCoordinator,
        reports: ReportStore,
    ):
        self.states = state_store
        self.coordinator = coordinator
        self.reports = reports

    async def on_turn(self, context: TurnContext) -> None:
        activity = context.activity
        await self.coordinator.register_ta_session(context.ref)

        if activity.humans_added():
            await context.send_text(GREETING_TEXT)
            state = await self.states.get(context.conversation_id, TADialogState)
            if state.step == TAStep.NONE:
                await self.coordinator.flush_pending_if_any(context)
            return
        if not activity.is_message:
            return

        text = (activity.text or "").strip().lower()
        if not activity.value:
            if "status" in text or "diagnostic" in text:
                await self._send_status(context)
                return
            if text == CLEAR_COMMAND:
                await self._clear(context)
                return

        state = await self.states.get(context.conversation_id, TADialogState)
        if state.step == TAStep.NONE and self.coordinator.has_pending():
            await self.coordinator.flush_pending_if_any(context)
            return

        if activity.value:
            await self._on_submission(context, state, activity.value)
        else:
            await context.send_text(IDLE_TEXT)

    async def _on_submission(self, context: TurnContext, state: TADialogState, value: dict) -> None:
        action = value.get("action")
        if action not in KNOWN_ACTIONS:
            await context.send_text(f"Unknown action: {action}")
            return
        if action not in ACTIONS_BY_STEP.get(state.step, set()):
            await context.send_text(f"Invalid action '{action}' for the current step ({state.step.value}).")
            return

        if action == "acknowledge":
            await self._on_acknowledge(context, state)
        else:
            comments = (value.get("comments") or value.get("comment") or "").strip() or DEFAULT_COMMENT
            await self._on_decision(context, state, action, comments)

    async def _on_acknowledge(self, context: TurnContext, state: TADialogState) -> None:
        await context.send_text(ACKNOWLEDGED_TEXT)
        await context.send_card(render_card("ta_approval", state.handover_data))
        state.advance(TAStep.WAITING_APPROVAL)
        state.acknowledged_at = datetime.now(timezone.utc)
        await self.states.set(context.conversation_id, state)

    async def _on_decision(self, context: TurnContext, state: TADialogState, decision: Decision, comments: str) -> None:
        case = state.handover_data
        result = await self.coordinator.deliver_decision(state.original_conversation_id, decision, comments)

        if case is not None:
            report = report_for_ta_decision(case, decision, comments)
            try:
                path = self.reports.save(report)
                log_handover_operation(
                    "report_generated_ta_decision",
                    {
                        "caseNumber": case.case_number,
                        "decision": decision,
                        "reportPath": str(path),
                        "taReviewer": case.ta_reviewer or "Unknown TA",
                    },
                )
            except OSError as e:
                logger.error("Error generating handover report for case %s: %s", case.case_number, e)
        else:
            logger.warning("Decision %s in %s has no case data, report skipped", decision, context.conversation_id)

        verdict = "approved" if decision == "approve" else "rejected"
        await context.send_text(f"{verdict.upper()}: Handover {verdict}. Comments: {comments}")
        if not result.delivered:
            await context.send_text(f"Failed to deliver the decision to the User Bot: {result.error}")

        state.advance(TAStep.COMPLETED)
        state.decision = decision
        state.comments = comments
        state.completed_at = datetime.now(timezone.utc)
        logger.info(
            "TA conversation %s completed handover of case %s (%s, delivered=%s)",
            context.conversation_id,
            case.case_number if case else "?",
            decision,
            result.delivered,
        )
        await self.states.set(context.conversation_id, TADialogState())

    async def _send_status(self, context: TurnContext) -> None:
        report = await self.coordinator.status_snapshot()
        state = await self.states.get(context.conversation_id, TADialogState)
        report["currentState"] = state.model_dump(mode="json")
        report["conversations"] = self.states.conversation_ids()
        await context.send_text(f"**STATUS REPORT**\n```json\n{json.dumps(report, indent=2)}\n```")

    async def _clear(self, context: TurnContext) -> None:
        await self.coordinator.clear()
        await self.states.clear()
        await self.coordinator.register_ta_session(context.ref)
        await context.send_text(CLEARED_TEXT)
