"""
User Dialog: per-conversation flow of the user bot.

none -> caseSelection -> confirmation -> waitingTA

The TA verdict arrives later through /api/ta-response, which resets the
conversation back to none (see apply_ta_response).
"""

import logging

from handover.config import get_settings
from handover.errors import PeerUnavailableError
from handover.models.dialog import UserDialogState, UserStep
from handover.models.handover import Decision
from handover.modules.cards.templates import render_card
from handover.modules.cases.catalog import CaseCatalog
from handover.modules.cases.eligibility import eligibility_failures
from handover.modules.chat.base import TurnContext
from handover.modules.peers.client import PeerClient
from handover.modules.reports.generator import generate_report, log_handover_operation
from handover.modules.storage.reports import ReportStore
from handover.modules.storage.state import ConversationStateStore

logger = logging.getLogger(__name__)

HANDOVER_COMMAND = "handover"
AFFIRMATIVE = {"yes", "y"}

CHECKING_TEXT = "Checking eligibility of handover"
SENT_TEXT = "Case sent for TA approval. Waiting for TA response..."
SEND_FAILED_TEXT = "Failed to send case to TA Bot. Please check TA Bot status."
CANCELLED_TEXT = "Handover cancelled."
APPROVED_FOLLOW_UP_TEXT = (
    "Updated the Sharepoint with the case handover details, please send the case to queue "
    "and connect with the next engineer once assigned."
)


def ineligible_text(failures: list[str]) -> str:
    return "The case does not match handover criteria: " + "; ".join(failures) + "."


def ta_response_texts(decision: Decision, comment: str) -> list[str]:
    if decision == "approve":
        return [f"The handover is approved with the following comment: {comment}", APPROVED_FOLLOW_UP_TEXT]
    return [f"Handover rejected. TA comment: {comment}"]


class UserDialog:
    def __init__(
        self,
        state_store: ConversationStateStore,
        catalog: CaseCatalog,
        peers: PeerClient,
        reports: ReportStore,
        welcome_text: str | None = None,
    ):
        self.states = state_store
        self.catalog = catalog
        self.peers = peers
        self.reports = reports
        self.welcome_text = welcome_text or get_settings().welcome_text

    async def on_turn(self, context: TurnContext) -> None:
        activity = context.activity

        if activity.humans_added():
            await context.send_text(self.welcome_text)
            return
        if not activity.is_message:
            return

        state = await self.states.get(context.conversation_id, UserDialogState)
        value = activity.value or {}

        if state.step == UserStep.NONE:
            await self._on_idle(context, state, activity.text)
        elif state.step == UserStep.CASE_SELECTION and value.get("caseNumber"):
            await self._on_case_selected(context, state, str(value["caseNumber"]))
        elif state.step == UserStep.CONFIRMATION and value.get("confirmation"):
            await self._on_confirmation(context, state, str(value["confirmation"]))
        else:
            logger.debug("Conversation %s at step %s ignored activity", context.conversation_id, state.step.value)

    async def _on_idle(self, context: TurnContext, state: UserDialogState, text: str | None) -> None:
        if (text or "").strip().lower() != HANDOVER_COMMAND:
            await context.send_text(self.welcome_text)
            return

        await context.send_card(render_card("case_selection", self.catalog.list_cases()))
        state.advance(UserStep.CASE_SELECTION)
        await self.states.set(context.conversation_id, state)

    async def _on_case_selected(self, context: TurnContext, state: UserDialogState, case_number: str) -> None:
        case = self.catalog.find_by_case_number(case_number)
        if case is None:
            logger.warning("Conversation %s selected unknown case %s", context.conversation_id, case_number)
            await context.send_text(f"Case {case_number} was not found. Please select a case from the list.")
            await context.send_card(render_card("case_selection", self.catalog.list_cases()))
            return

        await context.send_card(render_card("confirmation", case))
        state.selected_case = case
        state.advance(UserStep.CONFIRMATION)
        await self.states.set(context.conversation_id, state)

    async def _on_confirmation(self, context: TurnContext, state: UserDialogState, confirmation: str) -> None:
        if confirmation.strip().lower() not in AFFIRMATIVE:
            await context.send_text(CANCELLED_TEXT)
            await self._reset(context)
            return

        await context.send_text(CHECKING_TEXT)
        case = state.selected_case
        failures = eligibility_failures(case)
        if failures:
            await context.send_text(ineligible_text(failures))
            report = generate_report(case, valid=False, reject_reason="; ".join(failures))
            try:
                path = self.reports.save(report)
                log_handover_operation(
                    "report_generated_validation",
                    {"caseNumber": case.case_number, "reportPath": str(path)},
                )
            except OSError as e:
                logger.error("Could not save report for case %s: %s", case.case_number, e)
            await self._reset(context)
            return

        ref = context.ref
        try:
            await self.peers.submit_handover(case, ref)
        except PeerUnavailableError as e:
            logger.error("Error sending case %s to TA Bot: %s", case.case_number, e)
            await context.send_text(SEND_FAILED_TEXT)
            await self._reset(context)
            return

        await context.send_text(SENT_TEXT)
        state.advance(UserStep.WAITING_TA)
        await self.states.set(context.conversation_id, state)
        logger.info("Case %s sent for TA approval from conversation %s", case.case_number, context.conversation_id)

    async def _reset(self, context: TurnContext) -> None:
        await self.states.set(context.conversation_id, UserDialogState())

    async def apply_ta_response(self, context: TurnContext, decision: Decision, comment: str) -> None:
        """Proactive turn: tell the user the TA verdict and end the handover flow."""
        for text in ta_response_texts(decision, comment):
            await context.send_text(text)
        await self._reset(context)
        logger.info("TA decision %s delivered to conversation %s", decision, context.conversation_id)
