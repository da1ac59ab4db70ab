"""
Per-conversation dialog state for both bots.
Steps only move forward; any step may reset to NONE.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel

from handover.models.case import Case
from handover.models.handover import Decision


class UserStep(str, Enum):
    NONE = "none"
    CASE_SELECTION = "caseSelection"
    CONFIRMATION = "confirmation"
    WAITING_TA = "waitingTA"


class TAStep(str, Enum):
    NONE = "none"
    WAITING_ACKNOWLEDGMENT = "waitingAcknowledgment"
    WAITING_APPROVAL = "waitingApproval"
    COMPLETED = "completed"


_USER_TRANSITIONS = {
    UserStep.NONE: {UserStep.CASE_SELECTION},
    UserStep.CASE_SELECTION: {UserStep.CONFIRMATION},
    UserStep.CONFIRMATION: {UserStep.WAITING_TA},
    UserStep.WAITING_TA: set(),
}

_TA_TRANSITIONS = {
    TAStep.NONE: {TAStep.WAITING_ACKNOWLEDGMENT},
    TAStep.WAITING_ACKNOWLEDGMENT: {TAStep.WAITING_APPROVAL},
    TAStep.WAITING_APPROVAL: {TAStep.COMPLETED},
    TAStep.COMPLETED: set(),
}


class UserDialogState(BaseModel):
    step: UserStep = UserStep.NONE
    selected_case: Case | None = None

    def advance(self, step: UserStep) -> None:
        if step not in _USER_TRANSITIONS[self.step]:
            raise ValueError(f"Invalid user dialog transition {self.step.value} -> {step.value}")
        self.step = step


class TADialogState(BaseModel):
    step: TAStep = TAStep.NONE
    handover_data: Case | None = None
    original_conversation_id: str | None = None
    decision: Decision | None = None
    comments: str | None = None
    acknowledged_at: datetime | None = None
    completed_at: datetime | None = None

    def advance(self, step: TAStep) -> None:
        if step not in _TA_TRANSITIONS[self.step]:
            raise ValueError(f"Invalid TA dialog transition {self.step.value} -> {step.value}")
        self.step = step
