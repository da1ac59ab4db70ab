from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from handover.models.case import Case
from handover.models.conversation import ConversationRef

Decision = Literal["approve", "reject"]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class HandoverRequest(BaseModel):
    case: Case  # snapshot taken at submission time
    reply_channel: ConversationRef
    submitted_at: datetime = Field(default_factory=_utcnow)

    @property
    def origin_id(self) -> str:
        return self.reply_channel.conversation_id


class CurrentHandover(BaseModel):
    request: HandoverRequest
    status: str = "submitted"  # submitted, delivered, pending, approve, reject, delivery_failed
    ta_conversation_id: str | None = None
    updated_at: datetime = Field(default_factory=_utcnow)


class DeliveryResult(BaseModel):
    delivered: bool
    origin_id: str | None = None
    error: str | None = None


# --- HTTP bodies exchanged between the two bots ---


class HandoverSubmission(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    case: Case
    conversation_ref: ConversationRef = Field(alias="conversationRef")


class HandoverAccepted(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    conversation_id: str = Field(alias="conversationId")
    case_number: str = Field(alias="caseNumber")
    status: str = "pending"
    timestamp: datetime = Field(default_factory=_utcnow)


class TAResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    conversation_ref: ConversationRef = Field(alias="conversationRef")
    decision: Decision
    comment: str = ""
