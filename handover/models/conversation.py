"""
Channel-agnostic chat activity and the serializable reply-channel token.
The bots only ever see these models, never a framework-specific turn object.
"""

from pydantic import BaseModel, ConfigDict, Field


class ChannelAccount(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str | None = None


class ConversationAccount(BaseModel):
    id: str


class ConversationRef(BaseModel):
    """Everything needed to push a message into a conversation later, from any process."""

    model_config = ConfigDict(populate_by_name=True)

    conversation: ConversationAccount
    channel_id: str = Field(default="emulator", alias="channelId")
    service_url: str | None = Field(default=None, alias="serviceUrl")
    user: ChannelAccount | None = None
    bot: ChannelAccount | None = None
    # Base URL of the bot process that owns this conversation
    callback_url: str | None = Field(default=None, alias="callbackUrl")

    @property
    def conversation_id(self) -> str:
        return self.conversation.id

    @classmethod
    def for_conversation(cls, conversation_id: str) -> "ConversationRef":
        return cls(conversation=ConversationAccount(id=conversation_id))

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class Activity(BaseModel):
    """Inbound chat activity (text message, card submission or membership update)."""

    model_config = ConfigDict(populate_by_name=True)

    type: str = "message"  # message, conversationUpdate
    id: str | None = None
    text: str | None = None
    value: dict | None = None
    conversation: ConversationAccount
    from_: ChannelAccount | None = Field(default=None, alias="from")
    recipient: ChannelAccount | None = None
    channel_id: str = Field(default="emulator", alias="channelId")
    service_url: str | None = Field(default=None, alias="serviceUrl")
    members_added: list[ChannelAccount] = Field(default_factory=list, alias="membersAdded")

    @property
    def conversation_id(self) -> str:
        return self.conversation.id

    @property
    def is_message(self) -> bool:
        return self.type == "message"

    def humans_added(self) -> list[ChannelAccount]:
        """Members added in a conversationUpdate, excluding the bot itself."""
        if self.type != "conversationUpdate":
            return []
        bot_id = self.recipient.id if self.recipient else None
        return [m for m in self.members_added if m.id != bot_id]

    def conversation_reference(self, callback_url: str | None = None) -> ConversationRef:
        return ConversationRef(
            conversation=self.conversation,
            channel_id=self.channel_id,
            service_url=self.service_url,
            user=self.from_,
            bot=self.recipient,
            callback_url=callback_url,
        )
