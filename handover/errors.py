"""Exceptions raised inside the handover bots."""


class HandoverError(Exception):
    """Base class for handover coordination errors."""


class PeerUnavailableError(HandoverError):
    """The HTTP call to the other bot failed (connection error or non-2xx answer)."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason


class TASessionBusyError(HandoverError):
    """The TA session is already servicing a handover."""

    def __init__(self, conversation_id: str, step: str):
        super().__init__(f"TA conversation {conversation_id} is busy (step={step})")
        self.conversation_id = conversation_id
        self.step = step
