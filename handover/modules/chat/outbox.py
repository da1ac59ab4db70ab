"""In-memory transport: outgoing activities are kept per conversation until drained.

Unpolled conversations are bounded: the oldest activities of a conversation and
the least recently written conversations are dropped first.
"""

import logging
from collections import OrderedDict, deque

from handover.models.conversation import ConversationRef

logger = logging.getLogger(__name__)


class OutboxTransport:
    def __init__(self, max_activities: int = 100, max_conversations: int = 1000):
        self.max_activities = max_activities
        self.max_conversations = max_conversations
        self._outbox: OrderedDict[str, deque[dict]] = OrderedDict()

    async def send(self, ref: ConversationRef, activity: dict) -> None:
        conversation_id = ref.conversation_id
        queue = self._outbox.get(conversation_id)
        if queue is None:
            queue = self._outbox[conversation_id] = deque(maxlen=self.max_activities)
        else:
            self._outbox.move_to_end(conversation_id)
        if len(queue) == self.max_activities:
            logger.warning("Outbox of %s full, dropping its oldest activity", conversation_id)
        queue.append(activity)

        while len(self._outbox) > self.max_conversations:
            dropped, activities = self._outbox.popitem(last=False)
            logger.warning("Outbox dropped %d unpolled activities of %s", len(activities), dropped)

    def peek(self, conversation_id: str) -> list[dict]:
        return list(self._outbox.get(conversation_id, ()))

    def drain(self, conversation_id: str) -> list[dict]:
        return list(self._outbox.pop(conversation_id, ()))

    def texts(self, conversation_id: str) -> list[str]:
        return [a["text"] for a in self.peek(conversation_id) if "text" in a]

    def clear(self) -> None:
        self._outbox.clear()

    def conversation_ids(self) -> list[str]:
        return list(self._outbox)
