"""
Conversation State Store: dialog state per conversation id.
Memory-resident; state does not survive a restart.
"""

import asyncio
from typing import TypeVar

from pydantic import BaseModel

StateT = TypeVar("StateT", bound=BaseModel)


class ConversationStateStore:
    def __init__(self):
        self._states: dict[str, dict] = {}
        self._lock = asyncio.Lock()

    async def get(self, conversation_id: str, model: type[StateT]) -> StateT:
        """Load state for a conversation, or a fresh default when nothing was saved yet."""
        async with self._lock:
            data = self._states.get(conversation_id)
        if data is None:
            return model()
        return model.model_validate(data)

    async def set(self, conversation_id: str, state: BaseModel) -> None:
        async with self._lock:
            self._states[conversation_id] = state.model_dump(mode="json")

    async def delete(self, conversation_id: str) -> None:
        async with self._lock:
            self._states.pop(conversation_id, None)

    async def clear(self) -> None:
        async with self._lock:
            self._states.clear()

    def conversation_ids(self) -> list[str]:
        return list(self._states)
