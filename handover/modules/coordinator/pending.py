"""
Pending Queue: handover requests waiting for a TA session, keyed by origin
(user conversation id). One entry per origin, oldest origin first.
Not synchronized on its own; HandoverCoordinator guards every access.
"""

from collections import OrderedDict

from handover.models.handover import HandoverRequest


class PendingQueue:
    def __init__(self):
        self._entries: OrderedDict[str, HandoverRequest] = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, origin_id: str) -> bool:
        return origin_id in self._entries

    def put(self, request: HandoverRequest) -> bool:
        """Queue a request. A request for an origin already queued replaces it in place.

        Returns True when an earlier entry was overwritten.
        """
        replaced = request.origin_id in self._entries
        self._entries[request.origin_id] = request
        return replaced

    def pop_oldest(self) -> HandoverRequest | None:
        if not self._entries:
            return None
        _, request = self._entries.popitem(last=False)
        return request

    def push_front(self, request: HandoverRequest) -> None:
        """Put back a request whose delivery failed, unless a newer one for the same origin arrived meanwhile."""
        if request.origin_id in self._entries:
            return
        self._entries[request.origin_id] = request
        self._entries.move_to_end(request.origin_id, last=False)

    def get(self, origin_id: str) -> HandoverRequest | None:
        return self._entries.get(origin_id)

    def origin_ids(self) -> list[str]:
        return list(self._entries)

    def clear(self) -> None:
        self._entries.clear()
