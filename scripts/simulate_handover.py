"""
Drives one handover end to end against locally running bots (outbox transport).
Run: python -m scripts.simulate_handover [case_number] [approve|reject] [comment]
"""

import asyncio
import sys

import httpx

from handover.config import get_settings

USER_CONVERSATION = "sim-user"
TA_CONVERSATION = "sim-ta"


def _activity(conversation_id: str, text: str | None = None, value: dict | None = None) -> dict:
    activity = {
        "type": "message",
        "conversation": {"id": conversation_id},
        "from": {"id": f"{conversation_id}-person"},
        "recipient": {"id": "bot"},
    }
    if text is not None:
        activity["text"] = text
    if value is not None:
        activity["value"] = value
    return activity


def _show(who: str, reply: dict) -> None:
    for activity in reply.get("activities", []):
        if "text" in activity:
            print(f"[{who}] {activity['text']}")
        else:
            title = activity["attachments"][0]["content"]["body"][0].get("text", "card")
            print(f"[{who}] <card: {title}>")


async def simulate(case_number: str, decision: str, comment: str):
    settings = get_settings()
    user = settings.user_bot_url.rstrip("/")
    ta = settings.ta_bot_url.rstrip("/")

    async with httpx.AsyncClient(timeout=settings.peer_timeout_seconds) as client:

        async def user_says(**kwargs):
            resp = await client.post(f"{user}/api/messages", json=_activity(USER_CONVERSATION, **kwargs))
            resp.raise_for_status()
            _show("user", resp.json())

        async def ta_says(**kwargs):
            resp = await client.post(f"{ta}/api/messages", json=_activity(TA_CONVERSATION, **kwargs))
            resp.raise_for_status()
            _show("ta", resp.json())

        await ta_says(text="hi")
        await user_says(text="handover")
        await user_says(value={"caseNumber": case_number})
        await user_says(value={"confirmation": "yes"})

        resp = await client.get(f"{ta}/api/conversations/{TA_CONVERSATION}/activities")
        _show("ta", resp.json())

        await ta_says(value={"action": "acknowledge"})
        await ta_says(value={"action": decision, "comments": comment})

        resp = await client.get(f"{user}/api/conversations/{USER_CONVERSATION}/activities")
        _show("user", resp.json())


if __name__ == "__main__":
    args = sys.argv[1:]
    asyncio.run(
        simulate(
            case_number=args[0] if len(args) > 0 else "123",
            decision=args[1] if len(args) > 1 else "approve",
            comment=args[2] if len(args) > 2 else "looks good",
        )
    )
