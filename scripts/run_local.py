"""
Starts the user bot and the TA bot side by side for local development.
Run: python -m scripts.run_local
"""

import asyncio

import uvicorn

from handover.config import get_settings


async def main():
    settings = get_settings()
    servers = [
        uvicorn.Server(uvicorn.Config("handover.user_main:app", port=settings.user_bot_port, log_level="info")),
        uvicorn.Server(uvicorn.Config("handover.ta_main:app", port=settings.ta_bot_port, log_level="info")),
    ]
    print(f"User bot on :{settings.user_bot_port}, TA bot on :{settings.ta_bot_port}")
    await asyncio.gather(*(s.serve() for s in servers))


if __name__ == "__main__":
    asyncio.run(main())
