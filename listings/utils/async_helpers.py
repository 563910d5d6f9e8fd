"""
Running coroutines from synchronous code (views, Celery tasks, commands).
"""

import asyncio
from typing import Any, Awaitable


def run_async(coro: Awaitable[Any]) -> Any:
    """Run a coroutine to completion on a fresh event loop."""
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()
