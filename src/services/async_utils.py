"""
Event loop helpers for the Streamlit pages.

Streamlit reruns page scripts synchronously, and every browser session runs
its script on its own thread. Debounce timers and fetch tasks belong to an
asyncio loop, so each session keeps its own loop alive across reruns (see
``ui.state.get_loop``) and drives it from synchronous code with
``run_async``. Without an explicit loop, each thread gets a persistent loop
of its own.
"""

import asyncio
import threading
from typing import Any, Coroutine, Optional, TypeVar

T = TypeVar("T")

_thread_state = threading.local()


def get_event_loop() -> asyncio.AbstractEventLoop:
    """Get or create the persistent event loop of the calling thread."""
    loop = getattr(_thread_state, "loop", None)
    if loop is None or loop.is_closed():
        loop = asyncio.new_event_loop()
        _thread_state.loop = loop
    return loop


def run_async(coro: Coroutine[Any, Any, T], loop: Optional[asyncio.AbstractEventLoop] = None) -> T:
    """Run a coroutine to completion on ``loop`` (or the thread's loop) from a synchronous context."""
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        if loop is None:
            loop = get_event_loop()
        return loop.run_until_complete(coro)
    coro.close()
    raise RuntimeError("Cannot run async code from within async context. Use await instead.")
