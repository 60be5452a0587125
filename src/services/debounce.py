import asyncio
import logging
from typing import Callable, Optional

from config import settings

logger = logging.getLogger(__name__)

SettleCallback = Callable[[str], None]


class DebouncedInput:
    """Turns a rapidly changing text input into a rate-limited settled value.

    ``raw_value`` follows every write immediately. ``settled_value`` only
    catches up after ``quiet_period`` seconds without writes, and stays
    ``None`` until the first settlement so "not yet settled" can be told
    apart from an empty filter.
    """

    def __init__(
        self,
        quiet_period: Optional[float] = None,
        on_settle: Optional[SettleCallback] = None,
    ):
        if quiet_period is None:
            quiet_period = settings.filter_debounce_ms / 1000
        self.quiet_period = quiet_period
        self.raw_value = ""
        self.settled_value: Optional[str] = None
        self._callbacks: list[SettleCallback] = [on_settle] if on_settle else []
        self._timer: Optional[asyncio.TimerHandle] = None
        self._settled_event: Optional[asyncio.Event] = None
        self._disposed = False

    @property
    def pending(self) -> bool:
        return self._timer is not None

    @property
    def disposed(self) -> bool:
        return self._disposed

    def add_settle_callback(self, callback: SettleCallback) -> None:
        self._callbacks.append(callback)

    def on_input_change(self, raw: str) -> None:
        if self._disposed:
            raise RuntimeError("Input controller already disposed")
        self.raw_value = raw
        self._cancel_timer()
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self.quiet_period, self._settle)

    def flush(self) -> None:
        """Settle the current raw value right away."""
        if self._disposed:
            raise RuntimeError("Input controller already disposed")
        self._cancel_timer()
        self._settle()

    async def wait_settled(self) -> Optional[str]:
        while self.pending:
            if self._settled_event is None:
                self._settled_event = asyncio.Event()
            await self._settled_event.wait()
        return self.settled_value

    def dispose(self) -> None:
        self._cancel_timer()
        self._disposed = True
        self._callbacks.clear()
        self._wake_waiters()

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _settle(self) -> None:
        self._timer = None
        self.settled_value = self.raw_value
        logger.debug(f"Input settled on {self.settled_value!r}")
        for callback in list(self._callbacks):
            callback(self.settled_value)
        self._wake_waiters()

    def _wake_waiters(self) -> None:
        if self._settled_event is not None:
            self._settled_event.set()
            self._settled_event = None
