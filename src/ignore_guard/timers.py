"""
Cancelable scheduled tasks.

Every delayed action (debounce, delayed re-enable, countdown ticker) is a
named task owned by one `TimerManager`. Scheduling a name that is already
pending cancels the pending task first.
"""

import asyncio
import inspect
from typing import Any, Callable, Dict, Optional

from .constants import DEFAULT_TEMPORARY_DISABLE_SECONDS
from .utils import get_logger

logger = get_logger(__name__)

Callback = Callable[[], Any]


async def _invoke(callback: Callback):
    result = callback()
    if inspect.isawaitable(result):
        await result


class TimerManager:
    """Owns named one-shot and repeating tasks on the running event loop"""

    def __init__(self):
        self._tasks: Dict[str, asyncio.Task] = {}

    def schedule(self, name: str, delay: float, callback: Callback) -> asyncio.Task:
        """Run callback once after delay, replacing any pending task of that name"""
        self.cancel(name)
        task = asyncio.create_task(self._run_once(name, delay, callback))
        self._tasks[name] = task
        return task

    def schedule_repeating(self, name: str, interval: float, callback: Callback) -> asyncio.Task:
        """Run callback every interval seconds until canceled"""
        self.cancel(name)
        task = asyncio.create_task(self._run_repeating(name, interval, callback))
        self._tasks[name] = task
        return task

    async def _run_once(self, name: str, delay: float, callback: Callback):
        try:
            await asyncio.sleep(delay)
            await _invoke(callback)
        except asyncio.CancelledError:
            # Replaced or canceled, this is normal
            pass
        except Exception as e:
            logger.error(f"Error in timer {name}: {e}", exc_info=True)
        finally:
            if self._tasks.get(name) is asyncio.current_task():
                del self._tasks[name]

    async def _run_repeating(self, name: str, interval: float, callback: Callback):
        try:
            while True:
                await asyncio.sleep(interval)
                await _invoke(callback)
        except asyncio.CancelledError:
            pass
        except Exception as e:
            logger.error(f"Error in repeating timer {name}: {e}", exc_info=True)
        finally:
            if self._tasks.get(name) is asyncio.current_task():
                del self._tasks[name]

    def cancel(self, name: str) -> bool:
        task = self._tasks.pop(name, None)
        if task is None or task.done():
            return False
        task.cancel()
        return True

    def cancel_all(self):
        for name in list(self._tasks):
            self.cancel(name)

    def is_pending(self, name: str) -> bool:
        task = self._tasks.get(name)
        return task is not None and not task.done()


class TemporaryDisable:
    """
    Suspends the guard for a fixed duration.

    Starting again while a suspension is running cancels the pending
    re-enable and its countdown ticker, then starts over.
    """

    REENABLE_TIMER = "temporary-disable"
    COUNTDOWN_TIMER = "temporary-disable-countdown"

    def __init__(self, timers: TimerManager,
                 on_reenable: Callback,
                 on_tick: Optional[Callable[[int, int], Any]] = None,
                 duration: int = DEFAULT_TEMPORARY_DISABLE_SECONDS,
                 tick_interval: float = 1.0):
        self.timers = timers
        self.on_reenable = on_reenable
        self.on_tick = on_tick
        self.duration = duration
        self.tick_interval = tick_interval
        self.remaining_seconds = 0

    @property
    def active(self) -> bool:
        return self.timers.is_pending(self.REENABLE_TIMER)

    def start(self):
        self.cancel()
        self.remaining_seconds = self.duration
        self._tick()
        self.timers.schedule_repeating(self.COUNTDOWN_TIMER, self.tick_interval, self._tick)
        self.timers.schedule(self.REENABLE_TIMER, self.duration * self.tick_interval, self._reenable)
        logger.info(f"Guard disabled for {self.duration} seconds")

    def cancel(self):
        self.timers.cancel(self.REENABLE_TIMER)
        self.timers.cancel(self.COUNTDOWN_TIMER)
        self.remaining_seconds = 0

    def _tick(self):
        if self.remaining_seconds <= 0:
            self.timers.cancel(self.COUNTDOWN_TIMER)
            return
        minutes, seconds = divmod(self.remaining_seconds, 60)
        if self.on_tick is not None:
            self.on_tick(minutes, seconds)
        self.remaining_seconds -= 1

    async def _reenable(self):
        self.timers.cancel(self.COUNTDOWN_TIMER)
        self.remaining_seconds = 0
        await _invoke(self.on_reenable)
        logger.info("Guard re-enabled after temporary disable")
