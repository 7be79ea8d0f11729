"""Timer service — tracked repeating and one-shot timers on the asyncio loop."""

import asyncio
import inspect
import itertools
import sys
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional


def _log(msg: str):
    print(msg, file=sys.stderr)


_ids = itertools.count(1)


@dataclass
class TimerHandle:
    timer_id: int
    repeating: bool
    interval: float
    cancelled: bool = False
    running: bool = False
    task: Optional[asyncio.Task] = field(default=None, repr=False)


async def invoke(callback: Callable[[], Any]):
    """Run a plain or coroutine callback; errors are logged, never raised."""
    try:
        result = callback()
        if inspect.isawaitable(result):
            await result
    except asyncio.CancelledError:
        raise
    except Exception as e:
        _log(f"[Timers] callback {getattr(callback, '__name__', callback)!r} failed: {e}")


class TimerService:
    """Schedules callbacks and remembers every live handle so they can be torn down.

    A repeating timer awaits its callback before sleeping again, so the ticks of
    one timer never overlap. Cancelling the handle whose callback is currently
    running only prevents future firings; the running callback is not interrupted.
    """

    def __init__(self):
        self._handles: Dict[int, TimerHandle] = {}

    def now(self) -> float:
        return time.monotonic()

    def every(self, interval: float, callback: Callable[[], Any]) -> TimerHandle:
        handle = TimerHandle(timer_id=next(_ids), repeating=True, interval=interval)
        handle.task = asyncio.get_running_loop().create_task(self._run_every(handle, callback))
        self._handles[handle.timer_id] = handle
        return handle

    def later(self, delay: float, callback: Callable[[], Any]) -> TimerHandle:
        handle = TimerHandle(timer_id=next(_ids), repeating=False, interval=delay)
        handle.task = asyncio.get_running_loop().create_task(self._run_later(handle, callback))
        self._handles[handle.timer_id] = handle
        return handle

    def cancel(self, handle: Optional[TimerHandle]):
        if handle is None or handle.cancelled:
            return
        handle.cancelled = True
        self._handles.pop(handle.timer_id, None)
        task = handle.task
        # A callback already in progress runs to completion
        if task is not None and not task.done() and not handle.running:
            task.cancel()

    def cancel_all(self):
        for handle in list(self._handles.values()):
            self.cancel(handle)

    def usage(self) -> Dict[str, int]:
        live = list(self._handles.values())
        return {
            "intervals": sum(1 for h in live if h.repeating),
            "timeouts": sum(1 for h in live if not h.repeating),
        }

    async def _run_every(self, handle: TimerHandle, callback: Callable[[], Any]):
        try:
            while not handle.cancelled:
                await asyncio.sleep(handle.interval)
                if handle.cancelled:
                    break
                handle.running = True
                try:
                    await invoke(callback)
                finally:
                    handle.running = False
        finally:
            self._handles.pop(handle.timer_id, None)

    async def _run_later(self, handle: TimerHandle, callback: Callable[[], Any]):
        try:
            await asyncio.sleep(handle.interval)
            if not handle.cancelled:
                handle.cancelled = True
                self._handles.pop(handle.timer_id, None)
                handle.running = True
                try:
                    await invoke(callback)
                finally:
                    handle.running = False
        finally:
            self._handles.pop(handle.timer_id, None)
