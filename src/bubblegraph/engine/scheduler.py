"""Per-frame callback queues ("run this again before the next repaint").

Two implementations share the ``FrameScheduler`` protocol:

- ``ManualFrameScheduler``: frames run only when the owner calls
  ``advance()``. Used headless and in tests.
- ``AsyncioFrameScheduler``: frames run on the running event loop at a target
  rate via ``loop.call_later``. Used by the server; never spawns threads.

Callbacks receive the frame timestamp in seconds.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from collections.abc import Callable
from typing import Protocol

logger = logging.getLogger(__name__)

FrameCallback = Callable[[float], None]


class FrameScheduler(Protocol):
    """Schedules one-shot callbacks for the next frame."""

    def request_frame(self, callback: FrameCallback) -> int:
        """Queue ``callback`` for the next frame and return a handle."""
        ...

    def cancel_frame(self, handle: int) -> None:
        """Cancel a queued callback. Unknown or already-run handles are ignored."""
        ...

    def pending(self) -> int:
        """Number of callbacks still queued."""
        ...


class ManualFrameScheduler:
    """Deterministic scheduler advanced explicitly by its owner.

    Example:
        >>> scheduler = ManualFrameScheduler()
        >>> handle = scheduler.request_frame(lambda now: None)
        >>> scheduler.advance()
        1
    """

    def __init__(self, frame_interval: float = 1.0 / 60.0) -> None:
        if frame_interval <= 0:
            raise ValueError("frame_interval must be positive")
        self.frame_interval = frame_interval
        self.now = 0.0
        self._ids = itertools.count(1)
        self._queue: dict[int, FrameCallback] = {}

    def request_frame(self, callback: FrameCallback) -> int:
        handle = next(self._ids)
        self._queue[handle] = callback
        return handle

    def cancel_frame(self, handle: int) -> None:
        self._queue.pop(handle, None)

    def pending(self) -> int:
        return len(self._queue)

    def advance(self, frames: int = 1) -> int:
        """Run ``frames`` frames; returns the number of callbacks invoked.

        Callbacks requested while a frame runs are deferred to the next frame.
        """
        invoked = 0
        for _ in range(frames):
            self.now += self.frame_interval
            batch, self._queue = self._queue, {}
            for callback in batch.values():
                callback(self.now)
                invoked += 1
        return invoked

    def run_until_idle(self, max_frames: int = 10_000) -> int:
        """Advance until nothing is queued (or ``max_frames`` is reached).

        Returns:
            Number of frames advanced.
        """
        frames = 0
        while self._queue and frames < max_frames:
            self.advance()
            frames += 1
        return frames


class AsyncioFrameScheduler:
    """Frame scheduler backed by the running asyncio event loop."""

    def __init__(self, fps: float = 60.0) -> None:
        if fps <= 0:
            raise ValueError("fps must be positive")
        self.fps = fps
        self._ids = itertools.count(1)
        self._handles: dict[int, asyncio.TimerHandle] = {}

    def request_frame(self, callback: FrameCallback) -> int:
        loop = asyncio.get_running_loop()
        handle = next(self._ids)

        def run() -> None:
            self._handles.pop(handle, None)
            callback(loop.time())

        self._handles[handle] = loop.call_later(1.0 / self.fps, run)
        return handle

    def cancel_frame(self, handle: int) -> None:
        timer = self._handles.pop(handle, None)
        if timer is not None:
            timer.cancel()

    def pending(self) -> int:
        return len(self._handles)

    def cancel_all(self) -> None:
        """Cancel every queued frame (used on shutdown)."""
        for handle in list(self._handles):
            self.cancel_frame(handle)
