"""Upload progress reporting.

The upload collaborator reports only success or failure, so the percentage
shown while it runs is simulated: :class:`ProgressTicker` advances a
:class:`ProgressTracker` on a fixed interval and stops short of completion.
Only the session moves it to 100, once the upload has actually resolved.
"""
from __future__ import annotations

import asyncio
from typing import Callable, List, Optional

from .constants import (
    PROGRESS_CAP,
    PROGRESS_COMPLETE,
    PROGRESS_INTERVAL,
    PROGRESS_START,
    PROGRESS_STEP,
)
from .logging_utils import get_logger


logger = get_logger(__name__)

ProgressObserver = Callable[[int], None]


class ProgressTracker:
    """Percentage that only moves forward until explicitly reset."""

    def __init__(self) -> None:
        self._value = PROGRESS_START
        self._observers: List[ProgressObserver] = []

    @property
    def value(self) -> int:
        return self._value

    def subscribe(self, observer: ProgressObserver) -> None:
        self._observers.append(observer)

    def advance(self, value: int) -> int:
        """Raise progress to ``value``; lower values are ignored."""
        value = max(PROGRESS_START, min(int(value), PROGRESS_COMPLETE))
        if value > self._value:
            self._value = value
            self._notify()
        return self._value

    def complete(self) -> None:
        self.advance(PROGRESS_COMPLETE)

    def reset(self) -> None:
        if self._value != PROGRESS_START:
            self._value = PROGRESS_START
            self._notify()

    def _notify(self) -> None:
        for observer in list(self._observers):
            observer(self._value)


class ProgressTicker:
    def __init__(
        self,
        tracker: ProgressTracker,
        step: int = PROGRESS_STEP,
        interval: float = PROGRESS_INTERVAL,
        cap: int = PROGRESS_CAP,
    ) -> None:
        if cap >= PROGRESS_COMPLETE:
            raise ValueError(f"Ticker cap must stay below {PROGRESS_COMPLETE}, got {cap}")
        self.tracker = tracker
        self.step = step
        self.interval = interval
        self.cap = cap
        self._task: Optional[asyncio.Task] = None

    def start(self) -> None:
        if self._task is None:
            self._task = asyncio.ensure_future(self._run())

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def stop(self) -> None:
        task, self._task = self._task, None
        if task is not None:
            task.cancel()

    async def _run(self) -> None:
        while self.tracker.value < self.cap:
            await asyncio.sleep(self.interval)
            self.tracker.advance(min(self.tracker.value + self.step, self.cap))
        logger.debug("Progress ticker reached cap %d", self.cap)
