"""
Progress reporting through an observer callback

Long-running steps are wrapped in `Progress.watch(title)`, which emits one
event when the step begins and one when it ends. Observers only receive
events; nothing is shared between the step and the observer.
"""

import sys
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable


@dataclass(frozen=True)
class ProgressEvent:
    title: str
    elapsed: float | None = None  # None when the step begins

    @property
    def finished(self) -> bool:
        return self.elapsed is not None


def format_elapsed(seconds: float) -> str:
    """Format a duration with the largest unit that keeps it at or above one"""
    units = [
        (86400.0, "d"),
        (3600.0, "h"),
        (60.0, "m"),
        (1.0, "s"),
        (1e-3, "ms"),
        (1e-6, "us"),
    ]
    for scale, suffix in units:
        if seconds >= scale:
            return f"{seconds / scale:.1f}{suffix}"
    return f"{seconds / 1e-9:.1f}ns"


def console_observer(event: ProgressEvent, stream=None):
    """Print finished steps as `<elapsed>: <title>`"""
    if event.finished:
        print(f"{format_elapsed(event.elapsed):>8}: {event.title}", file=stream or sys.stdout)


class Progress:
    """Emits begin/end events for watched steps to an optional observer"""

    def __init__(self, observer: Callable[[ProgressEvent], None] | None = None):
        self.observer = observer

    def _emit(self, event: ProgressEvent):
        if self.observer is not None:
            self.observer(event)

    @contextmanager
    def watch(self, title: str):
        start = time.perf_counter()
        self._emit(ProgressEvent(title))
        try:
            yield
        finally:
            self._emit(ProgressEvent(title, time.perf_counter() - start))
