"""
Transient notifications (toasts) and request-scoped busy flags.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, List, Optional


logger = logging.getLogger(__name__)

# Seconds a toast stays visible before it dismisses itself
TOAST_DURATION = 3.2


@dataclass
class Toast:
    """A notification shown at ``shown_at`` for ``duration`` seconds."""

    message: str
    shown_at: float
    duration: float = TOAST_DURATION

    def is_visible(self, now: float) -> bool:
        return now - self.shown_at < self.duration


class Notifier:
    """
    Holds at most one toast at a time and dismisses it after its duration.

    A new toast replaces the current one. Listeners are called with the
    message each time a toast is shown (the CLI prints it).

    Examples:
        >>> notifier = Notifier(clock=lambda: 0.0)
        >>> notifier.show("Lesson #7 updated to Completed").message
        'Lesson #7 updated to Completed'
    """

    def __init__(
        self,
        duration: float = TOAST_DURATION,
        clock: Callable[[], float] = time.monotonic
    ):
        self.duration = duration
        self._clock = clock
        self._toast: Optional[Toast] = None
        self._listeners: List[Callable[[str], None]] = []

    def subscribe(self, listener: Callable[[str], None]):
        self._listeners.append(listener)

    def show(self, message: str) -> Toast:
        self._toast = Toast(message=message, shown_at=self._clock(), duration=self.duration)
        logger.info(f"Notification: {message}")
        for listener in self._listeners:
            listener(message)
        return self._toast

    @property
    def current(self) -> Optional[Toast]:
        """The visible toast, or None once it has auto-dismissed."""
        if self._toast is not None and not self._toast.is_visible(self._clock()):
            self._toast = None
        return self._toast

    def dismiss(self):
        self._toast = None


class BusyFlag:
    """
    Request-scoped busy flag.

    Set for the duration of an in-flight call so that repeating the
    action is refused instead of sending a duplicate request.

    Examples:
        >>> flag = BusyFlag("transition")
        >>> with flag:
        ...     flag.busy
        True
        >>> flag.busy
        False
    """

    def __init__(self, name: str):
        self.name = name
        self._busy = False

    @property
    def busy(self) -> bool:
        return self._busy

    def __enter__(self) -> 'BusyFlag':
        if self._busy:
            raise RuntimeError(f"{self.name} is already in progress")
        self._busy = True
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self._busy = False
        return False
