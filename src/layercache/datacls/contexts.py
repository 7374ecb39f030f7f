import threading
import time
from typing import Optional

from ..exceptions import CallCancelledError, DeadlineExceededError


class CallContext:
    """
    Deadline and cancellation signal owned by the caller of a cache operation.

    The cache never imposes a timeout of its own; it hands the caller's context
    to every durable-store call, which refuses to start once the context is
    cancelled or past its deadline.
    """

    def __init__(self, deadline: Optional[float] = None, cancel_event: Optional[threading.Event] = None):
        """
        Args:
            deadline: absolute ``time.monotonic()`` value, or None for no deadline
            cancel_event: event shared with whoever may cancel the call
        """
        self.deadline = deadline
        self._cancel_event = cancel_event or threading.Event()

    @classmethod
    def with_timeout(cls, seconds: float) -> "CallContext":
        return cls(deadline=time.monotonic() + seconds)

    def cancel(self):
        self._cancel_event.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    @property
    def expired(self) -> bool:
        return self.deadline is not None and time.monotonic() >= self.deadline

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, None when unbounded."""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    def check(self):
        if self.cancelled:
            raise CallCancelledError("call context was cancelled")
        if self.expired:
            raise DeadlineExceededError("call context deadline exceeded")

    def __repr__(self) -> str:
        return f"CallContext(remaining={self.remaining()}, cancelled={self.cancelled})"
