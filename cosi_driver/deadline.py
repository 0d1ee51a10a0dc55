"""
Caller deadlines for lifecycle calls.
"""

import time

from cosi_driver.exceptions import DeadlineExceededError


class Deadline:
    """
    Absolute point in time after which a call must stop.

    Uses the monotonic clock so wall-clock adjustments do not shorten or
    extend a running call.

    Example:
        deadline = Deadline.after(30)
        driver.grant_access("b1", "alice", deadline=deadline)
    """

    def __init__(self, expires_at: float):
        self.expires_at = expires_at

    @classmethod
    def after(cls, seconds: float) -> "Deadline":
        return cls(time.monotonic() + seconds)

    def remaining(self) -> float:
        """Seconds left, never negative."""
        return max(0.0, self.expires_at - time.monotonic())

    def expired(self) -> bool:
        return time.monotonic() >= self.expires_at

    def check(self, operation: str = "call") -> None:
        """Raise DeadlineExceededError once the deadline has passed."""
        if self.expired():
            raise DeadlineExceededError(
                f"Deadline exceeded during {operation}",
                details={"operation": operation},
            )

    def __repr__(self) -> str:
        return f"Deadline(remaining={self.remaining():.3f}s)"


def lock_timeout(deadline: Deadline | None) -> float:
    """Translate an optional deadline into a ``Lock.acquire`` timeout."""
    if deadline is None:
        return -1
    return deadline.remaining()
