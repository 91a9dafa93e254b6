"""
Nested wall-clock deadlines for a run and its per-query calls.
"""

import time
from typing import Optional

from models.errors import DeadlineExceeded


class Deadline:
    """
    A point in time after which no further external call may start.

    A child deadline never outlives its parent: its expiry is the earlier of
    its own budget and the parent's expiry.
    """

    def __init__(self, seconds: float, parent: Optional["Deadline"] = None, label: str = "run"):
        self.label = label
        expires_at = time.monotonic() + max(seconds, 0.0)
        if parent is not None:
            expires_at = min(expires_at, parent.expires_at)
        self.expires_at = expires_at

    def remaining(self) -> float:
        return max(self.expires_at - time.monotonic(), 0.0)

    def expired(self) -> bool:
        return time.monotonic() >= self.expires_at

    def check(self, what: str = "call") -> None:
        if self.expired():
            raise DeadlineExceeded(f"{self.label} deadline exceeded before {what}")

    def child(self, seconds: float, label: str = "query") -> "Deadline":
        return Deadline(seconds, parent=self, label=label)

    def __repr__(self) -> str:
        return f"Deadline(label={self.label!r}, remaining={self.remaining():.1f}s)"
