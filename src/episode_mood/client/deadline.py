"""End-to-end time budget shared by every collaborator call."""

from __future__ import annotations

import time
from typing import Optional

from ..errors import DeadlineExceededError


class Deadline:
    """
    A single deadline for a whole pipeline run.

    Each HTTP call asks for ``remaining()`` and uses it as its timeout, so
    the sum of all calls can never exceed the budget.

    Example:
        >>> deadline = Deadline(30.0)
        >>> client.get(url, timeout=deadline.remaining())
    """

    def __init__(self, seconds: Optional[float] = None, clock=time.monotonic):
        self._clock = clock
        self.seconds = seconds
        self._expires_at = None if seconds is None else clock() + seconds

    @classmethod
    def unbounded(cls) -> "Deadline":
        return cls(None)

    @property
    def expired(self) -> bool:
        return self._expires_at is not None and self._clock() >= self._expires_at

    def remaining(self) -> Optional[float]:
        """
        Seconds left before the deadline.

        Returns:
            Remaining seconds, or None when the deadline is unbounded.

        Raises:
            DeadlineExceededError: If the deadline has already passed.
        """
        if self._expires_at is None:
            return None
        left = self._expires_at - self._clock()
        if left <= 0:
            raise DeadlineExceededError(
                f"Deadline of {self.seconds:g}s exceeded",
                details={"seconds": self.seconds},
            )
        return left
