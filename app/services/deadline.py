"""Deadline propagated to every fanned-out upstream request."""

from __future__ import annotations

import time
from dataclasses import dataclass, field

import httpx


@dataclass(slots=True)
class Deadline:
    """Absolute point in monotonic time after which requests are abandoned."""

    seconds: float
    started_at: float = field(default_factory=time.monotonic)

    @classmethod
    def after(cls, seconds: float) -> "Deadline":
        return cls(seconds=seconds)

    @property
    def expires_at(self) -> float:
        return self.started_at + self.seconds

    def remaining(self) -> float:
        return max(0.0, self.expires_at - time.monotonic())

    @property
    def expired(self) -> bool:
        return self.remaining() <= 0.0

    def timeout(self, *, ceiling: float | None = None) -> httpx.Timeout:
        """Return an httpx timeout bounded by the remaining budget."""

        budget = self.remaining()
        if ceiling is not None:
            budget = min(budget, ceiling)
        return httpx.Timeout(max(budget, 0.001))


def timeout_kwargs(
    deadline: Deadline | None, *, ceiling: float | None = None
) -> dict[str, httpx.Timeout]:
    """Return request keyword arguments carrying the deadline, if any."""

    if deadline is None:
        return {}
    return {"timeout": deadline.timeout(ceiling=ceiling)}
