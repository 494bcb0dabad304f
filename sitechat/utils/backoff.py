"""Exponential backoff state machine."""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

Sleep = Callable[[float], Awaitable[None]]


@dataclass
class Backoff:
    """
    Attempt counter with a doubling delay.

    State is ``(attempts, delay)``. Each failed attempt that should be retried
    calls :meth:`next_delay`, which returns the current delay and doubles it.
    Once ``attempts`` reaches ``max_attempts`` the budget is spent.

    Example:
        >>> backoff = Backoff(max_attempts=3, delay=2.0)
        >>> backoff.record_attempt(); backoff.next_delay()
        2.0
        >>> backoff.record_attempt(); backoff.next_delay()
        4.0
    """

    max_attempts: int = 5
    delay: float = 2.0
    multiplier: float = 2.0
    attempts: int = field(default=0, init=False)

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {self.max_attempts}")
        if self.delay < 0:
            raise ValueError(f"delay must not be negative, got {self.delay}")

    @property
    def exhausted(self) -> bool:
        return self.attempts >= self.max_attempts

    def record_attempt(self) -> None:
        self.attempts += 1

    def next_delay(self) -> float:
        """Return the delay to wait before the next attempt and double it."""
        current = self.delay
        self.delay *= self.multiplier
        return current


async def default_sleep(seconds: float) -> None:
    await asyncio.sleep(seconds)
