"""Bounded retry for model calls, and explicit outcomes for best-effort steps."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Result of a best-effort call: either a value or the error it hit.

    Callers that may ignore failures receive the error as data instead of
    having it suppressed inside the callee.
    """

    value: T | None = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap_or(self, default: T) -> T:
        if self.error is not None or self.value is None:
            return default
        return self.value


@dataclass(frozen=True)
class AttemptPolicy:
    """How many times to try a model call, and at which temperature.

    The first attempt uses ``first_temperature``; every retry uses the lower
    ``retry_temperature`` after sleeping ``delay_seconds``.

    Args:
        first_temperature: Sampling temperature for the first attempt.
        retry_temperature: Sampling temperature for later attempts.
        max_attempts: Total attempts, including the first.
        delay_seconds: Pause between attempts.
    """

    first_temperature: float
    retry_temperature: float = 0.1
    max_attempts: int = 3
    delay_seconds: float = 0.5

    def temperature_for(self, attempt: int) -> float:
        return self.first_temperature if attempt == 0 else self.retry_temperature

    async def run(
        self,
        operation: Callable[[float], Awaitable[T]],
        fallback: Callable[[BaseException], T] | None = None,
        *,
        label: str = "model call",
    ) -> T:
        """Run ``operation`` until it succeeds or attempts run out.

        Args:
            operation: Coroutine factory taking the attempt's temperature.
            fallback: Produces the result from the last error once every
                attempt failed. Without it the last error is re-raised.
            label: Name used in log messages.

        Returns:
            The operation's result, or the fallback's.
        """
        last_error: BaseException | None = None
        for attempt in range(self.max_attempts):
            try:
                return await operation(self.temperature_for(attempt))
            except Exception as e:
                last_error = e
                logger.warning("%s attempt %d failed: %s", label, attempt + 1, e)
                if attempt + 1 < self.max_attempts and self.delay_seconds > 0:
                    await asyncio.sleep(self.delay_seconds)

        logger.error("%s failed after %d attempts", label, self.max_attempts)
        if last_error is None:
            raise ValueError("AttemptPolicy.max_attempts must be at least 1")
        if fallback is None:
            raise last_error
        return fallback(last_error)
