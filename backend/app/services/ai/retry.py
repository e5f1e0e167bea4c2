"""Bounded retry for provider cold starts."""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from app.services.ai.errors import ProviderError, ProviderErrorKind

logger = logging.getLogger(__name__)

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]


async def retry_once(
    operation: Callable[[], Awaitable[T]],
    *,
    retry_on: ProviderErrorKind,
    delay_seconds: float,
    sleep: Sleep = asyncio.sleep,
) -> T:
    """Run ``operation``; if it fails with ``retry_on``, wait ``delay_seconds`` and run it exactly once more.

    The second attempt's outcome is final whatever it is, so a provider that stays
    cold costs at most one extra request and one delay.
    """
    try:
        return await operation()
    except ProviderError as exc:
        if exc.kind is not retry_on:
            raise
        logger.info("%s reported %s; retrying once in %.0fs", exc.provider, exc.kind.value, delay_seconds)

    await sleep(delay_seconds)
    return await operation()
