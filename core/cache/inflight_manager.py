from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from core.clients.interface import TranslationCancelledError, TranslationTimeoutError
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging


__all__: list[str] = ["InFlightManager"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)


class InFlightManager:
    """Coalesces concurrent requests for the same key into one producer and any number of waiters.

    The first caller of ``mark_inflight_start`` for a key becomes the producer and must finish the key
    with ``store_inflight_result`` or ``store_inflight_exception``. Later callers wait for that outcome.
    """

    def __init__(self, *, wait_timeout: float | None = None) -> None:
        """Initialize the manager.

        Args:
            wait_timeout (float | None): Upper bound for a waiter in seconds. None waits as long as the
                producer runs, which is itself bounded by the translator timeout.
        """
        self._inflight: dict[str, asyncio.Future[str]] = {}
        self._lock: asyncio.Lock = asyncio.Lock()
        self._wait_timeout: float | None = wait_timeout
        self._closed: bool = False

    @property
    def is_closed(self) -> bool:
        return self._closed

    def is_inflight(self, key: str) -> bool:
        return key in self._inflight

    def inflight_keys(self) -> frozenset[str]:
        return frozenset(self._inflight)

    async def close(self) -> None:
        """Cancel every pending request and refuse new ones."""
        self._closed = True
        async with self._lock:
            for fut in self._inflight.values():
                if not fut.done():
                    fut.cancel()
            count: int = len(self._inflight)
            self._inflight.clear()
        logger.info("InFlightManager closed (%d pending request(s) cancelled)", count)

    async def mark_inflight_start(self, key: str) -> str | None:
        """Register a request, or wait for the one already running for the same key.

        Args:
            key (str): Request key.

        Returns:
            str | None: None if the caller is now the producer for the key, otherwise the text
            produced by the request already in flight.

        Raises:
            ValueError: If the key is empty.
            TranslationCancelledError: If the manager is closed or the request was cancelled.
            TranslationTimeoutError: If waiting exceeded ``wait_timeout``.
            Exception: Whatever the producer stored with ``store_inflight_exception``.
        """
        if not key:
            msg = "In-flight key must not be empty"
            raise ValueError(msg)
        if self._closed:
            msg = f"In-flight manager is closed, refusing key: {key}"
            raise TranslationCancelledError(msg)

        async with self._lock:
            if key not in self._inflight:
                loop: asyncio.AbstractEventLoop = asyncio.get_running_loop()
                self._inflight[key] = loop.create_future()
                logger.debug("Marked in-flight start for key: %s", key)
                return None
            fut: asyncio.Future[str] = self._inflight[key]
            logger.debug("In-flight request detected for key: %s", key)

        try:
            # shield: a waiter giving up must not cancel the producer's future
            result: str = await asyncio.wait_for(asyncio.shield(fut), timeout=self._wait_timeout)
        except TimeoutError:
            logger.warning("In-flight wait timeout for key: %s", key)
            msg = f"Timed out waiting for in-flight request: {key}"
            raise TranslationTimeoutError(msg) from None
        except asyncio.CancelledError:
            if not fut.cancelled():
                # the waiter itself was cancelled
                raise
            logger.info("In-flight request cancelled for key: %s", key)
            msg = f"In-flight request cancelled: {key}"
            raise TranslationCancelledError(msg) from None
        else:
            logger.debug("Received in-flight result for key: %s", key)
            return result

    async def store_inflight_result(self, key: str, result: str) -> None:
        """Resolve every waiter of a key with the producer's result and release the key."""
        async with self._lock:
            fut: asyncio.Future[str] | None = self._inflight.pop(key, None)
            if fut and not fut.done():
                fut.set_result(result)
                logger.debug("Set in-flight result for key: %s", key)
            else:
                logger.debug("No in-flight future found or already done for key: %s", key)

    async def store_inflight_exception(self, key: str, exc: BaseException) -> None:
        """Reject every waiter of a key with the producer's error and release the key."""
        async with self._lock:
            fut: asyncio.Future[str] | None = self._inflight.pop(key, None)
            if fut and not fut.done():
                if isinstance(exc, asyncio.CancelledError):
                    fut.cancel()
                else:
                    fut.set_exception(exc)
                    # nobody may be waiting; keep asyncio from reporting an unretrieved exception
                    fut.exception()
                logger.debug("Set in-flight exception for key: %s (%s)", key, type(exc).__name__)
            else:
                logger.debug("No in-flight future found or already done for key: %s", key)
