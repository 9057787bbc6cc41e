"""Lazy per-language translation cache for one loaded paste.

The cache owns the ``PasteRecord`` of the paste being viewed. A language is served from the record
when its text is known and fetched from the translator otherwise. Concurrent requests for the same
language share a single translator call, and failures are never cached.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from core.cache.inflight_manager import InFlightManager
from core.clients.interface import TranslationCancelledError
from models.paste_models import PasteRecord
from utils.logger_utils import LoggerUtils
from utils.string_utils import StringUtils

if TYPE_CHECKING:
    import logging

    from core.clients.interface import PasteStoreInterface, TranslatorInterface
    from models.paste_models import GetPasteResponse, TranslateResponse


__all__: list[str] = ["CacheStatistics", "TranslationCache"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)


@dataclass
class CacheStatistics:
    """Counters for one cache lifetime.

    Attributes:
        hits (int): Requests answered from the record, the original language included.
        misses (int): Requests that issued a translator call.
        coalesced (int): Requests that attached to a call already in flight.
        failures (int): Translator calls that ended in an error.
    """

    hits: int = 0
    misses: int = 0
    coalesced: int = 0
    failures: int = 0


class TranslationCache:
    """Serve translations of a single paste, fetching each language at most once at a time.

    Attributes:
        store (PasteStoreInterface): Source of the paste record.
        translator (TranslatorInterface): Source of missing translations.
        statistics (CacheStatistics): Usage counters.
    """

    def __init__(
        self,
        store: PasteStoreInterface,
        translator: TranslatorInterface,
        inflight_manager: InFlightManager | None = None,
    ) -> None:
        self.store: PasteStoreInterface = store
        self.translator: TranslatorInterface = translator
        self.inflight_manager: InFlightManager = inflight_manager or InFlightManager()
        self.statistics: CacheStatistics = CacheStatistics()
        self._record: PasteRecord | None = None
        self._pending: set[str] = set()
        self._closed: bool = False

    @property
    def record(self) -> PasteRecord:
        """The loaded paste.

        Raises:
            RuntimeError: If ``load`` has not completed yet.
        """
        if self._record is None:
            msg = "No paste has been loaded"
            raise RuntimeError(msg)
        return self._record

    @property
    def is_loaded(self) -> bool:
        return self._record is not None

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def pending(self) -> frozenset[str]:
        """Languages with a translator call currently in flight."""
        return frozenset(self._pending)

    def is_cached(self, lang: str) -> bool:
        """Check whether a language can be served without a translator call."""
        return self._record is not None and self._record.text_for(lang) is not None

    async def load(self, paste_id: str) -> PasteRecord:
        """Fetch a paste and take ownership of its record.

        Args:
            paste_id (str): Paste identifier.

        Returns:
            PasteRecord: The loaded record, including translations already persisted.

        Raises:
            RuntimeError: If a paste was already loaded or the cache is closed.
            NotFoundError: If the paste does not exist.
            TransportError: If the paste could not be fetched.
        """
        if self._closed:
            msg = "Translation cache is closed"
            raise RuntimeError(msg)
        if self._record is not None:
            msg = f"Paste '{self._record.paste_id}' is already loaded"
            raise RuntimeError(msg)

        response: GetPasteResponse = await self.store.get(paste_id)
        if self._closed:
            msg = f"Load of paste '{paste_id}' abandoned, cache closed"
            raise TranslationCancelledError(msg)
        self._record = PasteRecord.from_response(response)
        logger.info(
            "Paste '%s' loaded: original '%s', cached %s",
            self._record.paste_id,
            self._record.original_language,
            sorted(self._record.translations),
        )
        return self._record

    async def ensure_translation(self, record: PasteRecord, lang: str) -> str:
        """Return the text of ``record`` in ``lang``, fetching and caching it on a miss.

        Args:
            record (PasteRecord): The record owned by this cache.
            lang (str): Target language code (normalized before use).

        Returns:
            str: The original text for the original language, otherwise the translation.

        Raises:
            ValueError: If ``lang`` is empty.
            RuntimeError: If ``record`` is not the record loaded by this cache.
            TransportError: If the translator could not be reached or timed out.
            UpstreamError: If the translator could not translate.
            TranslationCancelledError: If the cache was closed while the request was pending.
        """
        lang = StringUtils.normalize_language_code(lang)
        if not lang:
            msg = "Language code must not be empty"
            raise ValueError(msg)
        if record is not self._record:
            msg = f"Paste '{record.paste_id}' is not owned by this cache"
            raise RuntimeError(msg)

        cached: str | None = record.text_for(lang)
        if cached is not None:
            self.statistics.hits += 1
            logger.debug("Cache hit for '%s' (%s)", record.paste_id, lang)
            return cached

        if self._closed:
            msg = f"Translation cache for '{record.paste_id}' is closed"
            raise TranslationCancelledError(msg)

        key: str = f"{record.paste_id}:{lang}"
        inflight_result: str | None = await self.inflight_manager.mark_inflight_start(key)
        if inflight_result is not None:
            self.statistics.coalesced += 1
            logger.debug("Joined in-flight translation for '%s' (%s)", record.paste_id, lang)
            return inflight_result

        # A request that finished between the lookup above and our registration already merged its text.
        cached = record.text_for(lang)
        if cached is not None:
            await self.inflight_manager.store_inflight_result(key, cached)
            self.statistics.hits += 1
            return cached

        return await self._fetch(record, lang, key)

    async def _fetch(self, record: PasteRecord, lang: str, key: str) -> str:
        self.statistics.misses += 1
        self._pending.add(lang)
        logger.debug("Cache miss for '%s' (%s), pending %s", record.paste_id, lang, sorted(self._pending))
        try:
            response: TranslateResponse = await self.translator.translate(record.paste_id, lang)
            if self._closed:
                msg = f"Translation of '{record.paste_id}' into '{lang}' discarded, cache closed"
                raise TranslationCancelledError(msg)
        except BaseException as err:
            self._pending.discard(lang)
            if not isinstance(err, TranslationCancelledError):
                self.statistics.failures += 1
            logger.info("Translation of '%s' into '%s' failed: %s", record.paste_id, lang, err)
            await self.inflight_manager.store_inflight_exception(key, err)
            raise

        record.merge_translation(lang, response.translation)
        self._pending.discard(lang)
        await self.inflight_manager.store_inflight_result(key, response.translation)
        logger.info("Translation cached for '%s' (%s)", record.paste_id, lang)
        return response.translation

    async def close(self) -> None:
        """Stop serving the record.

        Waiters of pending requests are released with ``TranslationCancelledError``, and results that
        arrive afterwards are discarded without touching the record.
        """
        if self._closed:
            return
        self._closed = True
        await self.inflight_manager.close()
        logger.debug("TranslationCache closed: %s", self.statistics)
