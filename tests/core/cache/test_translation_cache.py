"""Tests for TranslationCache."""

from __future__ import annotations

import asyncio

import pytest

from core.cache.inflight_manager import InFlightManager
from core.cache.translation_cache import TranslationCache
from core.clients.interface import (
    NotFoundError,
    PasteStoreInterface,
    TranslationCancelledError,
    TranslatorInterface,
    TransportError,
    UpstreamError,
)
from models.paste_models import CreatePasteResponse, GetPasteResponse, PasteRecord, Tone, TranslateResponse


class DummyStore(PasteStoreInterface):
    """Paste store serving a single in-memory paste."""

    def __init__(self, response: GetPasteResponse | None = None, error: Exception | None = None) -> None:
        self.response: GetPasteResponse | None = response
        self.error: Exception | None = error
        self.calls: list[str] = []

    async def create(self, content: str, tone: Tone | str | None = None) -> CreatePasteResponse:
        raise NotImplementedError

    async def get(self, paste_id: str) -> GetPasteResponse:
        self.calls.append(paste_id)
        if self.error is not None:
            raise self.error
        if self.response is None or self.response.paste_id != paste_id:
            msg = f"Paste '{paste_id}' not found"
            raise NotFoundError(msg)
        return self.response


class DummyTranslator(TranslatorInterface):
    """Translator answering from a table, optionally held back until released."""

    def __init__(self, texts: dict[str, str] | None = None) -> None:
        self.texts: dict[str, str] = dict(texts or {})
        self.errors: dict[str, Exception] = {}
        self.calls: list[tuple[str, str]] = []
        self.gate: asyncio.Event | None = None

    async def translate(self, paste_id: str, lang: str) -> TranslateResponse:
        self.calls.append((paste_id, lang))
        if self.gate is not None:
            await self.gate.wait()
        err: Exception | None = self.errors.get(lang)
        if err is not None:
            raise err
        return TranslateResponse(language=lang, translation=self.texts.get(lang, f"[{lang}] Hello"))


def make_response(**overrides) -> GetPasteResponse:
    values: dict = {
        "paste_id": "p1",
        "original_language": "en",
        "original": "Hello",
        "tone": "default",
        "created_at": 1700000000,
        "translations": {"en": "Hello"},
        "available_translations": ["en"],
    }
    values.update(overrides)
    return GetPasteResponse(**values)


@pytest.fixture
def translator() -> DummyTranslator:
    return DummyTranslator({"fr": "Bonjour", "de": "Hallo", "ja": "こんにちは"})


@pytest.fixture
def cache(translator: DummyTranslator) -> TranslationCache:
    return TranslationCache(DummyStore(make_response()), translator, InFlightManager())


@pytest.fixture
async def record(cache: TranslationCache) -> PasteRecord:
    return await cache.load("p1")


@pytest.mark.asyncio
async def test_load_takes_ownership_of_record(cache: TranslationCache) -> None:
    record: PasteRecord = await cache.load("p1")

    assert cache.record is record
    assert record.original_language == "en"
    assert record.translations == {}
    assert record.available_languages == ["en"]


@pytest.mark.asyncio
async def test_load_keeps_persisted_translations() -> None:
    store = DummyStore(
        make_response(translations={"en": "Hello", "fr": "Bonjour"}, available_translations=["en", "fr"])
    )
    translator = DummyTranslator()
    cache = TranslationCache(store, translator)

    record: PasteRecord = await cache.load("p1")
    text: str = await cache.ensure_translation(record, "fr")

    assert text == "Bonjour"
    assert translator.calls == []


@pytest.mark.asyncio
async def test_load_twice_is_rejected(cache: TranslationCache) -> None:
    await cache.load("p1")

    with pytest.raises(RuntimeError, match="already loaded"):
        await cache.load("p1")


@pytest.mark.asyncio
async def test_load_propagates_not_found() -> None:
    cache = TranslationCache(DummyStore(make_response()), DummyTranslator())

    with pytest.raises(NotFoundError):
        await cache.load("missing")
    assert cache.is_loaded is False


@pytest.mark.asyncio
async def test_record_access_before_load_fails(cache: TranslationCache) -> None:
    with pytest.raises(RuntimeError, match="No paste"):
        _ = cache.record


@pytest.mark.asyncio
async def test_cache_miss_fetches_and_merges(
    cache: TranslationCache, record: PasteRecord, translator: DummyTranslator
) -> None:
    text: str = await cache.ensure_translation(record, "fr")

    assert text == "Bonjour"
    assert translator.calls == [("p1", "fr")]
    assert record.translations == {"fr": "Bonjour"}
    assert record.available_languages == ["en", "fr"]
    assert cache.pending == frozenset()


@pytest.mark.asyncio
async def test_original_language_never_calls_translator(
    cache: TranslationCache, record: PasteRecord, translator: DummyTranslator
) -> None:
    text: str = await cache.ensure_translation(record, "en")

    assert text == "Hello"
    assert translator.calls == []
    assert record.translations == {}


@pytest.mark.asyncio
async def test_second_call_is_served_from_cache(
    cache: TranslationCache, record: PasteRecord, translator: DummyTranslator
) -> None:
    first: str = await cache.ensure_translation(record, "fr")
    second: str = await cache.ensure_translation(record, "fr")

    assert first == second == "Bonjour"
    assert len(translator.calls) == 1
    assert cache.statistics.hits == 1
    assert cache.statistics.misses == 1


@pytest.mark.asyncio
async def test_language_code_is_normalized(
    cache: TranslationCache, record: PasteRecord, translator: DummyTranslator
) -> None:
    await cache.ensure_translation(record, "FR-ca")

    assert translator.calls == [("p1", "fr")]
    assert "fr" in record.translations


@pytest.mark.asyncio
async def test_empty_language_is_rejected(cache: TranslationCache, record: PasteRecord) -> None:
    with pytest.raises(ValueError, match="must not be empty"):
        await cache.ensure_translation(record, "  ")


@pytest.mark.asyncio
async def test_foreign_record_is_rejected(cache: TranslationCache, record: PasteRecord) -> None:
    other = PasteRecord.from_response(make_response(paste_id="p2"))

    with pytest.raises(RuntimeError, match="not owned"):
        await cache.ensure_translation(other, "fr")


@pytest.mark.asyncio
async def test_concurrent_requests_are_coalesced(
    cache: TranslationCache, record: PasteRecord, translator: DummyTranslator
) -> None:
    translator.gate = asyncio.Event()

    first = asyncio.create_task(cache.ensure_translation(record, "fr"))
    second = asyncio.create_task(cache.ensure_translation(record, "fr"))
    await asyncio.sleep(0.01)

    assert cache.pending == frozenset({"fr"})
    translator.gate.set()
    results: list[str] = await asyncio.gather(first, second)

    assert results == ["Bonjour", "Bonjour"]
    assert translator.calls == [("p1", "fr")]
    assert cache.statistics.coalesced == 1
    assert cache.pending == frozenset()


@pytest.mark.asyncio
async def test_distinct_languages_are_fetched_concurrently(
    cache: TranslationCache, record: PasteRecord, translator: DummyTranslator
) -> None:
    translator.gate = asyncio.Event()

    tasks = [asyncio.create_task(cache.ensure_translation(record, lang)) for lang in ("fr", "de")]
    await asyncio.sleep(0.01)

    assert cache.pending == frozenset({"fr", "de"})
    assert sorted(translator.calls) == [("p1", "de"), ("p1", "fr")]
    translator.gate.set()
    await asyncio.gather(*tasks)

    assert record.translations == {"fr": "Bonjour", "de": "Hallo"}


@pytest.mark.asyncio
async def test_failure_is_not_cached_and_retry_calls_again(
    cache: TranslationCache, record: PasteRecord, translator: DummyTranslator
) -> None:
    translator.errors["de"] = UpstreamError("provider refused")

    with pytest.raises(UpstreamError, match="provider refused"):
        await cache.ensure_translation(record, "de")

    assert "de" not in record.translations
    assert "de" not in record.available_languages
    assert cache.pending == frozenset()
    assert cache.statistics.failures == 1

    del translator.errors["de"]
    text: str = await cache.ensure_translation(record, "de")

    assert text == "Hallo"
    assert translator.calls == [("p1", "de"), ("p1", "de")]


@pytest.mark.asyncio
async def test_failure_is_shared_with_waiters(
    cache: TranslationCache, record: PasteRecord, translator: DummyTranslator
) -> None:
    translator.gate = asyncio.Event()
    translator.errors["de"] = TransportError("connection reset")

    first = asyncio.create_task(cache.ensure_translation(record, "de"))
    second = asyncio.create_task(cache.ensure_translation(record, "de"))
    await asyncio.sleep(0.01)
    translator.gate.set()
    results = await asyncio.gather(first, second, return_exceptions=True)

    assert all(isinstance(result, TransportError) for result in results)
    assert len(translator.calls) == 1
    assert record.translations == {}


@pytest.mark.asyncio
async def test_failure_does_not_touch_other_languages(
    cache: TranslationCache, record: PasteRecord, translator: DummyTranslator
) -> None:
    await cache.ensure_translation(record, "fr")
    translator.errors["de"] = UpstreamError("nope")

    with pytest.raises(UpstreamError):
        await cache.ensure_translation(record, "de")

    assert record.translations == {"fr": "Bonjour"}
    assert record.available_languages == ["en", "fr"]


@pytest.mark.asyncio
async def test_additive_merge_over_many_languages(
    cache: TranslationCache, record: PasteRecord, translator: DummyTranslator
) -> None:
    for lang in ("ja", "fr", "de", "fr"):
        await cache.ensure_translation(record, lang)

    assert record.translations == {"ja": "こんにちは", "fr": "Bonjour", "de": "Hallo"}
    assert record.available_languages == ["en", "ja", "fr", "de"]


@pytest.mark.asyncio
async def test_close_discards_late_results(
    cache: TranslationCache, record: PasteRecord, translator: DummyTranslator
) -> None:
    translator.gate = asyncio.Event()
    task = asyncio.create_task(cache.ensure_translation(record, "fr"))
    await asyncio.sleep(0.01)

    await cache.close()
    translator.gate.set()

    with pytest.raises(TranslationCancelledError):
        await task
    assert record.translations == {}
    assert cache.pending == frozenset()


@pytest.mark.asyncio
async def test_closed_cache_still_serves_known_text(cache: TranslationCache, record: PasteRecord) -> None:
    await cache.ensure_translation(record, "fr")
    await cache.close()

    assert await cache.ensure_translation(record, "fr") == "Bonjour"
    with pytest.raises(TranslationCancelledError):
        await cache.ensure_translation(record, "de")
