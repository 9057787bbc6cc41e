from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any, cast

import pytest

from core.clients.interface import TranslationTimeoutError, TransportError, UpstreamError
from core.clients.translator import TranslatorClient
from handlers.async_comm import AsyncCommError, AsyncCommInvalidContentTypeError, AsyncCommTimeoutError
from models.config_models import Config
from models.paste_models import TranslateResponse

if TYPE_CHECKING:
    from handlers.async_comm import AsyncHttp


class DummyHttp:
    def __init__(self, result: Any = None, error: Exception | None = None, delay: float = 0.0) -> None:
        self.result: Any = result
        self.error: Exception | None = error
        self.delay: float = delay
        self.calls: list[dict[str, Any]] = []

    async def get(self, **kwargs: Any) -> Any:
        self.calls.append(kwargs)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.result


def make_client(http: DummyHttp, timeout: float = 30.0) -> TranslatorClient:
    config = Config()
    config.API.BASE_URL = "http://paste.test/api"
    config.TRANSLATION.TIMEOUT = timeout
    return TranslatorClient(config, cast("AsyncHttp", http))


@pytest.mark.asyncio
async def test_translate_requests_one_language() -> None:
    http = DummyHttp({"language": "fr", "translation": "Bonjour"})

    response: TranslateResponse = await make_client(http).translate("aB3dE6gH", "fr")

    assert response == TranslateResponse(language="fr", translation="Bonjour")
    assert http.calls == [
        {"url": "http://paste.test/api/pastes/aB3dE6gH/translate", "params": {"lang": "fr"}, "total_timeout": 30.0}
    ]


@pytest.mark.asyncio
async def test_translate_accepts_regional_language_echo() -> None:
    http = DummyHttp({"language": "pt-BR", "translation": "Olá"})

    response: TranslateResponse = await make_client(http).translate("p1", "pt")

    assert response.language == "pt"


@pytest.mark.asyncio
async def test_translate_fills_missing_language() -> None:
    http = DummyHttp({"translation": "Hallo"})

    response: TranslateResponse = await make_client(http).translate("p1", "de")

    assert response.language == "de"


@pytest.mark.asyncio
async def test_translate_rejects_other_language() -> None:
    http = DummyHttp({"language": "es", "translation": "Hola"})

    with pytest.raises(UpstreamError, match="received 'es'"):
        await make_client(http).translate("p1", "fr")


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [None, {"language": "fr"}, {"language": "fr", "translation": 42}, "Bonjour"])
async def test_translate_rejects_payload_without_text(payload: Any) -> None:
    with pytest.raises(UpstreamError, match="no text"):
        await make_client(DummyHttp(payload)).translate("p1", "fr")


@pytest.mark.asyncio
async def test_translate_maps_error_status_to_upstream_error() -> None:
    http = DummyHttp(error=AsyncCommError("Error response from the server.", status=500, detail="Translation failed"))

    with pytest.raises(UpstreamError, match="Translation failed"):
        await make_client(http).translate("p1", "de")


@pytest.mark.asyncio
async def test_translate_maps_unreadable_body_to_upstream_error() -> None:
    http = DummyHttp(error=AsyncCommInvalidContentTypeError("Unknown Content-Type 'image/png'", status=200))

    with pytest.raises(UpstreamError, match="unreadable"):
        await make_client(http).translate("p1", "de")


@pytest.mark.asyncio
async def test_translate_maps_connection_failure_to_transport_error() -> None:
    http = DummyHttp(error=AsyncCommError("The server is not running, or the port is closed."))

    with pytest.raises(TransportError, match="not running"):
        await make_client(http).translate("p1", "de")


@pytest.mark.asyncio
async def test_translate_maps_transport_timeout() -> None:
    http = DummyHttp(error=AsyncCommTimeoutError("Timeout due to a lack of response from the server."))

    with pytest.raises(TranslationTimeoutError, match="timed out"):
        await make_client(http).translate("p1", "ja")


@pytest.mark.asyncio
async def test_translate_enforces_its_own_timeout() -> None:
    http = DummyHttp({"language": "ja", "translation": "こんにちは"}, delay=1.0)

    with pytest.raises(TranslationTimeoutError):
        await make_client(http, timeout=0.05).translate("p1", "ja")


@pytest.mark.asyncio
async def test_translation_timeout_is_a_transport_error() -> None:
    http = DummyHttp(error=AsyncCommTimeoutError("Timeout"))

    with pytest.raises(TransportError):
        await make_client(http).translate("p1", "ja")
