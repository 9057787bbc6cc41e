"""Shared resources for the paste clients and views.

``SharedData`` owns the single HTTP transport and the two remote clients built on it, and creates a
fresh translation cache and view controller for every paste that is opened.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from core.cache.inflight_manager import InFlightManager
from core.cache.translation_cache import TranslationCache
from core.clients.paste_store import PasteStoreClient
from core.clients.translator import TranslatorClient
from core.view.controller import ViewController
from handlers.async_comm import AsyncHttp

if TYPE_CHECKING:
    from models.config_models import Config


__all__: list[str] = ["SharedData"]

USER_AGENT: str = "lingopaste-client"


@dataclass
class SharedData:
    _config: Config = field()
    _http: AsyncHttp = field(init=False)
    _paste_store: PasteStoreClient = field(init=False)
    _translator: TranslatorClient = field(init=False)

    async def async_init(self) -> None:
        self._http = AsyncHttp(headers={"User-Agent": USER_AGENT, "Accept": "application/json"})
        self._paste_store = PasteStoreClient(self.config, self._http)
        self._translator = TranslatorClient(self.config, self._http)

    @property
    def config(self) -> Config:
        return self._config

    @property
    def http(self) -> AsyncHttp:
        return self._http

    @property
    def paste_store(self) -> PasteStoreClient:
        return self._paste_store

    @property
    def translator(self) -> TranslatorClient:
        return self._translator

    def create_view(self, paste_id: str, *, preferred_language: str | None = None) -> ViewController:
        """Build a view controller with its own translation cache.

        Args:
            paste_id (str): Paste to show.
            preferred_language (str | None): Overrides ``VIEW.PREFERRED_LANGUAGE``. When both are empty
                the environment locale is used.

        Returns:
            ViewController: A controller in the loading state; call ``enter()`` next.
        """
        preferred: str | None = preferred_language or self.config.VIEW.PREFERRED_LANGUAGE or None
        cache = TranslationCache(self._paste_store, self._translator, InFlightManager())
        return ViewController(
            paste_id,
            cache,
            supported_languages=self.config.TRANSLATION.SUPPORTED_LANGUAGES,
            preferred_language=preferred,
        )

    async def close(self) -> None:
        await self._http.close()
