from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

from core.clients.interface import TranslationTimeoutError, TranslatorInterface, TransportError, UpstreamError
from handlers.async_comm import AsyncCommError, AsyncCommInvalidContentTypeError, AsyncCommTimeoutError
from models.paste_models import TranslateResponse
from utils.logger_utils import LoggerUtils
from utils.string_utils import StringUtils

if TYPE_CHECKING:
    import logging

    from handlers.async_comm import AsyncHttp
    from models.config_models import Config

__all__: list[str] = ["TranslatorClient"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)


class TranslatorClient(TranslatorInterface):
    """HTTP client for ``/pastes/{id}/translate``.

    Stateless: one call is one request for one language. Every call is bounded by
    ``TRANSLATION.TIMEOUT``; running out of time is reported like any other transport failure.
    """

    def __init__(self, config: Config, http: AsyncHttp) -> None:
        self.config: Config = config
        self.http: AsyncHttp = http

    @property
    def timeout(self) -> float:
        return self.config.TRANSLATION.TIMEOUT

    async def translate(self, paste_id: str, lang: str) -> TranslateResponse:
        url: str = f"{self.config.API.BASE_URL.rstrip('/')}/pastes/{quote(paste_id, safe='')}/translate"
        logger.info("'%s': 'start translation' (%s > %s)", self.__class__.__name__, paste_id, lang)

        try:
            # the transport timeout covers the HTTP exchange only, this one also covers decoding
            async with asyncio.timeout(self.timeout if self.timeout > 0 else None):
                payload: Any = await self.http.get(url=url, params={"lang": lang}, total_timeout=self.timeout)
        except (TimeoutError, AsyncCommTimeoutError) as err:
            logger.warning("Translation of '%s' into '%s' timed out after %.1f sec", paste_id, lang, self.timeout)
            msg: str = f"Translation into '{lang}' timed out"
            raise TranslationTimeoutError(msg) from err
        except AsyncCommInvalidContentTypeError as err:
            logger.error("Unreadable translation response for '%s' (%s): %s", paste_id, lang, err)
            msg = f"Translation into '{lang}' returned an unreadable response"
            raise UpstreamError(msg) from err
        except AsyncCommError as err:
            if err.status is None:
                logger.error("Translation request for '%s' (%s) failed: %s", paste_id, lang, err)
                msg = err.msg
                raise TransportError(msg) from err
            logger.error("Translation of '%s' into '%s' rejected: %s", paste_id, lang, err)
            msg = err.detail or f"Failed to translate into '{lang}'"
            raise UpstreamError(msg) from err

        response: TranslateResponse = self._decode(payload, lang)
        logger.info("translation completed (%s > %s)", paste_id, response.language)
        logger.debug("'translation': '%s'", StringUtils.preview(response.translation))
        return response

    @staticmethod
    def _decode(payload: Any, lang: str) -> TranslateResponse:
        msg: str
        if not isinstance(payload, dict) or not isinstance(payload.get("translation"), str):
            msg = f"Translation into '{lang}' returned no text"
            raise UpstreamError(msg)
        try:
            response: TranslateResponse = TranslateResponse.from_dict({"language": lang, **payload}, infer_missing=True)
        except (KeyError, TypeError, ValueError) as err:
            msg = f"Malformed translation payload: {err}"
            raise UpstreamError(msg) from err

        returned_lang: str = StringUtils.normalize_language_code(response.language)
        if returned_lang and returned_lang != lang:
            msg = f"Requested '{lang}' but received '{response.language}'"
            raise UpstreamError(msg)
        response.language = lang
        return response
