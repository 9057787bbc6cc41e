from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar
from urllib.parse import quote

from dataclasses_json import DataClassJsonMixin

from core.clients.interface import NotFoundError, PasteStoreInterface, PasteValidationError, TransportError
from handlers.async_comm import AsyncCommError
from models.paste_models import CreatePasteRequest, CreatePasteResponse, GetPasteResponse, Tone
from models.re_models import PASTE_ID_PATTERN
from utils.logger_utils import LoggerUtils
from utils.string_utils import StringUtils

if TYPE_CHECKING:
    import logging

    from handlers.async_comm import AsyncHttp
    from models.config_models import Config

__all__: list[str] = ["PasteStoreClient"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

HTTP_NOT_FOUND: int = 404
REQUIRED_KEYS: tuple[str, ...] = ("paste_id", "original_language")

T = TypeVar("T", bound=DataClassJsonMixin)


class PasteStoreClient(PasteStoreInterface):
    """HTTP client for ``/pastes``.

    Holds no state besides the shared transport; every call is a single request.
    """

    def __init__(self, config: Config, http: AsyncHttp) -> None:
        self.config: Config = config
        self.http: AsyncHttp = http

    @property
    def base_url(self) -> str:
        return self.config.API.BASE_URL.rstrip("/")

    def validate(self, content: str, tone: Tone | str | None) -> Tone:
        """Check a paste before it is sent.

        Args:
            content (str): Text to store.
            tone (Tone | str | None): Requested tone. None falls back to ``PASTE.DEFAULT_TONE``.

        Returns:
            Tone: The resolved tone.

        Raises:
            PasteValidationError: If the content is blank or too long, or the tone is unknown.
        """
        if StringUtils.is_blank(content):
            msg = "Content is required"
            raise PasteValidationError(msg)

        max_length: int = self.config.PASTE.MAX_LENGTH
        if max_length > 0 and len(content) > max_length:
            msg = f"Content exceeds maximum length of {max_length} characters"
            raise PasteValidationError(msg)

        tone_value: str = StringUtils.ensure_str(tone or self.config.PASTE.DEFAULT_TONE).strip().lower()
        try:
            return Tone(tone_value)
        except ValueError:
            valid: str = ", ".join(t.value for t in Tone)
            msg = f"Invalid tone '{tone_value}'. Must be one of: {valid}"
            raise PasteValidationError(msg) from None

    async def create(self, content: str, tone: Tone | str | None = None) -> CreatePasteResponse:
        content = StringUtils.normalize_text(content)
        resolved_tone: Tone = self.validate(content, tone)
        request = CreatePasteRequest(content=content, tone=resolved_tone.value)
        logger.info("Creating paste (%d characters, tone '%s')", len(content), resolved_tone.value)

        try:
            payload: Any = await self.http.post(
                url=f"{self.base_url}/pastes",
                data=request.to_dict(),
                total_timeout=self.config.API.TIMEOUT,
            )
        except AsyncCommError as err:
            logger.error("Failed to create paste: %s", err)
            msg: str = err.detail or "Failed to create paste"
            raise TransportError(msg) from err

        response: CreatePasteResponse = self._decode(CreatePasteResponse, payload)
        logger.info("Paste '%s' created (language '%s')", response.paste_id, response.original_language)
        return response

    async def get(self, paste_id: str) -> GetPasteResponse:
        if not PASTE_ID_PATTERN.match(StringUtils.ensure_str(paste_id)):
            # the server could never know such an id
            msg = f"Paste '{paste_id}' not found"
            raise NotFoundError(msg)

        logger.debug("Fetching paste '%s'", paste_id)
        try:
            payload: Any = await self.http.get(
                url=f"{self.base_url}/pastes/{quote(paste_id, safe='')}",
                total_timeout=self.config.API.TIMEOUT,
            )
        except AsyncCommError as err:
            if err.status == HTTP_NOT_FOUND:
                logger.info("Paste '%s' not found", paste_id)
                msg = f"Paste '{paste_id}' not found"
                raise NotFoundError(msg) from err
            logger.error("Failed to load paste '%s': %s", paste_id, err)
            msg = err.detail or "Failed to get paste"
            raise TransportError(msg) from err

        response: GetPasteResponse = self._decode(GetPasteResponse, payload)
        logger.debug(
            "Paste '%s' loaded (language '%s', translations %s)",
            response.paste_id,
            response.original_language,
            sorted(response.translations),
        )
        return response

    @staticmethod
    def _decode(model: type[T], payload: Any) -> T:
        msg: str
        if not isinstance(payload, dict):
            msg = f"Unexpected response payload for {model.__name__}: {type(payload).__name__}"
            raise TransportError(msg)
        missing: list[str] = [key for key in REQUIRED_KEYS if not payload.get(key)]
        if missing:
            msg = f"{model.__name__} payload is missing {missing}"
            raise TransportError(msg)
        try:
            return model.from_dict(payload, infer_missing=True)
        except (KeyError, TypeError, ValueError) as err:
            msg = f"Malformed {model.__name__} payload: {err}"
            raise TransportError(msg) from err
