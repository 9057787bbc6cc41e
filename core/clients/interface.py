"""Interfaces and error taxonomy for the remote paste service collaborators.

The view core talks to two collaborators: the paste store (create and fetch a paste) and the
translator (one language per request). Both report failures with the exceptions defined here,
never with transport-level errors.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from models.paste_models import CreatePasteResponse, GetPasteResponse, Tone, TranslateResponse

__all__: list[str] = [
    "NotFoundError",
    "PasteClientError",
    "PasteStoreInterface",
    "PasteValidationError",
    "TranslationCancelledError",
    "TranslationTimeoutError",
    "TranslatorInterface",
    "TransportError",
    "UpstreamError",
]


class PasteClientError(Exception):
    """An error occurred while talking to the paste service."""


class NotFoundError(PasteClientError):
    """The requested paste does not exist."""


class TransportError(PasteClientError):
    """The paste service could not be reached or did not answer usefully. Retrying may help."""


class TranslationTimeoutError(TransportError):
    """A translation request exceeded its time limit."""


class UpstreamError(PasteClientError):
    """The translation provider rejected or could not translate the paste into a language."""


class PasteValidationError(PasteClientError, ValueError):
    """The paste content or tone was rejected before sending."""


class TranslationCancelledError(PasteClientError):
    """A translation was abandoned because its view was closed."""


class PasteStoreInterface(ABC):
    """Create and fetch paste records."""

    @abstractmethod
    async def create(self, content: str, tone: Tone | str | None = None) -> CreatePasteResponse:
        """Store a new paste.

        Args:
            content (str): Text to store.
            tone (Tone | str | None): Translation style. None uses the configured default.

        Returns:
            CreatePasteResponse: Identifier and detected language of the new paste.

        Raises:
            PasteValidationError: If the content or tone is invalid.
            TransportError: If the request failed.
        """
        raise NotImplementedError

    @abstractmethod
    async def get(self, paste_id: str) -> GetPasteResponse:
        """Fetch a paste with the original text and every persisted translation.

        Args:
            paste_id (str): Paste identifier.

        Returns:
            GetPasteResponse: The paste payload.

        Raises:
            NotFoundError: If the paste does not exist.
            TransportError: If the request failed.
        """
        raise NotImplementedError


class TranslatorInterface(ABC):
    """Translate a stored paste into one language per call."""

    @abstractmethod
    async def translate(self, paste_id: str, lang: str) -> TranslateResponse:
        """Translate a paste.

        Args:
            paste_id (str): Paste identifier.
            lang (str): Target language code.

        Returns:
            TranslateResponse: The target language and translated text.

        Raises:
            TransportError: If the request failed or timed out.
            UpstreamError: If the provider could not translate.
        """
        raise NotImplementedError
