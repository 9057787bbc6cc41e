"""Clients for the remote paste service.

The paste store creates and fetches pastes; the translator translates a stored paste into one
language per request. Both raise the exceptions defined in ``core.clients.interface``.
"""

from core.clients.interface import (
    NotFoundError,
    PasteClientError,
    PasteStoreInterface,
    PasteValidationError,
    TranslationCancelledError,
    TranslationTimeoutError,
    TranslatorInterface,
    TransportError,
    UpstreamError,
)
from core.clients.paste_store import PasteStoreClient
from core.clients.translator import TranslatorClient

__all__: list[str] = [
    "NotFoundError",
    "PasteClientError",
    "PasteStoreClient",
    "PasteStoreInterface",
    "PasteValidationError",
    "TranslationCancelledError",
    "TranslationTimeoutError",
    "TranslatorClient",
    "TranslatorInterface",
    "TransportError",
    "UpstreamError",
]
