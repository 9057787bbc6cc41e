"""Paste data models.

Wire models for the paste service JSON payloads (dataclasses_json) and the in-memory ``PasteRecord``
that the translation cache owns while a paste is being viewed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Final

from dataclasses_json import DataClassJsonMixin, dataclass_json

from utils.logger_utils import LoggerUtils

__all__: list[str] = [
    "LANGUAGE_NAMES",
    "CreatePasteRequest",
    "CreatePasteResponse",
    "GetPasteResponse",
    "PasteRecord",
    "Tone",
    "TranslateResponse",
]

logger = LoggerUtils.get_logger(__name__)

LANGUAGE_NAMES: Final[dict[str, str]] = {
    "en": "English",
    "es": "Español",
    "fr": "Français",
    "de": "Deutsch",
    "ja": "日本語",
    "zh": "中文",
    "pt": "Português",
    "ru": "Русский",
    "ko": "한국어",
    "it": "Italiano",
    "ar": "العربية",
    "hi": "हिन्दी",
    "nl": "Nederlands",
    "pl": "Polski",
    "tr": "Türkçe",
    "vi": "Tiếng Việt",
    "th": "ไทย",
    "sv": "Svenska",
    "da": "Dansk",
    "fi": "Suomi",
    "no": "Norsk",
}


class Tone(StrEnum):
    """Translation style hint fixed when the paste is created."""

    DEFAULT = "default"
    PROFESSIONAL = "professional"
    FRIENDLY = "friendly"
    BRUSQUE = "brusque"


@dataclass_json
@dataclass
class CreatePasteRequest(DataClassJsonMixin):
    content: str
    tone: str = Tone.DEFAULT.value


@dataclass_json
@dataclass
class CreatePasteResponse(DataClassJsonMixin):
    """Response of ``POST /pastes``.

    Attributes:
        paste_id (str): Identifier assigned by the server.
        original_language (str): Detected language of the submitted text.
        available_languages (list[str]): Languages with text right after creation (the original only).
    """

    paste_id: str
    original_language: str
    available_languages: list[str] = field(default_factory=list)


@dataclass_json
@dataclass
class GetPasteResponse(DataClassJsonMixin):
    """Response of ``GET /pastes/{id}``.

    ``translations`` contains the original text keyed by ``original_language`` in addition to the
    translations persisted so far.
    """

    paste_id: str
    original_language: str
    original: str
    tone: str = Tone.DEFAULT.value
    created_at: int = 0
    translations: dict[str, str] = field(default_factory=dict)
    available_translations: list[str] = field(default_factory=list)


@dataclass_json
@dataclass
class TranslateResponse(DataClassJsonMixin):
    """Response of ``GET /pastes/{id}/translate?lang=xx``."""

    language: str
    translation: str


@dataclass
class PasteRecord:
    """A loaded paste plus every translation known in this session.

    Everything but ``translations`` and ``available_languages`` is fixed once the record is built,
    and those two only ever grow through ``merge_translation``.

    Attributes:
        paste_id (str): Opaque paste identifier.
        original_language (str): Language of ``original_text``. Always available, never a key of ``translations``.
        tone (Tone): Translation style chosen at creation.
        created_at (datetime): Creation time (UTC).
        original_text (str): Submitted text.
        translations (dict[str, str]): Language code to translated text.
        available_languages (list[str]): Original language followed by the translated languages, no duplicates.
    """

    paste_id: str
    original_language: str
    tone: Tone
    created_at: datetime
    original_text: str
    translations: dict[str, str] = field(default_factory=dict)
    available_languages: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.translations.pop(self.original_language, None)
        # listed order first, then anything only present in translations
        listed: list[str] = [lang for lang in self.available_languages if lang in self.translations]
        languages: list[str] = [self.original_language, *listed, *self.translations]
        self.available_languages = list(dict.fromkeys(languages))

    @classmethod
    def from_response(cls, response: GetPasteResponse) -> PasteRecord:
        """Build a record from a ``GET /pastes/{id}`` payload.

        Languages the server lists as available but whose text it did not deliver are dropped so that
        ``available_languages`` matches ``translations``; they are fetched again on demand.

        Args:
            response (GetPasteResponse): Decoded server payload.

        Returns:
            PasteRecord: The new record.
        """
        listed: list[str] = list(response.available_translations or [])
        translations: dict[str, str] = {
            lang: text
            for lang, text in (response.translations or {}).items()
            if lang != response.original_language and text is not None
        }
        missing: list[str] = [
            lang
            for lang in listed
            if lang != response.original_language and lang not in translations
        ]
        if missing:
            logger.warning("Paste '%s' lists translations without text: %s", response.paste_id, missing)

        try:
            tone = Tone(response.tone or Tone.DEFAULT.value)
        except ValueError:
            logger.warning("Paste '%s' has unknown tone '%s', using default", response.paste_id, response.tone)
            tone = Tone.DEFAULT

        return cls(
            paste_id=response.paste_id,
            original_language=response.original_language,
            tone=tone,
            created_at=datetime.fromtimestamp(response.created_at or 0, tz=UTC),
            original_text=response.original or "",
            translations=translations,
            available_languages=listed,
        )

    def text_for(self, lang: str) -> str | None:
        """Return the text known for a language, the original included, or None."""
        if lang == self.original_language:
            return self.original_text
        return self.translations.get(lang)

    def merge_translation(self, lang: str, text: str) -> None:
        """Record a fetched translation.

        Writing a language that is already present replaces the text and leaves
        ``available_languages`` untouched.

        Args:
            lang (str): Target language code.
            text (str): Translated text.

        Raises:
            ValueError: If ``lang`` is the original language.
        """
        if lang == self.original_language:
            msg: str = f"Cannot store a translation for the original language '{lang}'"
            raise ValueError(msg)
        self.translations[lang] = text
        if lang not in self.available_languages:
            self.available_languages.append(lang)
