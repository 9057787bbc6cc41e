"""Configuration data models for the LingoPaste client.

Each dataclass mirrors one section of ``lingopaste.ini``. Field names are the INI keys; the default
value of a field also fixes the type the loader coerces the INI string into.
"""

from __future__ import annotations

from dataclasses import dataclass, field

__all__: list[str] = ["Config"]

DEFAULT_SUPPORTED_LANGUAGES: tuple[str, ...] = (
    "en",
    "es",
    "fr",
    "de",
    "ja",
    "zh",
    "pt",
    "ru",
    "ko",
    "it",
    "ar",
    "hi",
    "nl",
    "pl",
    "tr",
    "vi",
    "th",
    "sv",
    "da",
    "fi",
    "no",
)


@dataclass
class General:
    DEBUG: bool = False
    LOG_FILE: str = ""
    SCRIPT_NAME: str = ""


@dataclass
class Api:
    BASE_URL: str = "http://localhost:8080/api"
    TIMEOUT: float = 10.0


@dataclass
class Translation:
    TIMEOUT: float = 30.0
    SUPPORTED_LANGUAGES: list[str] = field(default_factory=lambda: list(DEFAULT_SUPPORTED_LANGUAGES))


@dataclass
class Paste:
    MAX_LENGTH: int = 20000
    DEFAULT_TONE: str = "default"


@dataclass
class View:
    # Empty means "derive from the environment locale".
    PREFERRED_LANGUAGE: str = ""


@dataclass
class Config:
    GENERAL: General = field(default_factory=General)
    API: Api = field(default_factory=Api)
    TRANSLATION: Translation = field(default_factory=Translation)
    PASTE: Paste = field(default_factory=Paste)
    VIEW: View = field(default_factory=View)
