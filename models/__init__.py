"""Data models for LingoPaste.

This package contains dataclass definitions for configuration, paste payloads and records,
view state, and regular expression patterns used throughout the application.
"""

from __future__ import annotations

from models.config_models import Config
from models.paste_models import (
    LANGUAGE_NAMES,
    CreatePasteRequest,
    CreatePasteResponse,
    GetPasteResponse,
    PasteRecord,
    Tone,
    TranslateResponse,
)
from models.re_models import LANGUAGE_CODE_PATTERN, LOCALE_PATTERN, PASTE_ID_PATTERN
from models.view_models import Pane, TransientError, ViewMode, ViewSelection, ViewSnapshot, ViewStatus

__all__: list[str] = [
    "LANGUAGE_CODE_PATTERN",
    "LANGUAGE_NAMES",
    "LOCALE_PATTERN",
    "PASTE_ID_PATTERN",
    "Config",
    "CreatePasteRequest",
    "CreatePasteResponse",
    "GetPasteResponse",
    "Pane",
    "PasteRecord",
    "Tone",
    "TransientError",
    "TranslateResponse",
    "ViewMode",
    "ViewSelection",
    "ViewSnapshot",
    "ViewStatus",
]
