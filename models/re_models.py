"""Regular expressions for language codes and paste identifiers."""

from __future__ import annotations

import re
from re import Pattern
from typing import Final

__all__: list[str] = ["LANGUAGE_CODE_PATTERN", "LOCALE_PATTERN", "PASTE_ID_PATTERN"]

# Bare ISO 639-1 style code as used on the wire.
# Example: "fr"
LANGUAGE_CODE_PATTERN: Final[Pattern[str]] = re.compile(r"^[a-z]{2,3}$")

# Locale or browser language tag; only the leading language subtag is kept.
# Example: "en-US", "pt_BR.UTF-8", "ja"
LOCALE_PATTERN: Final[Pattern[str]] = re.compile(r"^\s*(?P<lang>[A-Za-z]{2,3})(?:[-_.@].*)?\s*$")

# Server generated paste identifiers are short URL-safe strings.
# Example: "aB3dE6gH"
PASTE_ID_PATTERN: Final[Pattern[str]] = re.compile(r"^[A-Za-z0-9_-]{1,64}$")
