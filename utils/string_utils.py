from __future__ import annotations

import unicodedata
from typing import Final

from models.re_models import LANGUAGE_CODE_PATTERN, LOCALE_PATTERN

__all__: list[str] = ["StringUtils"]

LOG_PREVIEW_LENGTH: Final[int] = 32  # Number of characters shown when text is logged.


class StringUtils:
    """Utility class for string handling shared by the clients and the view layer."""

    @staticmethod
    def ensure_str(value: str | None) -> str:
        """Ensure that the value is a string, returning an empty string if None.

        Args:
            value (str | None): The value to ensure as a string.

        Returns:
            str: The value as a string, or empty string if None.
        """
        if not isinstance(value, str):
            value = str(value) if value is not None else ""
        return value

    @staticmethod
    def is_blank(value: str | None) -> bool:
        """Return True for None, empty, or whitespace-only strings."""
        return not StringUtils.ensure_str(value).strip()

    @staticmethod
    def normalize_text(text: str) -> str:
        """Normalize text using Unicode NFC normalization.

        Args:
            text (str): Text to normalize.

        Returns:
            str: Normalized text.
        """
        return unicodedata.normalize("NFC", text)

    @staticmethod
    def normalize_language_code(value: str | None) -> str:
        """Reduce a language tag or locale name to its bare lower-case language code.

        "en-US", "en_US.UTF-8" and " EN " all become "en". Values that do not start with a
        language subtag (e.g. "C", "POSIX", "") normalize to an empty string.

        Args:
            value (str | None): Language code, browser language tag or locale name.

        Returns:
            str: The bare language code, or an empty string if none can be extracted.
        """
        match = LOCALE_PATTERN.match(StringUtils.ensure_str(value))
        if match is None:
            return ""
        return match.group("lang").lower()

    @staticmethod
    def is_language_code(value: str) -> bool:
        """Check that the value is already a bare lower-case language code."""
        return LANGUAGE_CODE_PATTERN.match(value) is not None

    @staticmethod
    def preview(text: str | None, limit: int = LOG_PREVIEW_LENGTH) -> str:
        """Shorten text for log output.

        Args:
            text (str | None): Text to shorten.
            limit (int): Maximum number of characters kept. 0 or negative keeps everything.

        Returns:
            str: The text, truncated with an ellipsis when longer than the limit.
        """
        value: str = " ".join(StringUtils.ensure_str(text).split())
        if limit <= 0 or len(value) <= limit:
            return value
        return f"{value[:limit]}..."
