"""Configuration file loader and validator.

Handles reading, formatting, and validating settings from the INI configuration file.
Raises exceptions for any issues encountered during loading.
"""

from __future__ import annotations

import ast
import configparser
import os
from configparser import ConfigParser
from dataclasses import fields
from pathlib import Path
from typing import TYPE_CHECKING, Any, Final
from urllib.parse import urlparse

from models.config_models import Config
from models.paste_models import Tone
from utils.logger_utils import LoggerUtils
from utils.string_utils import StringUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Callable
    from dataclasses import Field as DataclassField
else:
    from dataclasses import Field as DataclassField

__all__: list[str] = [
    "Config",
    "ConfigFileNotFoundError",
    "ConfigFormatError",
    "ConfigLoader",
    "ConfigLoaderError",
    "ConfigTypeError",
    "ConfigValueError",
]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

API_URL_ENVIRONMENT_VARIABLE: Final[str] = "LINGOPASTE_API_URL"
ALLOWED_URL_SCHEMES: Final[tuple[str, ...]] = ("http", "https")


class ConfigLoaderError(Exception):
    """An error occurred while processing the configuration file."""


class ConfigFileNotFoundError(ConfigLoaderError):
    """The specified configuration file does not exist."""


class ConfigFormatError(ConfigLoaderError):
    """The configuration file is not formatted correctly."""


class ConfigValueError(ConfigFormatError):
    """The configuration file contains an invalid value."""


class ConfigTypeError(ConfigFormatError):
    """The configuration file contains an invalid type."""


class ConfigLoader:
    """Handles loading and validation of configuration settings.

    Values are read from the INI file, then overridden by the ``LINGOPASTE_API_URL`` environment
    variable and finally by command-line arguments (``api_url``, ``lang``, ``debug``).

    Args:
        config_filename (str): INI file name to load.
        script_name (str): Executing script name, used in error messaging.
        allow_missing (bool): Use built-in defaults when the file does not exist.
        **args: Command-line overrides.

    Raises:
        ConfigFileNotFoundError: If the configuration file does not exist and ``allow_missing`` is False.
        ConfigFormatError: If the file cannot be parsed or contains invalid values/types.
    """

    def __init__(
        self,
        *,
        config_filename: str,
        script_name: str,
        allow_missing: bool = False,
        **args: Any,
    ) -> None:
        config_path = Path(config_filename)
        msg: str
        parser: ConfigParser = ConfigParser()
        self.config = Config()
        self.config.GENERAL.SCRIPT_NAME = script_name

        if config_path.exists():
            try:
                parser.read(config_filename, encoding="utf-8")
            except configparser.Error as err:
                msg = f"Failed to parse configuration file '{config_filename}': {err}"
                raise ConfigFormatError(msg) from None
            self._convert_settings(parser)
        elif allow_missing:
            logger.info("Configuration file '%s' not found, using defaults", config_filename)
        else:
            msg = (
                f"Configuration file '{config_filename}' not found. "
                f"Please create '{config_filename}' in the same directory as '{script_name}'."
            )
            raise ConfigFileNotFoundError(msg)

        self._apply_overrides(args)
        self._validate_settings()

    def _convert_settings(self, parser: ConfigParser) -> None:
        """Copy every known INI key into the Config object, coerced to the field type.

        Args:
            parser (ConfigParser): Parsed INI data.

        Raises:
            ConfigFormatError: If a value cannot be parsed or coerced to the expected type.
        """
        formatter = _ConfigFormatter(self.config, parser)
        known_sections: set[str] = {section.name for section in fields(self.config)}
        for unknown in sorted(set(parser.sections()) - known_sections):
            logger.warning("Ignoring unknown configuration section: '%s'", unknown)

        for section in fields(self.config):
            if not parser.has_section(section.name):
                logger.debug("Skipping undefined section: '%s'", section.name)
                continue
            for key in fields(getattr(self.config, section.name)):
                # ConfigParser lower-cases option names; lookups are case-insensitive.
                if not parser.has_option(section.name, key.name):
                    logger.debug("Skipping undefined setting: '%s.%s'", section.name, key.name)
                    continue
                setattr(getattr(self.config, section.name), key.name, formatter.apply_format(section, key))

    def _apply_overrides(self, args: dict[str, Any]) -> None:
        env_url: str = os.getenv(API_URL_ENVIRONMENT_VARIABLE, "").strip()
        if env_url:
            self.config.API.BASE_URL = env_url
        if args.get("api_url"):
            self.config.API.BASE_URL = args["api_url"]
        if args.get("lang"):
            self.config.VIEW.PREFERRED_LANGUAGE = args["lang"]
        if args.get("debug", False):
            self.config.GENERAL.DEBUG = True

    def _validate_settings(self) -> None:
        """Validate and normalize the loaded settings.

        Raises:
            ConfigFormatError: If validation fails for any setting.
        """
        self._validate_base_url()
        self._validate_non_negative("API", "TIMEOUT")
        self._validate_non_negative("TRANSLATION", "TIMEOUT")
        self._validate_non_negative("PASTE", "MAX_LENGTH")
        self._validate_languages()
        self._validate_tone()

        preferred: str = self.config.VIEW.PREFERRED_LANGUAGE
        self.config.VIEW.PREFERRED_LANGUAGE = StringUtils.normalize_language_code(preferred)
        if preferred.strip() and not self.config.VIEW.PREFERRED_LANGUAGE:
            msg = f"Invalid value for 'VIEW.PREFERRED_LANGUAGE': {preferred}"
            raise ConfigValueError(msg)

    def _validate_base_url(self) -> None:
        value: str = self.config.API.BASE_URL.strip()
        parsed = urlparse(value)
        if parsed.scheme not in ALLOWED_URL_SCHEMES or not parsed.netloc:
            msg: str = f"'API.BASE_URL' must be an http(s) URL: '{value}'"
            raise ConfigValueError(msg)
        self.config.API.BASE_URL = value.rstrip("/")

    def _validate_non_negative(self, section_name: str, key_name: str) -> None:
        value: float = getattr(getattr(self.config, section_name), key_name)
        if value < 0:
            msg: str = f"'{section_name}.{key_name}' must not be negative: {value}"
            raise ConfigValueError(msg)

    def _validate_languages(self) -> None:
        value: Any = self.config.TRANSLATION.SUPPORTED_LANGUAGES
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, (list, tuple)):
            msg: str = f"Unsupported type used for 'TRANSLATION.SUPPORTED_LANGUAGES': {type(value)}"
            raise ConfigTypeError(msg)

        languages: list[str] = []
        for item in value:
            code: str = StringUtils.ensure_str(item).strip().lower()
            if not StringUtils.is_language_code(code):
                msg = f"Invalid language code in 'TRANSLATION.SUPPORTED_LANGUAGES': '{item}'"
                raise ConfigValueError(msg)
            if code in languages:
                logger.warning("Duplicate language '%s' in 'TRANSLATION.SUPPORTED_LANGUAGES'", code)
                continue
            languages.append(code)
        if not languages:
            msg = "'TRANSLATION.SUPPORTED_LANGUAGES' must not be empty"
            raise ConfigValueError(msg)
        self.config.TRANSLATION.SUPPORTED_LANGUAGES = languages

    def _validate_tone(self) -> None:
        value: str = self.config.PASTE.DEFAULT_TONE.strip().lower()
        try:
            self.config.PASTE.DEFAULT_TONE = Tone(value).value
        except ValueError:
            msg: str = f"Unsupported tone used for 'PASTE.DEFAULT_TONE': {value}"
            raise ConfigValueError(msg) from None


class _ConfigFormatter:
    """Converts INI string values to typed Python objects (bool, int, float, str, list, dict)."""

    def __init__(self, config: Config, parser: ConfigParser) -> None:
        self.config: Config = config
        self.parser: ConfigParser = parser

    def apply_format(self, section: DataclassField[Any], key: DataclassField[Any]) -> Any:
        """Convert INI value to the expected Python type based on the Config field type.

        Args:
            section (DataclassField[Any]): Configuration section field containing the key.
            key (DataclassField[Any]): Target field within the section.

        Returns:
            Any: Parsed value coerced to the type declared in the config dataclass.

        Raises:
            ConfigValueError: If a value cannot be coerced to the expected type.
            ConfigFormatError: If literal evaluation fails due to invalid syntax.
            ConfigTypeError: If an unexpected type is encountered during coercion.
        """
        formatters: dict[type, Callable[[DataclassField[Any], DataclassField[Any]], Any]] = {
            bool: self.parse_as_boolean,
            int: self.parse_as_integer,
            float: self.parse_as_float,
            str: self.parse_as_string,
        }

        current: Any = getattr(getattr(self.config, section.name), key.name)
        formatter: Callable[[DataclassField[Any], DataclassField[Any]], Any] | None = formatters.get(type(current))
        if formatter:
            try:
                return formatter(section, key)
            except ValueError as err:
                msg = f"Invalid value for {section.name}.{key.name}: {err}"
                raise ConfigValueError(msg) from err
            except TypeError as err:
                msg = f"Invalid value for {section.name}.{key.name}: {err}"
                raise ConfigTypeError(msg) from err

        value_str: str = self.parser.get(section.name, key.name)
        try:
            value: Any = ast.literal_eval(value_str)
        except ValueError as err:
            msg = f"Invalid literal for {section.name}.{key.name}: {value_str}"
            raise ConfigValueError(msg) from err
        except SyntaxError as err:
            msg = f"Invalid literal for {section.name}.{key.name}: {value_str}"
            raise ConfigFormatError(msg) from err

        if not isinstance(value, type(current)):
            msg = f"Expected {type(current).__name__} for {section.name}.{key.name}, got {type(value).__name__}"
            raise ConfigTypeError(msg)
        return value

    def parse_as_float(self, section: DataclassField[Any], key: DataclassField[Any]) -> float:
        """Convert INI string to float."""
        return float(self._unquote(self.parser.get(section.name, key.name)))

    def parse_as_integer(self, section: DataclassField[Any], key: DataclassField[Any]) -> int:
        """Convert INI string to integer."""
        return int(float(self._unquote(self.parser.get(section.name, key.name))))

    def parse_as_boolean(self, section: DataclassField[Any], key: DataclassField[Any]) -> bool:
        """Convert INI string to boolean."""
        return self.parser.getboolean(section.name, key.name)

    def parse_as_string(self, section: DataclassField[Any], key: DataclassField[Any]) -> str:
        """Return the INI string, without surrounding quotes if present."""
        return self._unquote(self.parser.get(section.name, key.name))

    @staticmethod
    def _unquote(value: str) -> str:
        value = value.strip()
        for char in ("'", '"'):
            if len(value) >= 2 and value.startswith(char) and value.endswith(char):  # noqa: PLR2004
                return value[1:-1]
        return value
