from __future__ import annotations

from textwrap import dedent
from typing import TYPE_CHECKING

import pytest

from config.loader import (
    ConfigFileNotFoundError,
    ConfigFormatError,
    ConfigLoader,
    ConfigTypeError,
    ConfigValueError,
)
from models.config_models import DEFAULT_SUPPORTED_LANGUAGES

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture(autouse=True)
def _clear_api_url(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("LINGOPASTE_API_URL", raising=False)


def _write_ini(tmp_path: Path, content: str) -> Path:
    ini_path: Path = tmp_path / "lingopaste.ini"
    ini_path.write_text(dedent(content), encoding="utf-8")
    return ini_path


def test_config_loader_raises_for_missing_file(tmp_path: Path) -> None:
    ini_path: Path = tmp_path / "missing.ini"
    with pytest.raises(ConfigFileNotFoundError):
        ConfigLoader(config_filename=str(ini_path), script_name="test")


def test_missing_file_allowed_uses_defaults(tmp_path: Path) -> None:
    loader = ConfigLoader(config_filename=str(tmp_path / "missing.ini"), script_name="test", allow_missing=True)

    assert loader.config.API.BASE_URL == "http://localhost:8080/api"
    assert loader.config.API.TIMEOUT == 10.0
    assert loader.config.TRANSLATION.TIMEOUT == 30.0
    assert loader.config.TRANSLATION.SUPPORTED_LANGUAGES == list(DEFAULT_SUPPORTED_LANGUAGES)
    assert loader.config.PASTE.MAX_LENGTH == 20000
    assert loader.config.PASTE.DEFAULT_TONE == "default"
    assert loader.config.GENERAL.SCRIPT_NAME == "test"


def test_config_loader_reads_all_sections(tmp_path: Path) -> None:
    ini_path: Path = _write_ini(
        tmp_path,
        """
        [GENERAL]
        DEBUG = True
        LOG_FILE = "lingopaste.log"

        [API]
        BASE_URL = "https://paste.example.com/api/"
        TIMEOUT = 5

        [TRANSLATION]
        TIMEOUT = 12.5
        SUPPORTED_LANGUAGES = ["en", "FR", "ja"]

        [PASTE]
        MAX_LENGTH = 500
        DEFAULT_TONE = Friendly

        [VIEW]
        PREFERRED_LANGUAGE = fr_FR.UTF-8
        """,
    )

    config = ConfigLoader(config_filename=str(ini_path), script_name="test").config

    assert config.GENERAL.DEBUG is True
    assert config.GENERAL.LOG_FILE == "lingopaste.log"
    assert config.API.BASE_URL == "https://paste.example.com/api"
    assert config.API.TIMEOUT == 5.0
    assert config.TRANSLATION.TIMEOUT == 12.5
    assert config.TRANSLATION.SUPPORTED_LANGUAGES == ["en", "fr", "ja"]
    assert config.PASTE.MAX_LENGTH == 500
    assert config.PASTE.DEFAULT_TONE == "friendly"
    assert config.VIEW.PREFERRED_LANGUAGE == "fr"


def test_config_loader_overrides(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    ini_path: Path = _write_ini(
        tmp_path,
        """
        [GENERAL]
        DEBUG = False

        [API]
        BASE_URL = "http://ini.test/api"
        """,
    )

    monkeypatch.setenv("LINGOPASTE_API_URL", "http://env.test/api")
    from_env = ConfigLoader(config_filename=str(ini_path), script_name="test").config
    assert from_env.API.BASE_URL == "http://env.test/api"

    loader = ConfigLoader(
        config_filename=str(ini_path),
        script_name="test",
        api_url="http://cli.test/api",
        lang="de",
        debug=True,
    )

    assert loader.config.API.BASE_URL == "http://cli.test/api"
    assert loader.config.VIEW.PREFERRED_LANGUAGE == "de"
    assert loader.config.GENERAL.DEBUG is True


def test_unknown_sections_and_keys_are_ignored(tmp_path: Path) -> None:
    ini_path: Path = _write_ini(
        tmp_path,
        """
        [TWITCH]
        OWNER_NAME = "owner1"

        [PASTE]
        COLOR = "blue"
        """,
    )

    config = ConfigLoader(config_filename=str(ini_path), script_name="test").config

    assert config.PASTE.MAX_LENGTH == 20000


def test_duplicate_languages_are_dropped(tmp_path: Path) -> None:
    ini_path: Path = _write_ini(
        tmp_path,
        """
        [TRANSLATION]
        SUPPORTED_LANGUAGES = ["en", "fr", "en"]
        """,
    )

    config = ConfigLoader(config_filename=str(ini_path), script_name="test").config

    assert config.TRANSLATION.SUPPORTED_LANGUAGES == ["en", "fr"]


@pytest.mark.parametrize(
    ("section", "line", "error"),
    [
        ("GENERAL", "DEBUG = maybe", ConfigValueError),
        ("API", "BASE_URL = ftp://paste.test", ConfigValueError),
        ("API", "BASE_URL = localhost:8080", ConfigValueError),
        ("API", "TIMEOUT = -1", ConfigValueError),
        ("API", "TIMEOUT = soon", ConfigValueError),
        ("TRANSLATION", "SUPPORTED_LANGUAGES = []", ConfigValueError),
        ("TRANSLATION", 'SUPPORTED_LANGUAGES = ["english"]', ConfigValueError),
        ("TRANSLATION", 'SUPPORTED_LANGUAGES = {"en": 1}', ConfigTypeError),
        ("TRANSLATION", "SUPPORTED_LANGUAGES = [en", ConfigFormatError),
        ("PASTE", "DEFAULT_TONE = sarcastic", ConfigValueError),
        ("PASTE", "MAX_LENGTH = -5", ConfigValueError),
        ("VIEW", "PREFERRED_LANGUAGE = 12345", ConfigValueError),
    ],
)
def test_invalid_values_are_rejected(tmp_path: Path, section: str, line: str, error: type[Exception]) -> None:
    ini_path: Path = _write_ini(tmp_path, f"[{section}]\n{line}\n")

    with pytest.raises(error):
        ConfigLoader(config_filename=str(ini_path), script_name="test")


def test_invalid_cli_url_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(ConfigValueError, match="http"):
        ConfigLoader(
            config_filename=str(tmp_path / "missing.ini"),
            script_name="test",
            allow_missing=True,
            api_url="not a url",
        )


def test_unparsable_file_raises_format_error(tmp_path: Path) -> None:
    ini_path: Path = _write_ini(tmp_path, "DEBUG = True\n")

    with pytest.raises(ConfigFormatError):
        ConfigLoader(config_filename=str(ini_path), script_name="test")
