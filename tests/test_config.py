from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from pathlib import Path

import pytest
from pydantic import ValidationError

from phonetype.config import (
    _ENV_MAP,
    bootstrap,
    build_resolver,
    build_table,
    configure_from_settings,
    load_settings,
)
from phonetype.logging_config import JsonFormatter


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for key in (*_ENV_MAP, "PHONETYPE_CONFIG"):
        monkeypatch.delenv(key, raising=False)
    # Keep a developer's ./.env out of the tests.
    monkeypatch.chdir(tmp_path)


def test_defaults() -> None:
    settings = load_settings()
    assert settings.log_level == "INFO"
    assert settings.json_logging is False
    assert settings.country_source == "bundled"
    assert settings.country_codes_path is None
    assert settings.default_separator == "-"


def test_yaml_then_dotenv_then_os_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    cfg = tmp_path / "phonetype.yaml"
    cfg.write_text("log_level: WARNING\ndefault_separator: ' '\ngeocoder_locale: de\n", encoding="utf-8")
    env = tmp_path / "custom.env"
    env.write_text("PHONETYPE_LOG_LEVEL=ERROR\nPHONETYPE_JSON_LOGGING=true\n", encoding="utf-8")
    monkeypatch.setenv("PHONETYPE_JSON_LOGGING", "false")

    settings = load_settings(yaml_path=cfg, env_path=env)
    assert settings.default_separator == " "
    assert settings.geocoder_locale == "de"
    assert settings.log_level == "ERROR"
    assert settings.json_logging is False


def test_config_path_from_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    cfg = tmp_path / "other.yaml"
    cfg.write_text("country_source: phonenumbers\n", encoding="utf-8")
    monkeypatch.setenv("PHONETYPE_CONFIG", str(cfg))
    assert load_settings().country_source == "phonenumbers"


def test_dotenv_in_working_directory_is_picked_up(tmp_path: Path) -> None:
    (tmp_path / ".env").write_text("PHONETYPE_DEFAULT_SEPARATOR=.\n", encoding="utf-8")
    assert load_settings().default_separator == "."


def test_invalid_values_are_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PHONETYPE_DEFAULT_SEPARATOR", "--")
    with pytest.raises(ValidationError):
        load_settings()
    monkeypatch.setenv("PHONETYPE_DEFAULT_SEPARATOR", "-")
    monkeypatch.setenv("PHONETYPE_COUNTRY_SOURCE", "registry")
    with pytest.raises(ValidationError):
        load_settings()


def test_build_resolver_uses_custom_dataset(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    data = tmp_path / "codes.json"
    data.write_text(
        json.dumps(
            [
                {"name": "Short", "dial_code": "+9", "code": "SH"},
                {"name": "Long", "dial_code": "+987", "code": "LO"},
            ]
        ),
        encoding="utf-8",
    )
    monkeypatch.setenv("PHONETYPE_COUNTRY_CODES_PATH", str(data))
    monkeypatch.setenv("PHONETYPE_DEFAULT_SEPARATOR", " ")

    resolver = build_resolver(load_settings())
    parsed = resolver.resolve_e164("+9876543210")
    assert parsed.country_code == "987"
    assert resolver.format(parsed) == "654 321 0"
    info = resolver.country_info(parsed)
    assert info is not None and info.region_code == "LO"


def test_build_table_from_phonenumbers(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PHONETYPE_COUNTRY_SOURCE", "phonenumbers")
    table = build_table(load_settings())
    entry = table.lookup("49")
    assert entry is not None and entry.region_code == "DE"


@pytest.fixture
def restore_root_logger() -> Iterator[logging.Logger]:
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for h in list(root.handlers):
        root.removeHandler(h)
    for h in handlers:
        root.addHandler(h)
    root.setLevel(level)


def test_configure_from_settings_applies_logging_settings(
    monkeypatch: pytest.MonkeyPatch, restore_root_logger: logging.Logger
) -> None:
    monkeypatch.setenv("PHONETYPE_LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("PHONETYPE_JSON_LOGGING", "true")

    configure_from_settings(load_settings())
    assert restore_root_logger.level == logging.DEBUG
    assert len(restore_root_logger.handlers) == 1
    assert isinstance(restore_root_logger.handlers[0].formatter, JsonFormatter)


def test_bootstrap_configures_logging_and_builds_resolver(
    monkeypatch: pytest.MonkeyPatch, restore_root_logger: logging.Logger
) -> None:
    monkeypatch.setenv("PHONETYPE_LOG_LEVEL", "WARNING")
    monkeypatch.setenv("PHONETYPE_DEFAULT_SEPARATOR", ".")

    resolver = bootstrap()
    assert restore_root_logger.level == logging.WARNING
    assert not isinstance(restore_root_logger.handlers[0].formatter, JsonFormatter)
    parsed = resolver.resolve_e164("+521234567890")
    assert resolver.format(parsed) == "123.456.7890"
