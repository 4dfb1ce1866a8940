from __future__ import annotations

import json
from pathlib import Path

import pytest

from pydantic import ValidationError

from pdftool.config import Config
from pdftool.exceptions import ConfigurationError, ErrorCode


def test_defaults_match_service_contract() -> None:
    config = Config()
    assert config.max_file_size == 52_428_800
    assert config.max_pages == 1000
    assert config.allowed_formats == ("pdf",)
    assert config.temp_dir == Path("/tmp/pdf-tool")
    assert config.ocr_enabled is True
    assert config.ocr_languages == ("eng",)
    assert config.compression_level == 1
    assert config.rate_limit_requests_per_minute == 60
    assert config.rate_limit_burst == 10
    assert config.signatures == (b"%PDF",)


def test_from_env_reads_prefixed_variables(tmp_path: Path) -> None:
    environ = {
        "PDF_TOOL_MAX_FILE_SIZE": "1024",
        "PDF_TOOL_MAX_PAGES": "12",
        "PDF_TOOL_TEMP_DIR": str(tmp_path),
        "PDF_TOOL_OCR_ENABLED": "false",
        "PDF_TOOL_OCR_LANGUAGES": "eng, deu",
        "PDF_TOOL_CORS_ALLOWED_ORIGINS": "https://a.example,https://b.example",
        "PDF_TOOL_COMPRESSION_LEVEL": "3",
        "PDF_TOOL_LOG_LEVEL": "DEBUG",
        "UNRELATED": "ignored",
    }

    config = Config.from_env(environ)

    assert config.max_file_size == 1024
    assert config.max_pages == 12
    assert config.temp_dir == tmp_path
    assert config.ocr_enabled is False
    assert config.ocr_languages == ("eng", "deu")
    assert config.cors_allowed_origins == ("https://a.example", "https://b.example")
    assert config.compression_level == 3
    assert config.log_level == "debug"


@pytest.mark.parametrize(
    "overrides",
    [
        {"max_file_size": 0},
        {"max_pages": -1},
        {"compression_level": 4},
        {"log_level": "verbose"},
        {"log_format": "xml"},
        {"allowed_formats": ["gif"]},
        {"ocr_enabled": True, "ocr_languages": []},
        {"default_dpi": 900},
        {"unknown_option": 1},
    ],
)
def test_invalid_values_fail_fast(overrides: dict) -> None:
    with pytest.raises(ConfigurationError) as excinfo:
        Config.from_mapping(overrides)
    assert excinfo.value.code is ErrorCode.INVALID_CONFIG


def test_config_is_immutable() -> None:
    config = Config()
    with pytest.raises(ValidationError):
        config.max_pages = 10  # type: ignore[misc]


def test_load_merges_file_and_environment(tmp_path: Path) -> None:
    config_file = tmp_path / "pdf-tool.yaml"
    config_file.write_text("max_pages: 20\nport: 9000\nocr_languages: [eng, fra]\n", encoding="utf-8")

    config = Config.load(config_file, environ={"PDF_TOOL_PORT": "9100"})

    assert config.max_pages == 20
    assert config.port == 9100
    assert config.ocr_languages == ("eng", "fra")


def test_from_file_accepts_json(tmp_path: Path) -> None:
    config_file = tmp_path / "pdf-tool.json"
    config_file.write_text(json.dumps({"api_prefix": "api/v1"}), encoding="utf-8")

    assert Config.from_file(config_file).api_prefix == "/api/v1"


def test_from_file_rejects_unknown_extension(tmp_path: Path) -> None:
    config_file = tmp_path / "pdf-tool.ini"
    config_file.write_text("[pdf]\n", encoding="utf-8")

    with pytest.raises(ConfigurationError):
        Config.from_file(config_file)
