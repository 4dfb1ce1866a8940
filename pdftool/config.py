"""Configuration resolver for the PDF pipeline.

``Config`` is immutable once built. Load it once at startup with
:meth:`Config.load` (file plus ``PDF_TOOL_*`` environment overrides) and pass
the instance explicitly to the engine and the HTTP application.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator, model_validator

from .exceptions import ConfigurationError

ENV_PREFIX = "PDF_TOOL_"

# Magic bytes for every input format the gate understands.
FORMAT_SIGNATURES: dict[str, bytes] = {"pdf": b"%PDF"}

LOG_LEVELS = ("debug", "info", "warn", "warning", "error")
LOG_FORMATS = ("json", "text")


class Config(BaseModel):
    """Process-wide, read-only pipeline settings."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    # --- Server ---
    environment: str = "development"
    host: str = "0.0.0.0"
    port: int = 8080
    api_prefix: str = ""
    server_read_timeout: float = 30.0
    server_write_timeout: float = 30.0
    server_idle_timeout: float = 60.0
    worker_threads: int = 40

    # --- Logging / telemetry ---
    log_level: str = "info"
    log_format: str = "json"
    metrics_enabled: bool = True

    # --- Limits ---
    max_file_size: int = 52_428_800
    max_pages: int = 1000
    allowed_formats: tuple[str, ...] = ("pdf",)
    temp_dir: Path = Path("/tmp/pdf-tool")
    operation_timeout: float = 120.0

    # --- Operations ---
    ocr_enabled: bool = True
    ocr_languages: tuple[str, ...] = ("eng",)
    compression_level: int = 1
    default_dpi: int = 150
    max_dpi: int = 600

    # --- Front door ---
    cors_allowed_origins: tuple[str, ...] = ("*",)
    rate_limit_enabled: bool = True
    rate_limit_requests_per_minute: int = 60
    rate_limit_burst: int = 10

    @field_validator("log_level", "log_format", mode="before")
    @classmethod
    def _lowercase(cls, value: Any) -> Any:
        return value.strip().lower() if isinstance(value, str) else value

    @field_validator("allowed_formats", mode="before")
    @classmethod
    def _normalise_formats(cls, value: Any) -> Any:
        if isinstance(value, (list, tuple)):
            return tuple(str(item).strip().lower() for item in value)
        return value

    @field_validator("api_prefix")
    @classmethod
    def _normalise_prefix(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        if value and not value.startswith("/"):
            value = "/" + value
        return value

    @model_validator(mode="after")
    def _validate_limits(self) -> "Config":
        if self.log_level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        if self.log_format not in LOG_FORMATS:
            raise ValueError(f"log_format must be one of {', '.join(LOG_FORMATS)}")
        for name in (
            "max_file_size",
            "max_pages",
            "operation_timeout",
            "worker_threads",
            "server_read_timeout",
            "server_write_timeout",
            "server_idle_timeout",
            "max_dpi",
            "default_dpi",
        ):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive")
        if self.rate_limit_enabled and (
            self.rate_limit_requests_per_minute <= 0 or self.rate_limit_burst <= 0
        ):
            raise ValueError("rate limit requests per minute and burst must be positive")
        if not 1 <= self.compression_level <= 3:
            raise ValueError("compression_level must be between 1 and 3")
        if not self.allowed_formats:
            raise ValueError("allowed_formats must not be empty")
        unknown = [fmt for fmt in self.allowed_formats if fmt not in FORMAT_SIGNATURES]
        if unknown:
            raise ValueError(f"Unsupported input formats: {', '.join(unknown)}")
        if self.ocr_enabled and not self.ocr_languages:
            raise ValueError("ocr_languages must not be empty when OCR is enabled")
        if self.default_dpi > self.max_dpi:
            raise ValueError("default_dpi must not exceed max_dpi")
        if not 1 <= self.port <= 65535:
            raise ValueError("port must be between 1 and 65535")
        return self

    @property
    def signatures(self) -> tuple[bytes, ...]:
        return tuple(FORMAT_SIGNATURES[fmt] for fmt in self.allowed_formats)

    # ------------------------------------------------------------------
    # Loaders
    # ------------------------------------------------------------------
    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Config":
        try:
            return cls.model_validate(dict(data))
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid configuration: {exc}") from exc

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Config":
        """Build a config from ``PDF_TOOL_*`` variables on top of defaults."""

        return cls.from_mapping(_env_overrides(os.environ if environ is None else environ))

    @classmethod
    def from_file(cls, path: str | Path) -> "Config":
        """Load configuration from a YAML or JSON file.

        Keys present in the file override the defaults; unknown keys are
        rejected.
        """

        return cls.from_mapping(_read_file(Path(path)))

    @classmethod
    def load(
        cls,
        path: str | Path | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> "Config":
        """Merge an optional config file with environment overrides."""

        env = os.environ if environ is None else environ
        if path is None:
            path = env.get(f"{ENV_PREFIX}CONFIG_FILE") or None
        data: dict[str, Any] = _read_file(Path(path)) if path else {}
        data.update(_env_overrides(env))
        return cls.from_mapping(data)


def _read_file(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise ConfigurationError(f"Config file not found: {path}")
    suffix = path.suffix.lower()
    with path.open("r", encoding="utf-8") as handle:
        if suffix in (".yaml", ".yml"):
            data = yaml.safe_load(handle)
        elif suffix == ".json":
            data = json.load(handle)
        else:
            raise ConfigurationError(
                f"Unsupported config file extension {suffix!r}. Use .yaml, .yml, or .json."
            )
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping")
    return data


def _env_overrides(environ: Mapping[str, str]) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for name, field in Config.model_fields.items():
        raw = environ.get(f"{ENV_PREFIX}{name.upper()}")
        if raw is None:
            continue
        if _is_sequence_field(field.annotation):
            overrides[name] = tuple(item.strip() for item in raw.split(",") if item.strip())
        else:
            overrides[name] = raw.strip()
    return overrides


def _is_sequence_field(annotation: Any) -> bool:
    return getattr(annotation, "__origin__", None) in (tuple, list)


__all__ = ["Config", "ENV_PREFIX", "FORMAT_SIGNATURES"]
