from __future__ import annotations

import json
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.validation import ValidationProfile
from ..services.serializer import MAX_BATCH_SIZE
from .filing_schema import PROFILES

"""Config loader.

Responsibilities:
- Load the YAML config (default config/stamps.yml)
- Validate it against config_schema.json (unknown keys rejected)
- Apply defaults (validation_profile=standard, max_batch_bytes=29 MiB)
- Apply environment overrides (STAMPS_INPUT_FILE / STAMPS_OUTPUT_DIR / STAMPS_ATTACHMENTS_DIR)
"""

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")

ENV_OVERRIDES = {
    "STAMPS_INPUT_FILE": "input_file",
    "STAMPS_OUTPUT_DIR": "output_directory",
    "STAMPS_ATTACHMENTS_DIR": "attachments_directory",
}


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class AppConfig:
    input_file: str
    output_directory: str
    attachments_directory: str | None = None
    sheet_name: str | None = None  # None = first sheet
    validation_profile: str = "standard"
    max_batch_bytes: int = MAX_BATCH_SIZE
    keep_na_strings: list[str] = field(default_factory=list)

    @property
    def profile(self) -> ValidationProfile:
        return PROFILES[self.validation_profile]


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: if the schema file is missing or invalid, or the data
            violates the schema (missing keys, wrong types, unknown keys).
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")
    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def apply_env_overrides(cfg: AppConfig, environ: dict[str, str] | None = None) -> AppConfig:
    env = os.environ if environ is None else environ
    changes = {attr: env[name] for name, attr in ENV_OVERRIDES.items() if env.get(name)}
    return replace(cfg, **changes) if changes else cfg


def load_config(path: Path, environ: dict[str, str] | None = None) -> AppConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError("config validation failed: top level must be a mapping")

    _validate_config_schema(data)

    cfg = AppConfig(
        input_file=data["input_file"],
        output_directory=data["output_directory"],
        attachments_directory=data.get("attachments_directory"),
        sheet_name=data.get("sheet_name"),
        validation_profile=data.get("validation_profile", "standard"),
        max_batch_bytes=data.get("max_batch_bytes", MAX_BATCH_SIZE),
        keep_na_strings=list(data.get("keep_na_strings") or []),
    )
    return apply_env_overrides(cfg, environ)
