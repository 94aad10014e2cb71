"""Configuration loading and defaults."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml

from .schema import HostSchema, schema_from_mapping

_DEFAULT_CONFIG_DIR = Path.home() / ".config" / "timedivision"
_DEFAULT_CONFIG_PATH = _DEFAULT_CONFIG_DIR / "config.yaml"
_DEFAULT_DEBOUNCE_MS = 500


@dataclass
class Config:
    document_path: Path
    output_path: Path | None = None
    debounce_ms: int = _DEFAULT_DEBOUNCE_MS
    schema: HostSchema = field(default_factory=HostSchema)

    @property
    def target_path(self) -> Path:
        """Where the document with the panel is written."""
        return self.output_path or self.document_path


def load_config(config_path: Path | None = None) -> Config:
    """Load config from YAML file, falling back to defaults where possible."""
    path = config_path or _DEFAULT_CONFIG_PATH
    path = Path(path).expanduser()

    if not path.exists():
        raise FileNotFoundError(
            f"Config file not found: {path}\n"
            f"Create one at {_DEFAULT_CONFIG_PATH} or pass --config.\n"
            f"See config.example.yaml for reference."
        )

    raw = yaml.safe_load(path.read_text())
    if not raw or not isinstance(raw, dict):
        raise ValueError(f"Invalid config file: {path}")

    if "document_path" not in raw:
        raise ValueError("'document_path' is required in config")

    kwargs: dict = {"document_path": Path(raw["document_path"]).expanduser()}
    if raw.get("output_path"):
        kwargs["output_path"] = Path(raw["output_path"]).expanduser()
    if "debounce_ms" in raw:
        debounce_ms = raw["debounce_ms"]
        if not isinstance(debounce_ms, int) or isinstance(debounce_ms, bool) or debounce_ms < 0:
            raise ValueError("'debounce_ms' must be a non-negative integer")
        kwargs["debounce_ms"] = debounce_ms
    if "schema" in raw:
        kwargs["schema"] = schema_from_mapping(raw["schema"])

    return Config(**kwargs)
