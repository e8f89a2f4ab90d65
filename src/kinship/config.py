"""
Configuration loader for the relationship engine.

Reads an optional JSON file, then applies KINSHIP_* environment overrides.
Falls back to defaults if no file is found.
"""

from dataclasses import dataclass, fields
import json
import os
from pathlib import Path
from typing import Any, Optional


@dataclass
class EngineConfig:
    db_path: str = "family_tree.db"
    log_level: str = "INFO"
    # None probes the schema on first use
    metadata_supported: Optional[bool] = None


def _config_paths(path: Optional[Path]) -> list:
    """Config file search paths (in priority order)."""
    if path is not None:
        return [Path(path)]
    paths = []
    if os.environ.get("KINSHIP_CONFIG"):
        paths.append(Path(os.environ["KINSHIP_CONFIG"]))
    paths.append(Path("./kinship.json"))
    return paths


def _parse_bool(value: str) -> Optional[bool]:
    value = value.strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off"):
        return False
    return None


def load_config(path: Optional[Path] = None) -> EngineConfig:
    raw: dict[str, Any] = {}
    for config_path in _config_paths(path):
        if config_path.exists():
            try:
                with open(config_path) as f:
                    raw = json.load(f)
            except json.JSONDecodeError as exc:
                raise ValueError(f"Malformed config file {config_path}: {exc}") from exc
            if not isinstance(raw, dict):
                raise ValueError(f"Config file {config_path} must contain a JSON object")
            break

    known = {f.name for f in fields(EngineConfig)}
    config = EngineConfig(**{k: v for k, v in raw.items() if k in known})

    if os.environ.get("KINSHIP_DB_PATH"):
        config.db_path = os.environ["KINSHIP_DB_PATH"]
    if os.environ.get("KINSHIP_LOG_LEVEL"):
        config.log_level = os.environ["KINSHIP_LOG_LEVEL"].upper()
    if os.environ.get("KINSHIP_METADATA_SUPPORTED"):
        config.metadata_supported = _parse_bool(os.environ["KINSHIP_METADATA_SUPPORTED"])

    return config
