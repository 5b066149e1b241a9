"""Global app configuration (LLM connection, content routing, tagging)."""

import json
from pathlib import Path
from typing import Any

from .core import data_dir, write_json_atomic

_CONFIG_DEFAULTS: dict[str, Any] = {
    "llm": {
        "provider_url": "",
        "api_key": "",
        "provider_format": "koboldcpp",
        "model": "",
        "timeout": 20,
    },
    "authored_days": 3,
    "max_tags": 3,
}


def _config_path() -> Path:
    return data_dir() / "config.json"


def get_config() -> dict[str, Any]:
    """Read config, returning defaults merged with stored values."""
    config: dict[str, Any] = {
        "llm": dict(_CONFIG_DEFAULTS["llm"]),
        "authored_days": _CONFIG_DEFAULTS["authored_days"],
        "max_tags": _CONFIG_DEFAULTS["max_tags"],
    }
    path = _config_path()
    if path.is_file():
        stored = json.loads(path.read_text(encoding="utf-8"))
        if isinstance(stored.get("llm"), dict):
            config["llm"].update(stored["llm"])
        if "authored_days" in stored:
            config["authored_days"] = stored["authored_days"]
        if "max_tags" in stored:
            config["max_tags"] = stored["max_tags"]
    return config


def update_config(fields: dict[str, Any]) -> dict[str, Any]:
    """Merge fields into config and persist. Returns full config.

    ``llm`` is merged key-by-key; scalars are overwritten; unknown keys are ignored.
    """
    config = get_config()
    if isinstance(fields.get("llm"), dict):
        config["llm"].update(fields["llm"])
    if "authored_days" in fields:
        config["authored_days"] = fields["authored_days"]
    if "max_tags" in fields:
        config["max_tags"] = fields["max_tags"]
    write_json_atomic(_config_path(), config)
    return config
