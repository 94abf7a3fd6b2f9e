# File: haplorefine/config.py
# Location: haplorefine/haplorefine/config.py

"""
Configuration management module.

This module handles loading configuration from a JSON file.
All default values reside in config.json, which is included in
the installed package directory.

If no config_file is provided, this module attempts to load the default
config.json from the package installation directory.
"""

import json
import os
from typing import Any, Dict, Optional

REQUIRED_TOOLS = ("medaka", "whatshap", "samtools", "bgzip", "tabix")


def load_config(config_file: Optional[str] = None) -> Dict[str, Any]:
    """
    Load configuration from a JSON file.

    If no config_file is provided, the function attempts to load the
    'config.json' from the installed package directory. If it fails
    to find or parse the file, it raises an error.

    A user supplied file only needs to contain the keys it overrides; the
    packaged defaults fill in everything else.

    Parameters
    ----------
    config_file : str, optional
        Path to a configuration file in JSON format. If None, defaults to
        the package-installed 'config.json'.

    Returns
    -------
    dict
        Configuration dictionary loaded from the JSON file.

    Raises
    ------
    FileNotFoundError
        If the specified configuration file does not exist.
    ValueError
        If there is an error parsing the JSON configuration file.
    """
    default_file = os.path.join(os.path.dirname(__file__), "config.json")
    config = _read_json(default_file)

    if config_file:
        overrides = _read_json(config_file)
        tools = dict(config.get("tools", {}))
        tools.update(overrides.pop("tools", {}) or {})
        config.update(overrides)
        config["tools"] = tools

    return config


def _read_json(path: str) -> Dict[str, Any]:
    if not os.path.exists(path):
        raise FileNotFoundError(f"Configuration file '{path}' not found.")

    with open(path, "r", encoding="utf-8") as f:
        try:
            config = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Error parsing JSON configuration: {e}")

    if not isinstance(config, dict):
        raise ValueError(f"Configuration file '{path}' must contain a JSON object.")
    return config


def tool_path(cfg: Dict[str, Any], tool: str) -> str:
    """Return the executable configured for ``tool`` (defaults to the tool name)."""
    return (cfg.get("tools") or {}).get(tool, tool)
