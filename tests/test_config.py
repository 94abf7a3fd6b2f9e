"""Tests for configuration loading."""

import json

import pytest

from haplorefine.config import REQUIRED_TOOLS, load_config, tool_path


def test_packaged_defaults():
    cfg = load_config()
    assert cfg["threshold"] == 0.04
    assert cfg["batch_size"] == 100
    assert cfg["threads"] == 1
    assert cfg["delete_intermediates"] is False
    assert cfg["tag_name"] == "HP"
    assert set(cfg["tools"]) == set(REQUIRED_TOOLS)


def test_user_overrides_merge_with_defaults(tmp_path):
    path = tmp_path / "cfg.json"
    path.write_text(json.dumps({"threads": 8, "tools": {"whatshap": "/opt/whatshap"}}))

    cfg = load_config(str(path))

    assert cfg["threads"] == 8
    assert cfg["model"] == "r941_min_high_g360"
    assert tool_path(cfg, "whatshap") == "/opt/whatshap"
    assert tool_path(cfg, "samtools") == "samtools"


def test_missing_config_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "absent.json"))


def test_invalid_json(tmp_path):
    path = tmp_path / "cfg.json"
    path.write_text("{not json")
    with pytest.raises(ValueError, match="Error parsing JSON"):
        load_config(str(path))


def test_non_object_json(tmp_path):
    path = tmp_path / "cfg.json"
    path.write_text("[1, 2]")
    with pytest.raises(ValueError, match="JSON object"):
        load_config(str(path))


def test_tool_path_without_tools_section():
    assert tool_path({}, "bgzip") == "bgzip"
