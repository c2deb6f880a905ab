from __future__ import annotations

from pathlib import Path

import pytest
from inline_snapshot import snapshot

from skillsync.config import (
    Config,
    dump_config,
    get_config_file,
    get_default_config,
    load_config,
    load_config_from_string,
)
from skillsync.exception import ConfigError
from skillsync.similarity.name import NameAlgorithm
from skillsync.sync.strategy import Strategy


def test_default_config_dump():
    config = get_default_config()
    assert config.model_dump() == snapshot(
        {
            "similarity": {
                "name_threshold": 0.7,
                "content_threshold": 0.6,
                "algorithm": "combined",
            },
            "sync": {"default_strategy": "overwrite", "auto_backup": True},
            "backup": {"retention_days": 30},
            "paths": {
                "skillsync_home": None,
                "admin_path": None,
                "system_path": None,
                "builtin_path": None,
            },
            "logging": {"levels": {}},
        }
    )


def test_load_config_text_yaml_camel_case():
    config = load_config_from_string(
        """\
similarity:
  nameThreshold: 0.8
  algorithm: jaro_winkler
sync:
  defaultStrategy: three_way
  autoBackup: false
backup:
  retentionDays: 7
"""
    )
    assert config.similarity.name_threshold == 0.8
    assert config.similarity.content_threshold == 0.6
    assert config.similarity.algorithm is NameAlgorithm.JARO_WINKLER
    assert config.sync.default_strategy is Strategy.THREE_WAY
    assert config.sync.auto_backup is False
    assert config.backup.retention_days == 7


def test_load_config_text_snake_case():
    config = load_config_from_string("sync:\n  default_strategy: merge\n")
    assert config.sync.default_strategy is Strategy.MERGE


def test_load_config_text_json():
    config = load_config_from_string('{"backup": {"retentionDays": 30}}')
    assert config == get_default_config()


def test_load_config_text_empty():
    assert load_config_from_string("") == get_default_config()


def test_load_config_text_invalid():
    with pytest.raises(ConfigError, match="Invalid configuration text"):
        load_config_from_string("similarity: [1, 2")


@pytest.mark.parametrize(
    "text",
    [
        "- just\n- a list\n",
        "similarity:\n  nameThreshold: 1.5\n",
        "backup:\n  retentionDays: -1\n",
        "sync:\n  defaultStrategy: yolo\n",
        "unknownSection: {}\n",
    ],
)
def test_load_config_invalid_values(text: str):
    with pytest.raises(ConfigError, match="Invalid configuration"):
        load_config_from_string(text)


def test_load_config_file(tmp_path: Path):
    config_file = tmp_path / "config.yaml"
    config_file.write_text("paths:\n  adminPath: /srv/skills\n")
    config = load_config(config_file)
    assert config.paths.admin_path == Path("/srv/skills")


def test_load_config_missing_explicit_file(tmp_path: Path):
    with pytest.raises(ConfigError, match="Config file not found"):
        load_config(tmp_path / "nope.yaml")


def test_get_config_file(tmp_path: Path):
    assert get_config_file(tmp_path) == tmp_path / "config.yaml"


def test_dump_round_trip():
    config = Config.from_mapping(
        {"similarity": {"contentThreshold": 0.5}, "logging": {"levels": {"skillsync": "DEBUG"}}}
    )
    dumped = dump_config(config)
    assert "contentThreshold: 0.5" in dumped
    assert load_config_from_string(dumped) == config
