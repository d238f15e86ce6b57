from __future__ import annotations

import os
from pathlib import Path

from cli_agent import config, paths


def test_platform_dirs_use_xdg_homes() -> None:
    expected_config = Path(os.environ["XDG_CONFIG_HOME"]) / "cli-agent"
    expected_state = Path(os.environ["XDG_STATE_HOME"]) / "cli-agent"

    assert paths.config_dir() == expected_config
    assert paths.log_dir().is_relative_to(expected_state)
    assert paths.config_dir().is_dir()
    assert paths.log_dir().is_dir()


def test_env_file_lives_in_config_dir() -> None:
    config_home = os.environ.get("XDG_CONFIG_HOME", "")
    assert config_home, "XDG_CONFIG_HOME must be set in tests"
    assert str(config.env_file()).startswith(config_home)
