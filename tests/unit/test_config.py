"""Tests for environment and YAML configuration."""

import pytest
from pydantic import ValidationError

from tgbot_helpers.bot.messages import DEFAULT_ACCESS_DENIED_MESSAGE
from tgbot_helpers.config import BotSettings, Config
from tgbot_helpers.main import main


@pytest.fixture(autouse=True)
def bot_token(monkeypatch):
    monkeypatch.setenv("BOT_TOKEN", "123:abc")
    for name in ("BOT_USERNAME", "STORAGE_PATH", "SUDO_GROUP", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


def test_bot_settings_defaults():
    settings = BotSettings()

    assert settings.bot_token == "123:abc"
    assert settings.bot_username is None
    assert settings.storage_path == "data/storage.db"
    assert settings.sudo_group == "admin"


def test_bot_settings_env_override(monkeypatch):
    monkeypatch.setenv("SUDO_GROUP", "operators")

    assert BotSettings().sudo_group == "operators"


def test_bot_token_is_required(monkeypatch):
    monkeypatch.delenv("BOT_TOKEN")

    with pytest.raises(ValidationError):
        BotSettings()


def test_missing_yaml_gives_defaults(tmp_path):
    config = Config(tmp_path / "missing.yml")

    assert config.groups == []
    assert config.default_commands.help is None
    assert config.messages.access_denied == DEFAULT_ACCESS_DENIED_MESSAGE


def test_yaml_file_is_loaded(tmp_path):
    path = tmp_path / "commands.yml"
    path.write_text(
        """
messages:
  private_only: "DM me"
groups:
  - name: users
    request:
      command: request
      send_to: admin
    toggle:
      command: toggle_user
default_commands:
  help: help
  commands:
    command: commands
    available_for: users
  logs:
    command: logs
    path: [logs, /var/log/bot]
"""
    )

    config = Config(path)

    assert config.messages.private_only == "DM me"
    assert config.groups[0].request.send_to == "admin"
    assert config.groups[0].toggle.command == "toggle_user"
    assert config.default_commands.help == "help"
    assert config.default_commands.commands.available_for == "users"
    assert config.default_commands.logs.path == ["logs", "/var/log/bot"]


def test_bundled_yaml_is_valid():
    config = Config()

    assert config.default_commands.init == "init"
    assert [g.name for g in config.groups] == ["users"]


def test_main_requires_bot_token(monkeypatch):
    monkeypatch.delenv("BOT_TOKEN")

    with pytest.raises(ValidationError):
        main()
