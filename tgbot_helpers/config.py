"""Configuration management for bots built on the helper library.

Handles environment variables, the YAML file describing groups and default
commands, and built-in defaults. Provides structured configuration classes
for the different aspects of a bot (connection, messages, commands).
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings

from .bot.messages import (
    DEFAULT_ACCESS_DENIED_MESSAGE,
    DEFAULT_COMMAND_DEACTIVATED_MESSAGE,
    DEFAULT_PRIVATE_ONLY_MESSAGE,
)


class BotSettings(BaseSettings):
    """Main Telegram bot settings read from the environment.

    Attributes:
        bot_token: Telegram bot API token.
        bot_username: Username of the bot, resolved through the API if unset.
        storage_path: Path to the SQLite file holding variables and groups.
        sudo_group: Name of the operator group.
        log_level: Logging level name.
    """

    bot_token: str = Field(..., validation_alias="BOT_TOKEN")
    bot_username: str | None = Field(default=None, validation_alias="BOT_USERNAME")
    storage_path: str = Field(default="data/storage.db", validation_alias="STORAGE_PATH")
    sudo_group: str = Field(default="admin", validation_alias="SUDO_GROUP")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")


class MessageSettings(BaseModel):
    """Default replies of the access-control pipeline.

    Attributes:
        access_denied: Reply when the chat is not in the command's group.
        command_deactivated: Reply when the command is deactivated.
        private_only: Reply when a private-only command is used elsewhere.
    """

    access_denied: str = DEFAULT_ACCESS_DENIED_MESSAGE
    command_deactivated: str = DEFAULT_COMMAND_DEACTIVATED_MESSAGE
    private_only: str = DEFAULT_PRIVATE_ONLY_MESSAGE


class StartCommandConfig(BaseModel):
    greeting: str
    add_to_group: str | None = None
    description: str | None = None


class CommandsCommandConfig(BaseModel):
    command: str
    available_for: str | None = None
    description: str | None = None


class LogsCommandConfig(BaseModel):
    command: str
    path: str | list[str]


class DefaultCommandsConfig(BaseModel):
    """Which default commands are enabled, and under which token.

    Group references are group names and are resolved by the wrapper.
    """

    init: str | None = None
    uptime: str | None = None
    deactivate: str | None = None
    help: str | None = None
    ip: str | None = None
    var: str | None = None
    groups: str | None = None
    chat_info: str | None = None
    ban_toggle: str | None = None
    commands: CommandsCommandConfig | None = None
    start: StartCommandConfig | None = None
    logs: LogsCommandConfig | None = None


class RequestCommandConfig(BaseModel):
    command: str
    send_to: str | None = None
    response: str | None = None
    private_only: bool = False
    description: str | None = None


class ToggleCommandConfig(BaseModel):
    command: str
    description: str | None = None
    response_when_added: str | None = None


class GroupConfig(BaseModel):
    """A user group and its optional request/toggle commands.

    Attributes:
        name: Group name.
        request: Command letting chats request membership.
        toggle: Command letting operators toggle membership.
    """

    name: str
    request: RequestCommandConfig | None = None
    toggle: ToggleCommandConfig | None = None


class Config:
    """Application configuration manager.

    Combines the environment settings with the YAML file describing groups,
    default commands and messages.
    """

    def __init__(self, config_path: Path | None = None):
        """Initialize configuration manager.

        Args:
            config_path: Path to the YAML file, defaults to data/commands.yml
                next to this module.
        """
        if config_path is None:
            config_path = Path(__file__).parent / "data" / "commands.yml"

        self.config_path = Path(config_path)
        self.bot = BotSettings()

        data = self._load_yaml()
        self.messages = MessageSettings(**(data.get("messages") or {}))
        self.default_commands = DefaultCommandsConfig(**(data.get("default_commands") or {}))
        self.groups = [GroupConfig(**g) for g in data.get("groups") or []]

    def _load_yaml(self) -> dict[str, Any]:
        """Load the YAML configuration.

        Returns:
            Parsed mapping, empty if the file does not exist.
        """
        if not self.config_path.exists():
            return {}

        with open(self.config_path) as f:
            data = yaml.safe_load(f)

        return data or {}
