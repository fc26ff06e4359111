"""Telegram bot helper library.

Wraps a python-telegram-bot client with command registration, per-chat
persisted variables, group membership management and convenience senders.

The package follows a modular layout with separate concerns for:
- Persistence of variables and groups over a key-value storage
- Command registration, parsing and access control
- Outbound message dispatch with sanitizing and splitting
- Optional default commands for operating a running bot
"""

from .bot.commands import Command, CommandRegistry
from .bot.wrapper import TGBotWrapper
from .errors import ConfigurationError
from .models import MessageInfo, SendOptions
from .services.groups import Group, RequestCommand, ToggleCommand
from .services.storage import KeyValueStorage, MemoryStorage, SQLiteStorage
from .services.variables import BooleanVariable, ObjectVariable, StringVariable, Variable

__all__ = [
    "BooleanVariable",
    "Command",
    "CommandRegistry",
    "ConfigurationError",
    "Group",
    "KeyValueStorage",
    "MemoryStorage",
    "MessageInfo",
    "ObjectVariable",
    "RequestCommand",
    "SQLiteStorage",
    "SendOptions",
    "StringVariable",
    "TGBotWrapper",
    "ToggleCommand",
    "Variable",
]
