"""Command descriptors, registry and message parsing.

Commands are described by explicit ``Command`` records and kept in a
``CommandRegistry``, which builds the match pattern of each command,
groups commands by the group required to run them, and parses the command
token and arguments out of incoming text.
"""

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass, field

from telegram import Message
from telegram.constants import ChatAction, MessageEntityType

from ..errors import DuplicateCommandError
from ..models import MessageInfo
from ..services.groups import ChatID, Group
from .types import CommandCallback, EntityLike

logger = logging.getLogger(__name__)

DEFAULT_MINUS = "m"


@dataclass
class Command:
    """A chat command and the rules for running it.

    Attributes:
        command: Command token without the leading '/'.
        callback: Coroutine function run with the message when access is granted.
        group: Group, or list of groups, whose members may run the command.
        private_only: Only allow the command in private chats.
        match_beginning_only: Also match tokens that continue the command,
            e.g. ``/toggle_12345`` for ``toggle``.
        hide: Never tell users the command exists when access is denied.
        description: Help text.
        chat_action: Chat action sent before the callback runs.
        access_denied_message: Reply used instead of the default denial.
        regexp: Custom pattern replacing the generated one.
    """

    command: str
    callback: CommandCallback
    group: Group | list[Group] | None = None
    private_only: bool = False
    match_beginning_only: bool = False
    hide: bool = False
    description: str | None = None
    chat_action: ChatAction | str | None = None
    access_denied_message: str | None = None
    regexp: re.Pattern[str] | None = field(default=None, repr=False)

    @property
    def groups(self) -> list[Group]:
        if self.group is None:
            return []
        if isinstance(self.group, Group):
            return [self.group]
        return list(self.group)

    def __str__(self) -> str:
        return self.command


def command_pattern(command: Command, bot_name: str = "") -> re.Pattern[str]:
    """Create the pattern matching a command at the start of a message.

    The command may be followed by ``@<bot_name>``. The character after the
    command (and bot name) must be the end of the text or anything but a
    letter, digit, '_' or '@', so ``/cmdextra`` does not match ``/cmd``.
    With ``match_beginning_only`` any letters, digits and '_' may follow the
    command before that check. Without a bot name any mention is rejected.

    Args:
        command: Command to build the pattern for.
        bot_name: Username of the bot.

    Returns:
        Compiled pattern.
    """
    if command.regexp is not None:
        return command.regexp

    continuation = "[a-zA-Z0-9_]*" if command.match_beginning_only else ""
    mention = rf"|@{re.escape(bot_name)}\b" if bot_name else ""
    return re.compile(
        rf"^/{re.escape(command.command)}{continuation}(?:${mention}|[^a-zA-Z0-9_@])"
    )


def parse_message(text: str | None, entities: Sequence[EntityLike] | None = None) -> MessageInfo:
    """Extract the command, its suffix and the arguments from a message.

    A command is only recognized when the first entity is a bot command
    starting at offset 0.

    Args:
        text: Message text.
        entities: Message entities as sent by Telegram.

    Returns:
        Parsed message info. Arguments are only filled for commands.
    """
    command_length = 0
    if entities:
        entity = entities[0]
        if entity.type == MessageEntityType.BOT_COMMAND and entity.offset == 0:
            command_length = entity.length

    info = MessageInfo()
    if not text:
        return info

    command = text[:command_length].strip()
    if command:
        info.command = command
        token, _, bot_name = command.partition("@")
        base, separator, suffix = token.partition("_")
        info.command_base = base[1:]
        if separator and suffix:
            info.command_suffix = suffix
        if bot_name:
            info.command_bot_name = bot_name

        first_line = text[command_length:].split("\n")[0]
        info.arguments = [word for word in first_line.split(" ") if word]

    rest = text[command_length:].strip()
    if rest:
        info.text = rest

    return info


def get_command(message: Message) -> str:
    """Get the command used in a message, without '/' and bot name.

    Returns:
        Command token including any suffix, or an empty string.
    """
    entities = message.entities
    if not entities or entities[0].offset != 0 or entities[0].type != MessageEntityType.BOT_COMMAND:
        return ""
    return (message.text or "")[1 : entities[0].length].split("@")[0]


def suffix_after(info: MessageInfo, command: str) -> str | None:
    """Get the part of a command token following '/<command>_'.

    Unlike ``MessageInfo.command_suffix`` this works for command names that
    contain underscores themselves, e.g. ``/toggle_user_42`` for ``toggle_user``.
    """
    token = (info.command or "").split("@")[0]
    prefix = f"/{command}_"
    if token.startswith(prefix):
        return token[len(prefix) :] or None
    return info.command_suffix


def commandify(chat_id: ChatID, minus: str = DEFAULT_MINUS) -> str:
    """Make a chat id usable inside a command token.

    Command tokens cannot contain '-', so the sign of negative ids (groups,
    channels) is replaced by ``minus``.
    """
    return str(chat_id).replace("-", minus, 1)


def decommandify(value: str | None, minus: str = DEFAULT_MINUS) -> int | None:
    """Turn a command suffix created by ``commandify`` back into a chat id.

    Returns:
        Chat id, None if the value is not an integer.
    """
    if not value:
        return None
    if value.startswith(minus):
        value = "-" + value[len(minus) :]
    if not re.fullmatch(r"-?\d+", value):
        return None
    return int(value)


class CommandRegistry:
    """Registry holding all commands of one bot.

    Provides duplicate detection, pattern matching against incoming text and
    grouping of commands by the groups allowed to use them.
    """

    def __init__(self, bot_name: str = ""):
        """Initialize empty command registry.

        Args:
            bot_name: Username of the bot, used in command patterns.
        """
        self._commands: dict[str, Command] = {}
        self._patterns: dict[str, re.Pattern[str]] = {}
        self._bot_name = bot_name

    @property
    def bot_name(self) -> str:
        return self._bot_name

    @bot_name.setter
    def bot_name(self, value: str) -> None:
        self._bot_name = value
        self._patterns = {
            name: command_pattern(cmd, value) for name, cmd in self._commands.items()
        }

    @property
    def commands(self) -> list[Command]:
        return list(self._commands.values())

    def __len__(self) -> int:
        return len(self._commands)

    def __contains__(self, command: str) -> bool:
        return command in self._commands

    def get(self, command: str) -> Command | None:
        return self._commands.get(command)

    def register(self, command: Command) -> None:
        """Register a new command.

        Args:
            command: Command to add.

        Raises:
            DuplicateCommandError: If the command token is already registered.
        """
        if command.command in self._commands:
            raise DuplicateCommandError(command.command)

        self._commands[command.command] = command
        self._patterns[command.command] = command_pattern(command, self._bot_name)
        logger.debug(f"Registered command /{command.command}")

    def matching(self, text: str | None) -> list[Command]:
        """Find every command whose pattern matches a message text.

        Args:
            text: Message text.

        Returns:
            Matching commands in registration order.
        """
        if not text:
            return []
        return [
            cmd for name, cmd in self._commands.items() if self._patterns[name].search(text)
        ]

    def commands_by_group(self) -> dict[Group | None, list[Command]]:
        """Order the commands by the group that can use them.

        A command with several groups is listed under each of them; commands
        without a group are listed under None.
        """
        by_group: dict[Group | None, list[Command]] = {}
        for cmd in self._commands.values():
            for group in cmd.groups or [None]:
                by_group.setdefault(group, []).append(cmd)
        return by_group
