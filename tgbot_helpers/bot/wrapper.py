"""The bot wrapper tying commands, access control and dispatch together.

``TGBotWrapper`` owns the command registry, the groups and variables of a
bot, the access-control pipeline and the message dispatcher. Incoming text
messages are matched against every registered command; each match passes
the access gates before its callback runs.
"""

import json
import logging
import time
from collections.abc import Iterable
from typing import Any

from telegram import Bot, Chat, Message, Update
from telegram.constants import ChatAction
from telegram.error import TelegramError
from telegram.ext import Application, ContextTypes, MessageHandler, filters

from ..config import DefaultCommandsConfig, MessageSettings
from ..errors import DuplicateGroupError, DuplicateVariableError, UnknownGroupError
from ..models import MessageInfo, SendOptions
from ..services.groups import ChatID, Group, ToggleCommand
from ..services.storage import KeyValueStorage
from ..services.variables import BaseVariable, BooleanVariable
from . import default_commands as defaults
from .access import AccessControl
from .commands import Command, CommandRegistry, parse_message
from .dispatcher import MessageDispatcher
from .messages import (
    BAN_DESCRIPTION,
    BOT_INITIALIZED,
    CHAT_INFO_DESCRIPTION,
    DEACTIVATE_DESCRIPTION,
    GROUPS_DESCRIPTION,
    IP_DESCRIPTION,
    UPTIME_DESCRIPTION,
    VAR_DESCRIPTION,
)
from .utils import chat_info

logger = logging.getLogger(__name__)

BANNED_GROUP = "banned"
DEACTIVATED_COMMANDS_GROUP = "deactivatedCommands"


class TGBotWrapper:
    """Helper around a Telegram bot.

    Attributes:
        bot: Telegram bot used for all API calls.
        storage: Backend for variables and groups.
        username: Username of the bot, used in command patterns.
        sudo_group: Operators of the bot.
        banned_users: Chats not allowed to run any command.
        deactivated_commands: Set of deactivated '/command' strings.
        groups: Registered groups by name.
        variables: Registered variables by name.
        registry: Registered commands.
        access: Access-control pipeline.
        dispatcher: Outbound message sender.
        start_time: Creation time as a UNIX timestamp.
    """

    def __init__(
        self,
        bot: Bot,
        storage: KeyValueStorage,
        sudo_group: Group,
        username: str | None = None,
        groups: Iterable[Group] | None = None,
        variables: Iterable[BaseVariable[Any]] | None = None,
        default_commands: DefaultCommandsConfig | None = None,
        messages: MessageSettings | None = None,
    ):
        """Initialize the wrapper and register groups, commands and variables.

        Args:
            bot: Telegram bot.
            storage: Backend for variables and groups.
            sudo_group: Operator group, registered as a group automatically.
            username: Bot username, resolved in ``initialize`` if omitted.
            groups: User groups; their request and toggle commands are registered.
            variables: User variables, editable through the var command.
            default_commands: Default commands to enable.
            messages: Default denial replies.

        Raises:
            ConfigurationError: On duplicate commands, groups or variables, or
                references to unknown groups.
        """
        self.bot = bot
        self.storage = storage
        self.username = username or ""
        self.start_time = time.time()
        self.sudo_group = sudo_group

        default_commands = default_commands or DefaultCommandsConfig()
        messages = messages or MessageSettings()

        self.sudo_echo_var = BooleanVariable("sudoEcho", False, storage)
        self.sudo_log_var = BooleanVariable("sudoLog", False, storage)
        self.deactivated_commands = Group(DEACTIVATED_COMMANDS_GROUP, storage)
        self.banned_users = Group(
            BANNED_GROUP,
            storage,
            toggle_command=(
                ToggleCommand(default_commands.ban_toggle, description=BAN_DESCRIPTION)
                if default_commands.ban_toggle
                else None
            ),
        )

        self.registry = CommandRegistry(self.username)
        self.groups: dict[str, Group] = {}
        self.variables: dict[str, BaseVariable[Any]] = {}

        self.dispatcher = MessageDispatcher(bot, sudo_group)
        self.access = AccessControl(
            self.dispatcher,
            sudo_group=sudo_group,
            deactivated_commands=self.deactivated_commands,
            banned_users=self.banned_users,
            access_denied_message=messages.access_denied,
            command_deactivated_message=messages.command_deactivated,
            private_only_message=messages.private_only,
        )

        all_groups = list(groups or [])
        if sudo_group not in all_groups:
            all_groups.insert(0, sudo_group)
        all_groups.append(self.banned_users)
        for group in all_groups:
            self._add_group(group)
        for group in all_groups:
            self._add_group_commands(group)

        self._add_default_commands(default_commands)

        self._add_variable(self.sudo_echo_var)
        self._add_variable(self.sudo_log_var)
        for variable in variables or []:
            self._add_variable(variable)

    # Registration

    def _add_group(self, group: Group) -> None:
        if group.name in self.groups:
            raise DuplicateGroupError(group.name)
        self.groups[group.name] = group

    def _add_variable(self, variable: BaseVariable[Any]) -> None:
        if variable.name in self.variables:
            raise DuplicateVariableError(variable.name)
        self.variables[variable.name] = variable

    def _add_command(self, command: Command) -> None:
        self.registry.register(command)

    def get_group(self, name: str) -> Group:
        """Look up a registered group by name.

        Raises:
            UnknownGroupError: If no group has this name.
        """
        group = self.groups.get(name)
        if group is None:
            raise UnknownGroupError(name)
        return group

    def _add_group_commands(self, group: Group) -> None:
        request = group.request_command
        toggle = group.toggle_command

        if request:
            self._add_command(
                Command(
                    command=request.command,
                    chat_action=ChatAction.TYPING if request.response else None,
                    private_only=request.private_only,
                    description=request.description,
                    callback=defaults.request_command(
                        self,
                        group,
                        request.send_to,
                        request.response,
                        toggle.command if toggle else None,
                    ),
                )
            )

        if toggle:
            self._add_command(
                Command(
                    command=toggle.command,
                    chat_action=ChatAction.TYPING,
                    group=request.send_to if request else self.sudo_group,
                    match_beginning_only=True,
                    description=toggle.description,
                    callback=defaults.toggle_command(
                        self, toggle.command, group, toggle.response_when_added
                    ),
                )
            )

    def _add_default_commands(self, config: DefaultCommandsConfig) -> None:
        sudo = self.sudo_group
        typing = ChatAction.TYPING

        if config.deactivate:
            self._add_command(
                Command(
                    command=config.deactivate,
                    group=sudo,
                    chat_action=typing,
                    description=DEACTIVATE_DESCRIPTION,
                    callback=defaults.deactivate_command(self),
                )
            )

        if config.help:
            self._add_command(
                Command(command=config.help, chat_action=typing, callback=defaults.help_command(self))
            )

        if config.init:
            self._add_command(
                Command(
                    command=config.init,
                    chat_action=typing,
                    private_only=True,
                    hide=True,
                    callback=defaults.init_command(self, sudo),
                )
            )

        if config.start:
            start = config.start
            add_to_group = self.get_group(start.add_to_group) if start.add_to_group else None
            self._add_command(
                Command(
                    command="start",
                    chat_action=typing,
                    description=start.description,
                    callback=defaults.start_command(self, start.greeting, add_to_group, sudo),
                )
            )

        if config.uptime:
            self._add_command(
                Command(
                    command=config.uptime,
                    group=sudo,
                    chat_action=typing,
                    description=UPTIME_DESCRIPTION,
                    callback=defaults.uptime_command(self),
                )
            )

        if config.ip:
            self._add_command(
                Command(
                    command=config.ip,
                    group=sudo,
                    chat_action=typing,
                    description=IP_DESCRIPTION,
                    callback=defaults.ip_command(self),
                )
            )

        if config.commands:
            commands = config.commands
            self._add_command(
                Command(
                    command=commands.command,
                    group=self.get_group(commands.available_for) if commands.available_for else None,
                    chat_action=typing,
                    description=commands.description,
                    callback=defaults.commands_command(self),
                )
            )

        if config.var:
            self._add_command(
                Command(
                    command=config.var,
                    group=sudo,
                    private_only=True,
                    chat_action=typing,
                    description=VAR_DESCRIPTION,
                    callback=defaults.var_command(self),
                )
            )

        if config.groups:
            self._add_command(
                Command(
                    command=config.groups,
                    group=sudo,
                    private_only=True,
                    chat_action=typing,
                    description=GROUPS_DESCRIPTION,
                    callback=defaults.groups_command(self),
                )
            )

        if config.chat_info:
            self._add_command(
                Command(
                    command=config.chat_info,
                    group=sudo,
                    private_only=True,
                    match_beginning_only=True,
                    chat_action=typing,
                    description=CHAT_INFO_DESCRIPTION,
                    callback=defaults.chat_info_command(self, config.chat_info),
                )
            )

        if config.logs:
            self._add_command(
                Command(
                    command=config.logs.command,
                    group=sudo,
                    private_only=True,
                    chat_action=typing,
                    callback=defaults.logs_command(self, config.logs.path),
                )
            )

    def add_custom_commands(self, commands: Iterable[Command]) -> None:
        """Register bot specific commands.

        Raises:
            DuplicateCommandError: If a command token is already registered.
        """
        added = 0
        for command in commands:
            self._add_command(command)
            added += 1

        logger.info(f"Added {added} custom commands.")

    @property
    def commands(self) -> list[Command]:
        return self.registry.commands

    # Lifecycle

    def register(self, application: Application) -> None:
        """Attach the wrapper to a python-telegram-bot application.

        Args:
            application: Application whose updates the wrapper handles.
        """
        application.add_handler(
            MessageHandler(filters.UpdateType.MESSAGE & filters.TEXT, self._on_update)
        )
        application.add_error_handler(self._on_error)

    async def initialize(self) -> None:
        """Resolve the bot username if needed and announce the bot to operators."""
        if not self.username:
            me = await self.bot.get_me()
            self.username = me.username or ""
            self.registry.bot_name = self.username

        text = BOT_INITIALIZED.format(
            username=self.username or "UNKNOWN_BOT",
            commands=len(self.registry),
            groups=len(self.groups),
            variables=len(self.variables),
        )
        logger.info(text)
        await self.send_to_group(self.sudo_group, text)

    async def _on_update(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        if update.effective_message:
            await self.handle_message(update.effective_message)

    async def _on_error(self, update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
        await self.send_error(context.error)

    # Message handling

    async def handle_message(self, message: Message) -> None:
        """Run every command matching the message text.

        Matching commands run independently: a failing command is reported
        to the operators and the remaining ones still run.

        Args:
            message: Incoming text message.
        """
        await self._debug_listener(message)
        for command in self.registry.matching(message.text):
            try:
                await self.run_command(command, message)
            except Exception as e:
                await self.send_error(e)

    async def run_command(self, command: Command, message: Message) -> None:
        """Run one command if the access gates allow it.

        Args:
            command: Matched command.
            message: Incoming message.
        """
        if not await self.access.check(message, command):
            return
        if command.chat_action:
            try:
                await self.bot.send_chat_action(chat_id=message.chat.id, action=command.chat_action)
            except TelegramError as e:
                logger.warning(f"Chat action for /{command.command} failed: {e}")
        await command.callback(message)

    async def _debug_listener(self, message: Message) -> None:
        sender = message.from_user
        if sender is None or not self.sudo_group.is_member(sender.id):
            return

        if self.sudo_log_var.get():
            logger.info(f"{message.to_dict()}")

        if self.sudo_echo_var.get():
            await self.send_to(message.chat.id, json.dumps(message.to_dict(), indent=4, default=str))

    @staticmethod
    def parse(message: Message) -> MessageInfo:
        return parse_message(message.text, message.entities)

    # Sending

    async def send_to(
        self,
        chat_id: ChatID,
        text: str,
        options: SendOptions | str | None = None,
        silent: bool = False,
        no_preview: bool = False,
    ) -> None:
        await self.dispatcher.send_to(chat_id, text, options, silent, no_preview)

    async def send_to_group(
        self,
        group: Group,
        text: str,
        options: SendOptions | str | None = None,
        silent: bool = False,
        no_preview: bool = False,
    ) -> None:
        await self.dispatcher.send_to_group(group, text, options, silent, no_preview)

    async def send_error(self, error: object) -> None:
        await self.dispatcher.send_error(error)

    # Chats

    async def group_to_chats(self, group: Group) -> list[Chat]:
        """Fetch the chat of every member of a group."""
        return [await self.bot.get_chat(member) for member in group.members]

    async def group_to_chat_infos(self, group: Group) -> list[str]:
        chats = await self.group_to_chats(group)
        return [chat_info(chat, True, True) for chat in chats]

    @staticmethod
    def chat_info(
        chat_or_user: Any,
        all_info: bool = False,
        tags: bool = False,
        no_name_if_private_chat: bool = False,
    ) -> str:
        return chat_info(chat_or_user, all_info, tags, no_name_if_private_chat)
