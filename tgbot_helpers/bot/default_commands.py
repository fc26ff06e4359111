"""Ready-made command callbacks for operating a bot.

Each factory takes the owning ``TGBotWrapper`` and returns a coroutine
function usable as a ``Command`` callback. The wrapper registers the ones
enabled in the configuration; the rest (``send_to``, ``send_to_group``,
``log``) are meant to be registered by bots as custom commands.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import TYPE_CHECKING

from telegram import Message
from telegram.error import TelegramError

from ..services.groups import Group
from ..services.system import ipv4_addresses, list_log_files, os_uptime, read_last_lines
from .commands import commandify, decommandify, get_command, parse_message, suffix_after
from .messages import (
    AVAILABLE_GROUPS_HEADER,
    AVAILABLE_LOGS_HEADER,
    CHAT_ADDED,
    CHAT_INFO_HEADER,
    CHAT_INFO_USAGE,
    CHAT_NOT_AVAILABLE,
    CHAT_REMOVED,
    CHATS_IN_GROUP_HEADER,
    COMMAND_REACTIVATED,
    COMMAND_TOGGLED,
    COMMANDS_HEADER_EVERYBODY,
    COMMANDS_HEADER_GROUP,
    DEACTIVATE_INVALID,
    DEACTIVATE_USAGE,
    DEACTIVATED_COMMANDS_HEADER,
    GROUP_TOGGLES_HEADER,
    INIT_ADDED,
    INIT_REFUSED,
    LOG_FILE_EMPTY,
    MESSAGE_SENT_TO_CHAT,
    MESSAGE_SENT_TO_GROUP,
    NEW_USER_HEADER,
    NO_CHAT_ID,
    NO_CHATS_IN_GROUP,
    NO_DEACTIVATED_COMMANDS,
    NO_GROUPS,
    NO_IP_ADDRESSES,
    NO_LOG_FILES,
    NO_TEXT_PROVIDED,
    REQUEST_HEADER,
    TOGGLE_USAGE,
    UPTIME_MESSAGE,
    VARIABLE_NOT_FOUND,
    VARIABLE_REJECTED,
    VARIABLE_VALUE,
    VARIABLES_HEADER,
)
from .types import CommandCallback
from .utils import chat_info, format_duration

if TYPE_CHECKING:
    from .wrapper import TGBotWrapper

logger = logging.getLogger(__name__)

MessageFormatter = Callable[[Message], str | None]

DEFAULT_LOG_LINES = 10


def _to_int(value: str | None) -> int | None:
    try:
        return int(value) if value is not None else None
    except ValueError:
        return None


def _group_toggle_rows(bot: TGBotWrapper, chat_id: int | str) -> list[str]:
    groups = [g for g in bot.groups.values() if g.toggle_command]
    if not groups:
        return []
    rows = ["", GROUP_TOGGLES_HEADER]
    rows.extend(
        f" - <i>{g.name}</i>: /{g.toggle_command.command}_{commandify(chat_id)}" for g in groups
    )
    return rows


def uptime_command(bot: TGBotWrapper) -> CommandCallback:
    """Reply with the uptime of the bot and the OS."""

    async def callback(message: Message) -> None:
        await bot.send_to(
            message.chat.id,
            UPTIME_MESSAGE.format(
                bot_uptime=format_duration(time.time() - bot.start_time),
                os_uptime=format_duration(os_uptime()),
            ),
        )

    return callback


def ip_command(bot: TGBotWrapper) -> CommandCallback:
    """Reply with the IPv4 address(es) of the host."""

    async def callback(message: Message) -> None:
        ips = ipv4_addresses()
        await bot.send_to(message.chat.id, "\n".join(ips) if ips else NO_IP_ADDRESSES)

    return callback


def commands_command(bot: TGBotWrapper) -> CommandCallback:
    """List the commands available to the chat, one message per group."""

    async def callback(message: Message) -> None:
        for group, commands in bot.registry.commands_by_group().items():
            if group is not None and not group.is_member(message.chat.id):
                continue

            header = (
                COMMANDS_HEADER_GROUP.format(group=group) if group else COMMANDS_HEADER_EVERYBODY
            )
            lines = sorted(
                f"{'(' if c.hide else ''}/{c.command}{'*' if c.private_only else ''}"
                f"{')' if c.hide else ''}"
                for c in commands
            )
            await bot.send_to(message.chat.id, "\n".join([header, *lines]))

    return callback


def help_command(bot: TGBotWrapper) -> CommandCallback:
    """List the commands visible to the chat with their descriptions."""

    async def callback(message: Message) -> None:
        visible = [
            c
            for c in bot.registry.commands
            if (Group.is_member_of(c.group, message.chat.id) if c.group else not c.hide)
        ]
        lines = sorted(
            f"/{c.command}{'*' if c.private_only else ''}"
            f"{':  ' + c.description if c.description else ''}"
            for c in visible
        )
        await bot.send_to(message.chat.id, "\n\n".join(lines))

    return callback


def var_command(bot: TGBotWrapper) -> CommandCallback:
    """Show, reset or set variables by their index.

    Usage: ``/var`` lists all variables, ``/var <n>`` shows one,
    ``/var <n> #`` or ``/var <n> default`` resets it and ``/var <n> <value>``
    sets it to everything after the index.
    """

    async def callback(message: Message) -> None:
        info = parse_message(message.text, message.entities)
        args = info.arguments
        variables = list(bot.variables.values())

        if not args:
            listing = "\n".join(f"{i} {v}" for i, v in enumerate(variables))
            await bot.send_to(message.chat.id, f"{VARIABLES_HEADER}\n<code>{listing}</code>")
            return

        index = _to_int(args[0])
        if index is None or not 0 <= index < len(variables):
            await bot.send_to(message.chat.id, VARIABLE_NOT_FOUND.format(index=args[0]))
            return

        variable = variables[index]
        if len(args) > 1:
            if args[1] == "#" or args[1].lower() == "default":
                variable.reset()
            else:
                # The value is everything past the index, not only the second argument
                value = (info.text or "")[len(args[0]) :].strip()
                if value and not variable.set(value):
                    await bot.send_to(
                        message.chat.id, VARIABLE_REJECTED.format(value=value, index=index)
                    )

        await bot.send_to(message.chat.id, VARIABLE_VALUE.format(index=index, value=variable))

    return callback


def send_to_command(
    bot: TGBotWrapper,
    message_formatter: MessageFormatter | None = None,
    empty_response: str | None = None,
    success_response: str | None = None,
    no_id_response: str | None = None,
    no_chat_response: str | None = None,
) -> CommandCallback:
    """Create a command forwarding text to a chat, used as ``/cmd_<CHATID> <text>``.

    Args:
        bot: Owning wrapper.
        message_formatter: Formats the forwarded text, e.g. to add a header.
            Falls back to the raw text when it returns nothing.
        empty_response: Reply when no text was given.
        success_response: Reply after forwarding.
        no_id_response: Reply when the command has no chat id suffix.
        no_chat_response: Reply when the bot cannot reach the chat.
    """

    async def callback(message: Message) -> None:
        info = parse_message(message.text, message.entities)
        if not info.text:
            await bot.send_to(message.chat.id, empty_response or NO_TEXT_PROVIDED)
            return

        chat_id = decommandify(info.command_suffix)
        if not chat_id:
            await bot.send_to(message.chat.id, no_id_response or NO_CHAT_ID)
            return

        try:
            chat = await bot.bot.get_chat(chat_id)
        except TelegramError:
            await bot.send_to(
                message.chat.id, no_chat_response or CHAT_NOT_AVAILABLE.format(chat_id=chat_id)
            )
            return

        await bot.send_to(
            message.chat.id, success_response or MESSAGE_SENT_TO_CHAT.format(chat_id=chat_id)
        )
        formatted = message_formatter(message) if message_formatter else None
        await bot.send_to(chat.id, formatted or info.text)

    return callback


def send_to_group_command(
    bot: TGBotWrapper,
    group: Group,
    message_formatter: MessageFormatter | None = None,
    empty_response: str | None = None,
    success_response: str | None = None,
) -> CommandCallback:
    """Create a command sending its text to every member of a group."""

    async def callback(message: Message) -> None:
        text = parse_message(message.text, message.entities).text
        if not text:
            if empty_response:
                await bot.send_to(message.chat.id, empty_response)
            return

        formatted = message_formatter(message) if message_formatter else None
        await bot.send_to_group(group, formatted or text)
        await bot.send_to(message.chat.id, success_response or MESSAGE_SENT_TO_GROUP.format(group=group))

    return callback


async def _send_log(bot: TGBotWrapper, chat_id: int, path: str, count: int) -> None:
    try:
        content = read_last_lines(path, count)
    except OSError as e:
        await bot.send_error(e)
        return
    await bot.send_to(chat_id, f"<b>{path}</b>\n{content}" if content else LOG_FILE_EMPTY.format(path=path))


def logs_command(bot: TGBotWrapper, paths: str | list[str]) -> CommandCallback:
    """List log files, or send the tail of one: ``/logs <file number> <lines>``."""

    async def callback(message: Message) -> None:
        files = list_log_files(paths)
        if not files:
            await bot.send_to(message.chat.id, NO_LOG_FILES)
            return

        args = parse_message(message.text, message.entities).arguments
        number = _to_int(args[0]) if args else None
        if number is not None and 1 <= number <= len(files):
            count = _to_int(args[1]) if len(args) > 1 else None
            await _send_log(bot, message.chat.id, files[number - 1], count or DEFAULT_LOG_LINES)
            return

        listing = "\n".join(f"  {i} <i>{f}</i>" for i, f in enumerate(files, start=1))
        await bot.send_to(message.chat.id, f"{AVAILABLE_LOGS_HEADER}\n{listing}")

    return callback


def log_command(bot: TGBotWrapper, path: str) -> CommandCallback:
    """Send the last lines of one file: ``/log <lines>``."""

    async def callback(message: Message) -> None:
        args = parse_message(message.text, message.entities).arguments
        count = _to_int(args[0]) if args else None
        await _send_log(bot, message.chat.id, path, count or DEFAULT_LOG_LINES)

    return callback


def init_command(bot: TGBotWrapper, group: Group) -> CommandCallback:
    """Add the first caller to a group, e.g. to bootstrap the first operator."""

    async def callback(message: Message) -> None:
        if group.members:
            await bot.send_to(message.chat.id, INIT_REFUSED)
            return
        if group.add(message.chat.id):
            await bot.send_to(message.chat.id, INIT_ADDED.format(group=group))

    return callback


def deactivate_command(bot: TGBotWrapper) -> CommandCallback:
    """List deactivated commands, reactivate one by index, or toggle one by name."""

    async def callback(message: Message) -> None:
        args = parse_message(message.text, message.entities).arguments
        deactivated = bot.deactivated_commands.members

        if not args:
            usage = DEACTIVATE_USAGE.format(command=get_command(message))
            if deactivated:
                listing = "\n".join(f"{i} {c}" for i, c in enumerate(deactivated))
                status = f"{DEACTIVATED_COMMANDS_HEADER}\n{listing}"
            else:
                status = NO_DEACTIVATED_COMMANDS
            await bot.send_to(message.chat.id, f"{usage}\n\n{status}")
            return

        arg = args[0]
        index = _to_int(arg)
        if index is not None and 0 <= index < len(deactivated):
            command = deactivated[index]
            bot.deactivated_commands.toggle(command)
            await bot.send_to(message.chat.id, COMMAND_REACTIVATED.format(command=command))
            return

        if arg.startswith("/"):
            state = "deactivated" if bot.deactivated_commands.toggle(arg) else "reactivated"
            await bot.send_to(message.chat.id, COMMAND_TOGGLED.format(command=arg, state=state))
            return

        await bot.send_to(message.chat.id, DEACTIVATE_INVALID)

    return callback


def request_command(
    bot: TGBotWrapper,
    request_for: Group,
    send_request_to: Group,
    response: str | None = None,
    toggle_token: str | None = None,
) -> CommandCallback:
    """Create a command requesting membership of a group.

    Args:
        bot: Owning wrapper.
        request_for: Group the request is for.
        send_request_to: Group receiving the request.
        response: Immediate reply to the requesting chat.
        toggle_token: Toggle command offered to the receivers as a
            ``/<command>_<CHATID>`` shortcut.
    """

    async def callback(message: Message) -> None:
        chat_id = message.chat.id
        if response:
            await bot.send_to(chat_id, response)
        if request_for.is_member(chat_id):
            return

        sender = message.from_user or message.chat
        rows = [
            REQUEST_HEADER.format(group=request_for),
            f" - User: {chat_info(sender, True, True)}",
            f" - Chat: {chat_info(message.chat, True, True, True)}",
            f" - Is in group: <code>{str(request_for.is_member(chat_id)).lower()}</code>",
        ]
        if toggle_token:
            rows.append(f"Toggle: /{toggle_token}_{commandify(chat_id)}")

        await bot.send_to_group(send_request_to, "\n".join(rows))

    return callback


def toggle_command(
    bot: TGBotWrapper, command: str, group: Group, response_to_new_member: str | None = None
) -> CommandCallback:
    """Create a command toggling membership, used as ``/<command>_<CHATID>``.

    Without a chat id the current members are listed with their toggle
    shortcuts.
    """

    async def callback(message: Message) -> None:
        info = parse_message(message.text, message.entities)
        chat_id = decommandify(suffix_after(info, command))
        if not chat_id:
            chats = await bot.group_to_chats(group)
            rows = [TOGGLE_USAGE.format(command=command, group=group)]
            rows.extend(
                f" - {chat_info(c, True, True)} /{command}_{commandify(c.id)}" for c in chats
            )
            await bot.send_to(message.chat.id, "\n".join(rows))
            return

        if group.toggle(chat_id):
            await bot.send_to(message.chat.id, CHAT_ADDED.format(chat_id=chat_id, group=group))
            if response_to_new_member:
                await bot.send_to(chat_id, response_to_new_member)
            return

        await bot.send_to(message.chat.id, CHAT_REMOVED.format(chat_id=chat_id, group=group))

    return callback


def start_command(
    bot: TGBotWrapper,
    response: str,
    add_to_group: Group | None = None,
    alert_group: Group | None = None,
) -> CommandCallback:
    """Greet the chat, remember it in a group and alert another group of new chats."""

    async def callback(message: Message) -> None:
        chat_id = message.chat.id
        await bot.send_to(chat_id, response)

        if add_to_group is None or not add_to_group.add(chat_id) or alert_group is None:
            return

        base = parse_message(message.text, message.entities).command_base
        sender = message.from_user or message.chat
        rows = [
            NEW_USER_HEADER.format(command=base),
            f" - User: {chat_info(sender, True, True)}",
            f" - Chat: {chat_info(message.chat, True, True, True)}",
            *_group_toggle_rows(bot, chat_id),
        ]
        await bot.send_to_group(alert_group, "\n".join(rows))

    return callback


def groups_command(bot: TGBotWrapper) -> CommandCallback:
    """List the groups, or the chats of the group with the given index."""

    async def callback(message: Message) -> None:
        groups = list(bot.groups.values())
        args = parse_message(message.text, message.entities).arguments
        index = _to_int(args[0]) if args else None

        if index is not None and 0 <= index < len(groups):
            group = groups[index]
            try:
                infos = await bot.group_to_chat_infos(group)
            except TelegramError as e:
                await bot.send_error(e)
                return

            if infos:
                listing = "\n".join(f" - {s}" for s in infos)
                text = f"{CHATS_IN_GROUP_HEADER.format(group=group)}\n{listing}"
            else:
                text = NO_CHATS_IN_GROUP.format(group=group)
            await bot.send_to(message.chat.id, text)
            return

        if not groups:
            await bot.send_to(message.chat.id, NO_GROUPS)
            return

        listing = "\n".join(f"{i} <i>{g}</i> ({len(g.members)})" for i, g in enumerate(groups))
        await bot.send_to(message.chat.id, f"{AVAILABLE_GROUPS_HEADER}\n{listing}")

    return callback


def chat_info_command(bot: TGBotWrapper, command: str) -> CommandCallback:
    """Describe a chat using the bot, used as ``/<command>_<CHATID>``."""

    async def callback(message: Message) -> None:
        info = parse_message(message.text, message.entities)
        chat_id = decommandify(suffix_after(info, command))
        if not chat_id:
            await bot.send_to(message.chat.id, CHAT_INFO_USAGE.format(command=command))
            return

        chat = await bot.bot.get_chat(chat_id)
        rows = [CHAT_INFO_HEADER, chat_info(chat, True, True), *_group_toggle_rows(bot, chat_id)]
        await bot.send_to(message.chat.id, "\n".join(rows))

    return callback
