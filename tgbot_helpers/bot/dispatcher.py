"""Outbound message delivery.

Sends text to single chats or to every member of a group. HTML text is
sanitized before sending. When Telegram rejects a message as too long the
text is split in half by lines and both halves are sent on their own,
recursively, until every part fits or a single line is still too long.
"""

import asyncio
import logging

from telegram import Bot
from telegram.error import BadRequest, NetworkError, TelegramError

from ..models import SendOptions
from ..services.groups import ChatID, Group
from .messages import MESSAGE_TOO_LONG, SEND_FAILED, UNDEFINED_ERROR
from .utils import sanitize_html

logger = logging.getLogger(__name__)

ERROR_REPORT_LIMIT = 3000


def resolve_send_options(
    options: SendOptions | str | None = None, silent: bool = False, no_preview: bool = False
) -> SendOptions:
    """Normalize the parse mode shorthand and full options to one structure.

    Args:
        options: Full options, a parse mode string, or None for defaults.
        silent: Used with the shorthand only.
        no_preview: Used with the shorthand only.

    Returns:
        Send options.
    """
    if isinstance(options, SendOptions):
        return options
    return SendOptions.from_parse_mode(options, silent=silent, no_preview=no_preview)


def is_message_too_long(error: TelegramError) -> bool:
    return isinstance(error, BadRequest) and "message is too long" in error.message.lower()


class MessageDispatcher:
    """Sends messages through the bot and reports failures to operators.

    Attributes:
        bot: Telegram bot used for sending.
        operators: Group receiving error reports.
    """

    def __init__(self, bot: Bot, operators: Group):
        self.bot = bot
        self.operators = operators

    async def send_to(
        self,
        chat_id: ChatID,
        text: str,
        options: SendOptions | str | None = None,
        silent: bool = False,
        no_preview: bool = False,
    ) -> None:
        """Send a message to a chat, splitting it if it is too long.

        Args:
            chat_id: Chat to send to.
            text: Text to send.
            options: Send options or a parse mode shorthand.
            silent: No notification for the receiver (shorthand only).
            no_preview: No link preview (shorthand only).
        """
        await self._send(chat_id, text, resolve_send_options(options, silent, no_preview), True)

    async def _send(self, chat_id: ChatID, text: str, options: SendOptions, report: bool) -> None:
        text_to_send = sanitize_html(text) if options.is_html else text
        try:
            await self.bot.send_message(chat_id=chat_id, text=text_to_send, **options.to_kwargs())
        except TelegramError as e:
            if is_message_too_long(e):
                await self._send_split(chat_id, text, options, report)
                return

            logger.error(SEND_FAILED.format(chat_id=chat_id, error=e))
            if isinstance(e, NetworkError) and not isinstance(e, BadRequest):
                return
            if report:
                await self._report(
                    f"Error: {e.__class__.__name__}, msg_length: {len(text)}, "
                    f"chat: {chat_id}, description: {e.message}"
                )

    async def _send_split(
        self, chat_id: ChatID, text: str, options: SendOptions, report: bool
    ) -> None:
        lines = text.split("\n")
        if len(lines) <= 1:
            logger.error(MESSAGE_TOO_LONG.format(chat_id=chat_id, length=len(text)))
            if report:
                await self._report(MESSAGE_TOO_LONG.format(chat_id=chat_id, length=len(text)))
            return

        middle = (len(lines) + 1) // 2
        for part in ("\n".join(lines[:middle]).strip(), "\n".join(lines[middle:]).strip()):
            if part:
                await self._send(chat_id, part, options, report)

    async def send_to_group(
        self,
        group: Group,
        text: str,
        options: SendOptions | str | None = None,
        silent: bool = False,
        no_preview: bool = False,
    ) -> None:
        """Send a message to each member of a group.

        The sends run concurrently; a failing member does not stop the others.

        Args:
            group: Group whose members receive the message.
            text: Text to send.
            options: Send options or a parse mode shorthand.
            silent: No notification for the receivers (shorthand only).
            no_preview: No link preview (shorthand only).
        """
        await self._send_group(group, text, resolve_send_options(options, silent, no_preview), True)

    async def _send_group(
        self, group: Group, text: str, options: SendOptions, report: bool
    ) -> None:
        members = group.members
        results = await asyncio.gather(
            *(self._send(member, text, options, report) for member in members),
            return_exceptions=True,
        )
        for member, result in zip(members, results):
            if isinstance(result, Exception):
                logger.error(SEND_FAILED.format(chat_id=member, error=result))

    async def send_error(self, error: object) -> None:
        """Log an error and report it to the operators.

        Failures while reporting are logged only.

        Args:
            error: Exception or message describing the error.
        """
        logger.error(f"{error}", exc_info=error if isinstance(error, BaseException) else None)
        await self._report(str(error) if error else UNDEFINED_ERROR)

    async def _report(self, text: str) -> None:
        try:
            await self._send_group(self.operators, text[:ERROR_REPORT_LIMIT], SendOptions(), False)
        except Exception as e:
            logger.error(f"Failed to report error to {self.operators}: {e}")
