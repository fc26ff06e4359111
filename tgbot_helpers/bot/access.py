"""Access control for incoming commands.

Every matched command passes a fixed sequence of gates before its callback
runs. The first gate that denies wins and the remaining gates are skipped:

1. group: the chat must be a member of (one of) the command's groups
2. deactivation: the command must not be deactivated (operators bypass this)
3. private: private-only commands must be used in a private chat
4. ban: the chat must not be banned

Hidden commands never reveal themselves through a denial message.
"""

import logging
from dataclasses import dataclass

from telegram import Message
from telegram.constants import ChatType

from ..services.groups import Group
from .commands import Command
from .dispatcher import MessageDispatcher
from .messages import (
    DEFAULT_ACCESS_DENIED_MESSAGE,
    DEFAULT_COMMAND_DEACTIVATED_MESSAGE,
    DEFAULT_PRIVATE_ONLY_MESSAGE,
)
from .types import AccessResult
from .utils import chat_info

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AccessDecision:
    """Result of evaluating the gates for one message and command.

    Attributes:
        result: Which gate decided, or OK.
        reply: Message to send to the chat, None for silence.
    """

    result: AccessResult
    reply: str | None = None

    @property
    def allowed(self) -> bool:
        return self.result is AccessResult.OK


class AccessControl:
    """Evaluates the access gates and reports the outcome.

    Attributes:
        sudo_group: Operators, exempt from deactivation.
        deactivated_commands: Set of deactivated '/command' strings.
        banned_users: Chats that may not run any command.
        access_denied_message: Default group denial reply.
        command_deactivated_message: Default deactivation reply.
        private_only_message: Default private-only reply.
    """

    def __init__(
        self,
        dispatcher: MessageDispatcher,
        sudo_group: Group,
        deactivated_commands: Group,
        banned_users: Group,
        access_denied_message: str = DEFAULT_ACCESS_DENIED_MESSAGE,
        command_deactivated_message: str = DEFAULT_COMMAND_DEACTIVATED_MESSAGE,
        private_only_message: str = DEFAULT_PRIVATE_ONLY_MESSAGE,
    ):
        self.dispatcher = dispatcher
        self.sudo_group = sudo_group
        self.deactivated_commands = deactivated_commands
        self.banned_users = banned_users
        self.access_denied_message = access_denied_message
        self.command_deactivated_message = command_deactivated_message
        self.private_only_message = private_only_message

    def evaluate(self, message: Message, command: Command) -> AccessDecision:
        """Run the gates without side effects.

        Args:
            message: Incoming message that matched the command.
            command: Matched command.

        Returns:
            The decision of the first denying gate, or OK.
        """
        chat_id = message.chat.id
        hidden = command.hide

        if command.group is not None and not Group.is_member_of(command.group, chat_id):
            reply = None if hidden else command.access_denied_message or self.access_denied_message
            return AccessDecision(AccessResult.DENIED, reply)

        if not self.sudo_group.is_member(chat_id) and self.deactivated_commands.is_member(
            f"/{command.command}"
        ):
            return AccessDecision(
                AccessResult.DEACTIVATED, None if hidden else self.command_deactivated_message
            )

        if command.private_only and message.chat.type != ChatType.PRIVATE:
            return AccessDecision(
                AccessResult.PRIVATE, None if hidden else self.private_only_message
            )

        if self.banned_users.is_member(chat_id):
            return AccessDecision(AccessResult.BANNED)

        return AccessDecision(AccessResult.OK)

    async def check(self, message: Message, command: Command) -> bool:
        """Evaluate the gates, log the outcome and tell the user if needed.

        Args:
            message: Incoming message that matched the command.
            command: Matched command.

        Returns:
            True if the command callback may run.
        """
        decision = self.evaluate(message, command)

        sender = message.from_user or message.chat
        logger.info(f"{chat_info(sender)} : /{command.command} [{decision.result.value}]")

        if decision.reply:
            await self.dispatcher.send_to(message.chat.id, decision.reply)

        return decision.allowed
