"""Named, persisted sets of chat ids.

Groups are used for access control (who may run a command), for broadcasts
and, with plain strings as members, as generic persisted sets such as the
list of deactivated commands.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from .storage import KeyValueStorage

logger = logging.getLogger(__name__)

ChatID = int | str

GROUP_PREFIX = "GROUP_"


def member_id(chat_id: ChatID | float) -> str:
    """Coerce a chat id to the string form stored in groups.

    Integral floats are treated as integers so that ``1234.0`` and ``1234``
    refer to the same member.
    """
    if isinstance(chat_id, float) and chat_id.is_integer():
        chat_id = int(chat_id)
    return str(chat_id)


@dataclass(frozen=True)
class ToggleCommand:
    """Command that lets an operator add or remove a chat by id.

    Attributes:
        command: Command token, used as ``/<command>_<chat id>``.
        description: Help text.
        response_when_added: Message sent to a chat when it is added.
    """

    command: str
    description: str | None = None
    response_when_added: str | None = None


@dataclass(frozen=True)
class RequestCommand:
    """Command that lets a chat request membership of a group.

    Attributes:
        command: Command token.
        send_to: Group receiving the request.
        response: Immediate reply to the requesting chat.
        private_only: Whether requests are only accepted from private chats.
        description: Help text.
    """

    command: str
    send_to: "Group"
    response: str | None = None
    private_only: bool = False
    description: str | None = None


class Group:
    """A named set of chat ids persisted as a newline separated list.

    Attributes:
        name: Group name, used both as label and persistence key.
        storage: Backend holding the member list.
        request_command: Optional command for requesting membership.
        toggle_command: Optional command for toggling membership.
    """

    def __init__(
        self,
        name: str,
        storage: KeyValueStorage,
        toggle_command: ToggleCommand | None = None,
        request_command: RequestCommand | None = None,
    ):
        self.name = name
        self.storage = storage
        self.toggle_command = toggle_command
        self.request_command = request_command

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"Group({self.name!r})"

    @property
    def item_name(self) -> str:
        return GROUP_PREFIX + self.name

    @property
    def members(self) -> list[str]:
        """Get all current members in insertion order."""
        raw = self.storage.get_item(self.item_name)
        if not raw:
            return []
        return [line for line in raw.split("\n") if line]

    def _set_members(self, members: list[str]) -> None:
        self.storage.set_item(self.item_name, "\n".join(members))

    def is_member(self, chat_id: ChatID) -> bool:
        return member_id(chat_id) in self.members

    @staticmethod
    def is_member_of(groups: "Group | Iterable[Group]", chat_id: ChatID) -> bool:
        """Check if a chat is a member of a group or of any group in a list.

        Args:
            groups: A single group or several groups.
            chat_id: Chat id to look for.

        Returns:
            True if at least one of the groups contains the chat.
        """
        if isinstance(groups, Group):
            groups = [groups]
        return any(group.is_member(chat_id) for group in groups)

    def clear(self) -> "Group":
        """Remove all members of this group.

        Returns:
            The group itself, for chaining.
        """
        self.storage.remove_item(self.item_name)
        return self

    def add(self, chat_id: ChatID) -> bool:
        """Add a chat to this group.

        Returns:
            True if the chat was added, False if it already was a member.
        """
        members = self.members
        new_id = member_id(chat_id)
        if new_id in members:
            return False

        self._set_members(members + [new_id])
        logger.debug(f"Added {new_id} to group {self.name}")
        return True

    def toggle(self, chat_id: ChatID) -> bool:
        """Toggle membership of a chat.

        Returns:
            True if the chat was added, False if it was removed.
        """
        members = self.members
        toggled_id = member_id(chat_id)
        if toggled_id in members:
            self._set_members([m for m in members if m != toggled_id])
            logger.debug(f"Removed {toggled_id} from group {self.name}")
            return False

        self._set_members(members + [toggled_id])
        logger.debug(f"Added {toggled_id} to group {self.name}")
        return True
