"""Global test configuration and fixtures.

Provides shared fixtures for all test levels: an in-memory storage, a mocked
Telegram bot, groups and a factory for real Telegram message objects.
"""

from datetime import UTC, datetime
from unittest.mock import AsyncMock

import pytest
from telegram import Chat, Message, MessageEntity, User
from telegram.constants import ChatType

from tgbot_helpers.services.groups import Group
from tgbot_helpers.services.storage import MemoryStorage

# Test constants
ADMIN_CHAT_ID = 1001
USER_CHAT_ID = 2002
GROUP_CHAT_ID = -3003
BOT_USERNAME = "test_bot"


@pytest.fixture
def storage():
    """Fresh in-memory storage for every test."""
    return MemoryStorage()


@pytest.fixture
def bot():
    """Mocked Telegram bot recording every API call."""
    mock_bot = AsyncMock()
    mock_bot.get_me.return_value = User(
        id=999, first_name="Test Bot", is_bot=True, username=BOT_USERNAME
    )
    mock_bot.get_chat.side_effect = lambda chat_id: Chat(
        id=int(chat_id), type=ChatType.PRIVATE, first_name=f"user{chat_id}"
    )
    return mock_bot


@pytest.fixture
def sudo_group(storage):
    """Operator group containing the admin chat."""
    group = Group("admin", storage)
    group.add(ADMIN_CHAT_ID)
    return group


def make_message(
    text: str,
    chat_id: int = USER_CHAT_ID,
    chat_type: str = ChatType.PRIVATE,
    user_id: int | None = None,
) -> Message:
    """Build a text message, annotating a leading command like Telegram does."""
    entities = []
    if text.startswith("/"):
        length = len(text.split()[0]) if text.split() else len(text)
        entities.append(MessageEntity(type=MessageEntity.BOT_COMMAND, offset=0, length=length))

    sender_id = user_id if user_id is not None else abs(chat_id)
    chat = (
        Chat(id=chat_id, type=chat_type, first_name="Jane", last_name="Doe", username="jane")
        if chat_type == ChatType.PRIVATE
        else Chat(id=chat_id, type=chat_type, title="Test group")
    )
    return Message(
        message_id=1,
        date=datetime.now(UTC),
        chat=chat,
        from_user=User(id=sender_id, first_name="Jane", is_bot=False, username="jane"),
        text=text,
        entities=entities,
    )


@pytest.fixture
def message_factory():
    """Factory building Telegram messages for tests."""
    return make_message


@pytest.fixture
def sent_to(bot):
    """Texts sent to one chat through the mocked bot, in order."""

    def texts(chat_id) -> list[str]:
        return [
            c.kwargs["text"]
            for c in bot.send_message.await_args_list
            if str(c.kwargs["chat_id"]) == str(chat_id)
        ]

    return texts
