"""Bot utility functions for text formatting.

Provides HTML sanitizing for outbound messages, display names for chats and
users, and human readable durations.
"""

import logging
from typing import Any

from bs4 import BeautifulSoup
from bs4.element import PreformattedString

logger = logging.getLogger(__name__)

ALLOWED_TAGS = frozenset({"b", "i", "code"})

# Tags removed together with their content
DISCARDED_TAGS = ["script", "style", "textarea", "noscript", "option"]


def sanitize_html(text: str, allowed_tags: frozenset[str] = ALLOWED_TAGS) -> str:
    """Strip all markup except a small allow-list of inline tags.

    Disallowed tags are unwrapped (their text is kept), script-like tags are
    dropped with their content, attributes are removed from allowed tags and
    stray ``<``, ``>`` and ``&`` characters are escaped. Unclosed allowed tags
    are closed.

    Args:
        text: Text possibly containing HTML.
        allowed_tags: Tag names that survive sanitizing.

    Returns:
        Text safe to send with the HTML parse mode.
    """
    soup = BeautifulSoup(text, "html.parser")

    for tag in soup.find_all(DISCARDED_TAGS):
        tag.decompose()

    # Comments, doctypes and CDATA sections
    for special in soup.find_all(string=lambda s: isinstance(s, PreformattedString)):
        special.extract()

    for tag in soup.find_all(True):
        if tag.name in allowed_tags:
            tag.attrs = {}
        else:
            tag.unwrap()

    return soup.decode(formatter="minimal")


def chat_info(
    chat_or_user: Any,
    all_info: bool = False,
    tags: bool = False,
    no_name_if_private_chat: bool = False,
) -> str:
    """Build a display string for a chat or user.

    1. User => name and username etc.
    2. Chat, private => name and username etc.
    3. Chat, not private => title and type etc.

    Args:
        chat_or_user: Telegram Chat, ChatFullInfo or User.
        all_info: Include invite link, bot flag and language.
        tags: Wrap parts in HTML tags.
        no_name_if_private_chat: Describe private chats by type instead of name.

    Returns:
        Space separated description.
    """
    i, ii = ("<i>", "</i>") if tags else ("", "")
    b, bb = ("<b>", "</b>") if tags else ("", "")

    parts: list[str] = []
    chat_type = getattr(chat_or_user, "type", None)

    if chat_type and (chat_type != "private" or no_name_if_private_chat):
        title = getattr(chat_or_user, "title", None)
        parts.append(f"{b}{title}{bb}" if title else "")
        parts.append(f"[{chat_type}]")
        if all_info:
            invite_link = getattr(chat_or_user, "invite_link", None)
            parts.append(f"{i}{invite_link}{ii}" if invite_link else "")
    else:
        first_name = getattr(chat_or_user, "first_name", None) or ""
        last_name = getattr(chat_or_user, "last_name", None)
        username = getattr(chat_or_user, "username", None)
        name = f"{first_name} {last_name}" if last_name else first_name
        parts.append(f"{b}{name}{bb}" if name else "")
        parts.append(f"{i}@{username}{ii}" if username else "")
        if all_info:
            parts.append("(BOT)" if getattr(chat_or_user, "is_bot", False) else "")
            language_code = getattr(chat_or_user, "language_code", None)
            parts.append(f"[{language_code}]" if language_code else "")

    return " ".join(p for p in parts if p).strip()


def format_duration(seconds: float) -> str:
    """Format a duration like '2 days, 3 hours, 4 minutes and 5 seconds'.

    Leading zero units are omitted.
    """
    total = int(seconds)
    days, rest = divmod(total, 86400)
    hours, rest = divmod(rest, 3600)
    minutes, secs = divmod(rest, 60)

    if days:
        return f"{days} days, {hours} hours, {minutes} minutes and {secs} seconds"
    if hours:
        return f"{hours} hours, {minutes} minutes and {secs} seconds"
    if minutes:
        return f"{minutes} minutes and {secs} seconds"
    return f"{secs} seconds"
