"""Typed structures shared across bot components."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Protocol

from telegram import Message


CommandCallback = Callable[[Message], Awaitable[None]]


class EntityLike(Protocol):
    """Minimal view of a Telegram message entity."""

    type: str
    offset: int
    length: int


class AccessResult(str, Enum):
    """Outcome of the access-control pipeline, as written to the command log."""

    OK = "ok"
    DENIED = "denied"
    DEACTIVATED = "deactivated"
    PRIVATE = "private"
    BANNED = "banned"
