"""Data models shared by the command and dispatch layers.

Defines Pydantic models for parsed command messages and for outbound send
options. Both are plain value objects without behaviour beyond conversion.
"""

from pydantic import BaseModel, ConfigDict, Field
from telegram import LinkPreviewOptions
from telegram.constants import ParseMode


class SendOptions(BaseModel):
    """Options applied to an outbound text message.

    Attributes:
        parse_mode: Telegram parse mode, None for plain text.
        silent: Deliver without a notification on the receiving side.
        no_preview: Do not show link previews.
    """

    model_config = ConfigDict(frozen=True)

    parse_mode: str | None = ParseMode.HTML
    silent: bool = False
    no_preview: bool = False

    @classmethod
    def from_parse_mode(
        cls, parse_mode: str | None = None, silent: bool = False, no_preview: bool = False
    ) -> "SendOptions":
        """Build options from the parse mode shorthand.

        Args:
            parse_mode: Parse mode, defaults to HTML when empty.
            silent: Deliver without a notification.
            no_preview: Disable link previews.

        Returns:
            Normalized send options.
        """
        return cls(parse_mode=parse_mode or ParseMode.HTML, silent=silent, no_preview=no_preview)

    @property
    def is_html(self) -> bool:
        return self.parse_mode == ParseMode.HTML

    def to_kwargs(self) -> dict[str, object]:
        """Convert to keyword arguments for ``Bot.send_message``."""
        return {
            "parse_mode": self.parse_mode,
            "disable_notification": self.silent,
            "link_preview_options": LinkPreviewOptions(is_disabled=self.no_preview),
        }


class MessageInfo(BaseModel):
    """Command and arguments extracted from an incoming message.

    Attributes:
        command: Leading command token including '/', suffix and bot name.
        command_base: Command name without '/', suffix and bot name.
        command_suffix: Part after the first '_' of the command token.
        command_bot_name: Bot name after '@' in the command token.
        text: All text after the command, stripped.
        arguments: Space separated words on the first line after the command.
    """

    command: str | None = None
    command_base: str | None = None
    command_suffix: str | None = None
    command_bot_name: str | None = None
    text: str | None = None
    arguments: list[str] = Field(default_factory=list)
