"""Tests for outbound message delivery."""

from unittest.mock import AsyncMock

import pytest
from telegram.constants import ParseMode
from telegram.error import BadRequest, Forbidden, NetworkError, TimedOut

from tgbot_helpers.bot.dispatcher import MessageDispatcher, resolve_send_options
from tgbot_helpers.models import SendOptions
from tgbot_helpers.services.groups import Group

ADMIN_ID = 1001
LIMIT = 100


def too_long_above(limit: int):
    """Simulate Telegram rejecting texts longer than ``limit``."""

    async def send_message(chat_id, text, **kwargs):
        if len(text) > limit:
            raise BadRequest("Message is too long")

    return send_message


@pytest.fixture
def dispatcher(bot, sudo_group):
    return MessageDispatcher(bot, sudo_group)


def delivered(bot, chat_id) -> list[str]:
    return [
        c.kwargs["text"]
        for c in bot.send_message.await_args_list
        if str(c.kwargs["chat_id"]) == str(chat_id)
    ]


class TestResolveSendOptions:
    def test_shorthand_defaults_to_html(self):
        options = resolve_send_options(None, silent=True)

        assert options.parse_mode == ParseMode.HTML
        assert options.silent is True
        assert options.no_preview is False

    def test_full_options_are_kept(self):
        options = SendOptions(parse_mode=ParseMode.MARKDOWN_V2, no_preview=True)

        assert resolve_send_options(options, silent=True) is options

    def test_to_kwargs(self):
        kwargs = SendOptions(silent=True, no_preview=True).to_kwargs()

        assert kwargs["parse_mode"] == ParseMode.HTML
        assert kwargs["disable_notification"] is True
        assert kwargs["link_preview_options"].is_disabled is True


class TestSendTo:
    @pytest.mark.asyncio
    async def test_html_is_sanitized(self, dispatcher, bot):
        await dispatcher.send_to(5, '<b onclick="x">bold</b> <a href="y">link</a> <script>z</script>')

        bot.send_message.assert_awaited_once()
        assert bot.send_message.await_args.kwargs["text"] == "<b>bold</b> link "

    @pytest.mark.asyncio
    async def test_plain_text_is_not_sanitized(self, dispatcher, bot):
        await dispatcher.send_to(5, "<a>x</a>", "MarkdownV2")

        assert bot.send_message.await_args.kwargs["text"] == "<a>x</a>"
        assert bot.send_message.await_args.kwargs["parse_mode"] == "MarkdownV2"

    @pytest.mark.asyncio
    async def test_too_long_message_is_split_by_lines(self, dispatcher, bot):
        bot.send_message.side_effect = too_long_above(LIMIT)
        lines = [f"line {i:03d} " + "x" * 20 for i in range(12)]
        text = "\n".join(lines)

        await dispatcher.send_to(5, text, "Markdown")

        parts = [t for t in delivered(bot, 5) if len(t) <= LIMIT]
        assert "\n".join(parts) == text
        assert delivered(bot, ADMIN_ID) == []

    @pytest.mark.asyncio
    async def test_first_half_takes_the_extra_line(self, dispatcher, bot):
        bot.send_message.side_effect = too_long_above(20)

        await dispatcher.send_to(5, "aaaaaaaaa\nbbbbbbbbb\nccccccccc", "Markdown")

        assert delivered(bot, 5)[1:] == ["aaaaaaaaa\nbbbbbbbbb", "ccccccccc"]

    @pytest.mark.asyncio
    async def test_single_line_too_long_is_reported(self, dispatcher, bot):
        bot.send_message.side_effect = too_long_above(5000)

        await dispatcher.send_to(5, "x" * 10000)

        assert len(delivered(bot, 5)) == 1
        reports = delivered(bot, ADMIN_ID)
        assert len(reports) == 1
        assert "too long" in reports[0]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [NetworkError("down"), TimedOut()])
    async def test_network_errors_are_swallowed(self, dispatcher, bot, error):
        bot.send_message.side_effect = error

        await dispatcher.send_to(5, "hi")

        assert bot.send_message.await_count == 1

    @pytest.mark.asyncio
    async def test_other_errors_are_reported_once(self, dispatcher, bot):
        bot.send_message.side_effect = Forbidden("bot was blocked by the user")

        await dispatcher.send_to(5, "hi")

        # One failed send plus one failed report, no report of the report
        assert bot.send_message.await_count == 2
        assert "Forbidden" in bot.send_message.await_args_list[1].kwargs["text"]


class TestSendToGroup:
    @pytest.mark.asyncio
    async def test_sends_to_every_member(self, dispatcher, bot, storage):
        group = Group("users", storage)
        for chat_id in (1, 2, 3):
            group.add(chat_id)

        await dispatcher.send_to_group(group, "hello", silent=True)

        assert sorted(c.kwargs["chat_id"] for c in bot.send_message.await_args_list) == ["1", "2", "3"]
        assert all(c.kwargs["disable_notification"] for c in bot.send_message.await_args_list)

    @pytest.mark.asyncio
    async def test_failing_member_does_not_stop_others(self, dispatcher, bot, storage):
        group = Group("users", storage)
        for chat_id in (1, 2, 3):
            group.add(chat_id)

        async def send_message(chat_id, text, **kwargs):
            if chat_id == "2":
                raise NetworkError("down")

        bot.send_message.side_effect = send_message

        await dispatcher.send_to_group(group, "hello")

        assert sorted(c.kwargs["chat_id"] for c in bot.send_message.await_args_list) == ["1", "2", "3"]


class TestSendError:
    @pytest.mark.asyncio
    async def test_error_is_truncated(self, dispatcher, bot):
        await dispatcher.send_error(ValueError("e" * 5000))

        text = bot.send_message.await_args.kwargs["text"]
        assert bot.send_message.await_args.kwargs["chat_id"] == str(ADMIN_ID)
        assert len(text) == 3000

    @pytest.mark.asyncio
    async def test_exception_traceback_is_logged(self, dispatcher, caplog):
        caplog.set_level("ERROR", logger="tgbot_helpers.bot.dispatcher")
        try:
            raise ValueError("broken")
        except ValueError as e:
            error = e

        await dispatcher.send_error(error)

        record = next(r for r in caplog.records if r.getMessage() == "broken")
        assert record.exc_info[1] is error
        assert "Traceback" in caplog.text

    @pytest.mark.asyncio
    async def test_empty_error(self, dispatcher, bot):
        await dispatcher.send_error(None)

        assert bot.send_message.await_args.kwargs["text"] == "Undefined error"

    @pytest.mark.asyncio
    async def test_report_failure_is_swallowed(self, dispatcher, bot):
        bot.send_message.side_effect = RuntimeError("boom")

        await dispatcher.send_error("something broke")

        bot.send_message.assert_awaited_once()
