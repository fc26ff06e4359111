"""Application entry point.

Builds a bot from the environment and the YAML command configuration and
runs it with long polling. Bots with their own commands usually build the
wrapper themselves and call ``TGBotWrapper.add_custom_commands``.
"""

import logging

from telegram.ext import Application

from .bot.wrapper import TGBotWrapper
from .config import Config, GroupConfig
from .services.groups import Group, RequestCommand, ToggleCommand
from .services.storage import KeyValueStorage, SQLiteStorage

logger = logging.getLogger(__name__)


def build_groups(
    configs: list[GroupConfig], storage: KeyValueStorage, sudo_group: Group
) -> list[Group]:
    """Create the configured groups.

    Request commands without a receiving group send their requests to the
    operators.

    Args:
        configs: Group configurations.
        storage: Backend for the member lists.
        sudo_group: Operator group.

    Returns:
        The groups, in configuration order.
    """
    groups = []
    for cfg in configs:
        toggle = (
            ToggleCommand(
                cfg.toggle.command,
                description=cfg.toggle.description,
                response_when_added=cfg.toggle.response_when_added,
            )
            if cfg.toggle
            else None
        )
        groups.append(Group(cfg.name, storage, toggle_command=toggle))

    by_name = {g.name: g for g in groups}
    by_name.setdefault(sudo_group.name, sudo_group)
    for cfg, group in zip(configs, groups):
        if not cfg.request:
            continue
        send_to = by_name.get(cfg.request.send_to) if cfg.request.send_to else sudo_group
        if send_to is None:
            logger.warning(f"Unknown group {cfg.request.send_to}, requests go to {sudo_group}")
            send_to = sudo_group
        group.request_command = RequestCommand(
            cfg.request.command,
            send_to=send_to,
            response=cfg.request.response,
            private_only=cfg.request.private_only,
            description=cfg.request.description,
        )
    return groups


def build_application(config: Config) -> Application:
    """Create the Telegram application with a configured wrapper attached.

    Args:
        config: Loaded configuration.

    Returns:
        Application ready to run.
    """
    app = Application.builder().token(config.bot.bot_token).build()

    storage = SQLiteStorage(config.bot.storage_path)
    sudo_group = Group(config.bot.sudo_group, storage)
    wrapper = TGBotWrapper(
        app.bot,
        storage,
        sudo_group,
        username=config.bot.bot_username,
        groups=build_groups(config.groups, storage, sudo_group),
        default_commands=config.default_commands,
        messages=config.messages,
    )
    wrapper.register(app)

    async def post_init(application: Application) -> None:
        await wrapper.initialize()

    app.post_init = post_init
    app.bot_data["wrapper"] = wrapper
    return app


def main() -> None:
    """Main application entry point.

    Raises:
        ValidationError: If the BOT_TOKEN environment variable is not set.
    """
    config = Config()

    logging.basicConfig(
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
        level=config.bot.log_level.upper(),
    )

    app = build_application(config)
    logger.info("Starting long polling")
    app.run_polling()


if __name__ == "__main__":
    main()
