"""Configuration errors raised while setting up a bot.

All of these are fatal and raised at registration time, never while
handling messages.
"""


class ConfigurationError(Exception):
    """Base class for bot setup errors."""


class DuplicateCommandError(ConfigurationError):
    def __init__(self, command: str):
        super().__init__(f'Duplicate command "{command}"')
        self.command = command


class DuplicateGroupError(ConfigurationError):
    def __init__(self, name: str):
        super().__init__(f'Duplicate group "{name}"')
        self.name = name


class DuplicateVariableError(ConfigurationError):
    def __init__(self, name: str):
        super().__init__(f'Duplicate variable "{name}"')
        self.name = name


class UnknownGroupError(ConfigurationError):
    def __init__(self, name: str):
        super().__init__(f'Unknown group "{name}"')
        self.name = name
