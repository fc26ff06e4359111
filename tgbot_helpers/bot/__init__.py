"""Telegram bot specific functionality.

Contains the command registry and parser, the access-control pipeline, the
outbound message dispatcher, the default operator commands and the wrapper
tying them together.
"""
