"""Persistence services package.

Contains the key-value storage backends and the variables and groups
persisted on top of them, plus host introspection for operator commands.
"""
