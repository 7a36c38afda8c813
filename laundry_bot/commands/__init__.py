"""Slash command registration for the laundry bot."""

from .register import register_commands

__all__ = ["register_commands"]
