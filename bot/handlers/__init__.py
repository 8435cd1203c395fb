"""Aggregate bot handlers for dispatch registration."""

from .commands import CommandHandlers, setup_command_handlers

__all__ = [
    "CommandHandlers",
    "setup_command_handlers",
]
