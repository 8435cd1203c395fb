"""Centralized error handling for bot handlers."""

from __future__ import annotations

from functools import wraps
from typing import Any, Callable

from aiogram import types

from core import get_logger
from core.constants import Messages
from core.exceptions import StorageFaultError
from utils.metrics import errors_total

logger = get_logger(__name__)


def handle_bot_errors(
    error_message: str = Messages.UNEXPECTED_ERROR,
    log_context: bool = True
):
    """Decorator for bot handler methods.

    Args:
        error_message: Reply sent to the user when the handler fails
        log_context: Whether to log the handler name, user and chat

    Usage:
        @handle_bot_errors()
        async def on_text(self, message):
            ...
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(self, message: Any, *args, **kwargs):
            try:
                return await func(self, message, *args, **kwargs)
            except Exception as e:
                is_message = isinstance(message, types.Message)
                user_id = message.from_user.id if is_message and message.from_user else None
                chat_id = message.chat.id if is_message else None

                log_extra = {}
                if log_context:
                    log_extra = {
                        "handler": func.__name__,
                        "user_id": user_id,
                        "chat_id": chat_id,
                    }

                errors_total.labels(type=type(e).__name__).inc()
                logger.error(
                    f"Error in {func.__name__}: {e}",
                    exc_info=True,
                    extra=log_extra
                )

                if is_message:
                    reply = StorageFaultError().user_message if isinstance(e, StorageFaultError) else error_message
                    try:
                        await message.answer(reply)
                    except Exception as send_error:
                        logger.error(f"Failed to send error message: {send_error}")

        return wrapper
    return decorator
