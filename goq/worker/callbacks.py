"""
Helpers for invoking user callbacks that may be sync or async.
"""

import inspect
import logging
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)


async def invoke(callback: Callable[..., Any], *args: Any) -> Any:
    """Call a function or coroutine function and await the result if needed."""
    result = callback(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


async def report_error(error_handler: Callable[[Exception], Any], error: Exception) -> None:
    """
    Pass an error to the configured error handler.

    A failing error handler is logged and otherwise ignored so the
    dispatcher and workers keep running.
    """
    try:
        await invoke(error_handler, error)
    except Exception:
        logger.exception(
            "Error handler raised",
            extra={"error": str(error)},
        )
