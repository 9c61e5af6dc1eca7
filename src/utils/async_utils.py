"""
SentinelBot - Async Utilities
=============================

Fault isolation for the side effects of a moderation decision.

DESIGN:
    Deleting a message, assigning a role, posting a mod-log report and
    sending a DM are independent. Each one runs through these helpers so
    a failure is logged and turned into a default value, and never stops
    the others or escapes the message handler.

    Cancellation is not a failure: CancelledError always propagates
    (except in create_safe_task, where it ends the task quietly).

Usage:
    deleted = await safe_async_operation("Delete Message", message.delete(), default=False)

    await gather_with_logging(
        ("Long Mute DM", notify()),
        ("Long Mute Log", post_report()),
        context="Long Mute",
    )

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import asyncio
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from src.core.logger import logger


Operation = Tuple[str, Awaitable[Any]]

_LOG_LEVELS: Dict[str, Callable[..., None]] = {
    "debug": logger.debug,
    "warning": logger.warning,
    "error": logger.error,
}


def _log_failure(
    name: str,
    error: BaseException,
    context: Optional[str] = None,
    level: str = "warning",
) -> None:
    details = [("Context", context)] if context else []
    details += [
        ("Operation", name),
        ("Error Type", type(error).__name__),
        ("Error", str(error)[:100]),
    ]
    _LOG_LEVELS.get(level, logger.warning)("Async Operation Failed", details)


async def gather_with_logging(*operations: Operation, context: Optional[str] = None) -> List[Any]:
    """
    Run operations concurrently. A failed one is logged and its exception
    returned in its slot; the others still complete.
    """
    results = await asyncio.gather(*(op for _, op in operations), return_exceptions=True)

    for (name, _), result in zip(operations, results):
        if isinstance(result, asyncio.CancelledError):
            raise result
        if isinstance(result, Exception):
            _log_failure(name, result, context)

    return results


async def safe_async_operation(
    name: str,
    operation: Awaitable[Any],
    default: Any = None,
    log_level: str = "warning",
) -> Any:
    """Await operation, returning default (and logging) if it raises."""
    try:
        return await operation
    except Exception as e:
        _log_failure(name, e, level=log_level)
        return default


def create_safe_task(operation: Awaitable[Any], name: str = "Background Task") -> asyncio.Task:
    """
    Start a background task whose exceptions are logged.

    A bare asyncio.create_task() keeps its exception until the task is
    awaited, which a fire-and-forget loop never is.
    """
    async def runner() -> None:
        try:
            await operation
        except asyncio.CancelledError:
            pass
        except Exception as e:
            logger.error("Background Task Failed", [
                ("Task", name),
                ("Error Type", type(e).__name__),
                ("Error", str(e)[:200]),
            ])

    return asyncio.create_task(runner(), name=name)


__all__ = [
    "gather_with_logging",
    "safe_async_operation",
    "create_safe_task",
]
