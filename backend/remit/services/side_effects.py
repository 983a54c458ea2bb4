"""Side Effects — best-effort dispatch for notifier and audit calls.

Invariants:
    - A side effect never fails or rolls back the change that triggered it
    - Every failure is logged with the side_effect label
    - With BackgroundTasks the call runs after the response is sent; without, inline
    - inline=True runs now even with BackgroundTasks: error responses never run
      the request's background tasks

Design Decisions:
    - FastAPI BackgroundTasks instead of a task queue: the work is small and losing
      it on a crash is acceptable (audit and email are not part of the commit)
"""

import logging
from typing import Any, Awaitable, Callable

from fastapi import BackgroundTasks

logger = logging.getLogger(__name__)


class SideEffects:
    def __init__(self, background_tasks: BackgroundTasks | None = None):
        self.background_tasks = background_tasks

    async def dispatch(
        self, label: str, fn: Callable[..., Awaitable[Any]], *args: Any,
        on_error: Callable[[Exception], None] | None = None,
        inline: bool = False,
    ) -> None:
        if self.background_tasks is not None and not inline:
            self.background_tasks.add_task(_guarded, label, fn, args, on_error)
            return
        await _guarded(label, fn, args, on_error)


async def _guarded(
    label: str, fn: Callable[..., Awaitable[Any]], args: tuple,
    on_error: Callable[[Exception], None] | None,
) -> None:
    try:
        await fn(*args)
    except Exception as e:
        logger.error(
            f"Side effect {label} failed: {e}",
            extra={"side_effect": label}, exc_info=True,
        )
        if on_error is not None:
            try:
                on_error(e)
            except Exception as hook_error:
                logger.error(
                    f"Side effect {label} error hook failed: {hook_error}",
                    extra={"side_effect": label},
                )
