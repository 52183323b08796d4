"""
Fire-and-forget execution of outbound side effects.

Notifications and calendar sync run after the primary state change has been
committed. Their failures are logged and never reach the caller.
"""

import asyncio
import logging
from collections.abc import Awaitable
from typing import Any

logger = logging.getLogger(__name__)


class SideEffectRunner:
    """
    Runs awaitables as detached asyncio tasks.

    Tasks are kept in a set until they finish so they are not garbage
    collected mid-flight, and so shutdown (and tests) can wait for them.
    """

    def __init__(self) -> None:
        self._background_tasks: set[asyncio.Task[Any]] = set()
        self._failures = 0

    @property
    def pending(self) -> int:
        """Number of side effects still running."""
        return len(self._background_tasks)

    @property
    def failures(self) -> int:
        """Number of side effects that raised since startup."""
        return self._failures

    def dispatch(self, name: str, awaitable: Awaitable[Any], **context: Any) -> asyncio.Task[Any]:
        """
        Schedule a side effect without awaiting it.

        Args:
            name: Short label used in logs (e.g. "notify.booking_confirmation")
            awaitable: The collaborator call to run
            **context: Identifiers attached to the failure log (booking_id, tenant_id, ...)

        Returns:
            The created task
        """
        task = asyncio.create_task(self._guard(name, awaitable, context), name=f"side_effect:{name}")
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)
        return task

    async def _guard(self, name: str, awaitable: Awaitable[Any], context: dict[str, Any]) -> None:
        try:
            await awaitable
        except asyncio.CancelledError:
            logger.info(f"Side effect {name} cancelled")
            raise
        except Exception as e:
            self._failures += 1
            logger.error(
                f"Side effect {name} failed: {e}",
                exc_info=True,
                extra={"extra_data": {"side_effect": name, **context}},
            )

    async def drain(self, timeout: float | None = None) -> None:
        """Wait for every outstanding side effect to finish."""
        if not self._background_tasks:
            return
        tasks = list(self._background_tasks)
        done, pending = await asyncio.wait(tasks, timeout=timeout)
        for task in pending:
            task.cancel()
        if pending:
            logger.warning(f"Cancelled {len(pending)} side effects still running after {timeout}s")
            await asyncio.gather(*pending, return_exceptions=True)


# Global instance for singleton pattern
_side_effect_runner: SideEffectRunner | None = None


def get_side_effect_runner() -> SideEffectRunner:
    """Get or create the process-wide side effect runner."""
    global _side_effect_runner
    if _side_effect_runner is None:
        _side_effect_runner = SideEffectRunner()
    return _side_effect_runner
