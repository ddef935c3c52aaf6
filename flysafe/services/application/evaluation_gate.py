"""
Application service: Last-input-wins coordination of async evaluations.
"""
from typing import Any, Awaitable, Optional
import asyncio
import logging

logger = logging.getLogger(__name__)


class LatestEvaluationGate:
    """
    Runs evaluations so that only the most recent submission publishes.

    Every submission cancels the evaluation still in flight. A result that
    arrives after a newer submission has been made is discarded and never
    overwrites `latest`.
    """

    def __init__(self):
        self._generation = 0
        self._task: Optional[asyncio.Future] = None
        self.latest: Any = None

    @property
    def generation(self) -> int:
        return self._generation

    async def submit(self, evaluation: Awaitable[Any]) -> Optional[Any]:
        """
        Run an evaluation, superseding any evaluation in flight.

        Args:
            evaluation: Awaitable producing the evaluation result

        Returns:
            The result, or None if a newer submission superseded this one
        """
        self._generation += 1
        generation = self._generation

        if self._task is not None and not self._task.done():
            logger.debug(f"Cancelling superseded evaluation (generation {generation - 1})")
            self._task.cancel()

        task = asyncio.ensure_future(evaluation)
        self._task = task

        try:
            result = await task
        except asyncio.CancelledError:
            if generation != self._generation:
                return None
            raise

        if generation != self._generation:
            logger.debug(f"Discarding stale evaluation result (generation {generation})")
            return None

        self.latest = result
        return result
