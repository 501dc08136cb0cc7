# File: subroll/features/pipeline/service/cancellation.py
import asyncio
from typing import Awaitable, Optional, TypeVar

from subroll.core.errors import PipelineCancelledError

T = TypeVar("T")


class CancellationToken:
    """
    Lets a caller abort a pipeline run. Cancelling also aborts the
    collaborator call that is in flight at that moment.
    """

    def __init__(self):
        self._event = asyncio.Event()
        self.reason: Optional[str] = None

    def cancel(self, reason: str = "Processing cancelled") -> None:
        self.reason = reason
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self, stage: str) -> None:
        if self.cancelled:
            raise PipelineCancelledError(stage, self.reason or "Processing cancelled")

    async def run(self, stage: str, call: Awaitable[T]) -> T:
        """
        Awaits `call` unless the token fires first, in which case the call is
        cancelled and PipelineCancelledError is raised.
        """
        if self.cancelled:
            if asyncio.iscoroutine(call):
                call.close()
            self.raise_if_cancelled(stage)

        task = asyncio.ensure_future(call)
        waiter = asyncio.ensure_future(self._event.wait())
        try:
            done, _ = await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            waiter.cancel()

        if task not in done:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
            self.raise_if_cancelled(stage)

        return task.result()
