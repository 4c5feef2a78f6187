from __future__ import annotations

from curate.errors import AbortedError


class CancellationToken:
    """Cooperative cancellation flag checked between subgraph batches.

    Cancelling never interrupts a request already in flight; it only prevents
    the next one from starting.
    """

    __slots__ = ("_cancelled", "reason")

    def __init__(self) -> None:
        self._cancelled = False
        self.reason: str | None = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self, reason: str | None = None) -> None:
        self._cancelled = True
        self.reason = reason

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise AbortedError(self.reason or "Operation aborted")
