"""Cancellation and deadline context passed to checkers."""

import threading
from time import monotonic
from typing import Optional

from auditkit.errors import ScanCancelledError


class ScanContext:
    """Cancellable context with an optional deadline.

    Child contexts observe their parent's cancellation, so cancelling the
    scan-wide context stops every checker that polls its own context.

    Usage:
        ctx = ScanContext()
        child = ctx.child(timeout=60)

        for cluster in clusters:
            child.raise_if_cancelled()
            ...
    """

    def __init__(
        self,
        timeout: Optional[float] = None,
        parent: Optional["ScanContext"] = None,
    ):
        """Initialize the context.

        Args:
            timeout: Seconds until the deadline passes (None = no deadline).
            parent: Context whose cancellation this one inherits.
        """
        self.parent = parent
        self._event = threading.Event()
        self._deadline: Optional[float] = monotonic() + timeout if timeout is not None else None

    def child(self, timeout: Optional[float] = None) -> "ScanContext":
        """Create a child context with its own deadline."""
        return ScanContext(timeout=timeout, parent=self)

    def cancel(self) -> None:
        """Signal cancellation to this context and its children."""
        self._event.set()

    @property
    def cancelled(self) -> bool:
        """Whether this context or any ancestor was cancelled."""
        if self._event.is_set():
            return True
        return self.parent is not None and self.parent.cancelled

    @property
    def expired(self) -> bool:
        """Whether this context's deadline (or an ancestor's) has passed."""
        if self._deadline is not None and monotonic() >= self._deadline:
            return True
        return self.parent is not None and self.parent.expired

    @property
    def done(self) -> bool:
        """Whether work under this context should stop."""
        return self.cancelled or self.expired

    def remaining(self) -> Optional[float]:
        """Seconds left before the nearest deadline, or None if unbounded."""
        candidates = []
        ctx: Optional[ScanContext] = self
        while ctx is not None:
            if ctx._deadline is not None:
                candidates.append(ctx._deadline - monotonic())
            ctx = ctx.parent
        if not candidates:
            return None
        return max(0.0, min(candidates))

    def raise_if_cancelled(self) -> None:
        """Raise ScanCancelledError if work should stop."""
        if self.cancelled:
            raise ScanCancelledError("Scan cancelled")
        if self.expired:
            raise ScanCancelledError("Deadline exceeded")
