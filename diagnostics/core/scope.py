"""
Cancellation Scopes

A CancelScope is a cooperative cancellation handle. Scopes form a tree:
cancelling a scope cancels all of its live children, and a child created with
a timeout is cancelled once either its own deadline or any ancestor's
deadline passes. Nothing is interrupted; work is expected to poll
``is_cancelled()`` or block in ``wait()`` / ``sleep()``.

Usage:
    root = CancelScope.background()
    with root.child(timeout=5.0) as scope:
        scope.sleep(1.0)      # raises DeadlineExceeded if the deadline passes
        scope.check()         # raises if cancelled
"""

import threading
import time
from typing import Optional, Set

from diagnostics.core.errors import DeadlineExceeded, ScopeCancelled


class CancelScope:
    """Cancellation handle with an optional deadline and a parent link."""

    def __init__(self, parent: "CancelScope" = None, deadline: Optional[float] = None):
        """
        Initialize a scope. Prefer ``background()`` and ``child()``.

        Args:
            parent: Parent scope, None for a root scope
            deadline: Absolute ``time.monotonic()`` deadline, None for no deadline
        """
        self._parent = parent
        self._deadline = deadline
        self._lock = threading.Lock()
        self._event = threading.Event()
        self._error: Optional[ScopeCancelled] = None
        self._children: Set["CancelScope"] = set()

    @classmethod
    def background(cls) -> "CancelScope":
        """Return a fresh root scope that is never cancelled on its own."""
        return cls()

    @property
    def deadline(self) -> Optional[float]:
        return self._deadline

    def remaining(self) -> Optional[float]:
        """Seconds until the deadline (never negative), or None without a deadline."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def child(self, timeout: Optional[float] = None) -> "CancelScope":
        """
        Derive a child scope.

        Args:
            timeout: Seconds from now after which the child is cancelled with
                DeadlineExceeded. The parent's deadline still applies.

        Returns:
            The new child scope; close it when done to detach it
        """
        deadline = self._deadline
        if timeout is not None:
            own = time.monotonic() + timeout
            deadline = own if deadline is None else min(deadline, own)

        child = CancelScope(parent=self, deadline=deadline)

        # observe an expired deadline before linking so the child inherits it
        self.is_cancelled()
        with self._lock:
            error = self._error
            if error is None:
                self._children.add(child)
        if error is not None:
            child.cancel(error)
        return child

    def cancel(self, error: ScopeCancelled = None) -> None:
        """
        Cancel this scope and every live child. Only the first call has effect.

        Args:
            error: Cancellation error to report (default: ScopeCancelled)
        """
        with self._lock:
            if self._error is not None:
                return
            self._error = error if error is not None else ScopeCancelled()
            children = list(self._children)
            self._children.clear()
            self._event.set()

        for child in children:
            child.cancel(self._error)

    def is_cancelled(self) -> bool:
        if self._event.is_set():
            return True
        if self._deadline is not None and time.monotonic() >= self._deadline:
            self.cancel(DeadlineExceeded())
            return True
        return False

    def error(self) -> Optional[ScopeCancelled]:
        """Return the cancellation error, or None while the scope is live."""
        if self.is_cancelled():
            return self._error
        return None

    def check(self) -> None:
        """Raise the cancellation error if the scope has been cancelled."""
        error = self.error()
        if error is not None:
            # fresh instance per raise, the stored one is shared across threads
            raise type(error)(str(error))

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Block until the scope is cancelled or ``timeout`` seconds elapse.

        Returns:
            True if the scope is cancelled, False if the timeout elapsed first
        """
        end = None if timeout is None else time.monotonic() + timeout
        while not self.is_cancelled():
            now = time.monotonic()
            if end is not None and now >= end:
                return False
            limits = [t for t in (end, self._deadline) if t is not None]
            self._event.wait(min(limits) - now if limits else None)
        return True

    def sleep(self, seconds: float) -> None:
        """Sleep for ``seconds`` unless cancelled first, in which case raise."""
        if self.wait(seconds):
            self.check()

    def close(self) -> None:
        """Cancel this scope and detach it from its parent."""
        self.cancel()
        if self._parent is not None:
            self._parent._detach(self)

    def _detach(self, child: "CancelScope") -> None:
        with self._lock:
            self._children.discard(child)

    def __enter__(self) -> "CancelScope":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "cancelled" if self._event.is_set() else "live"
        return f"<CancelScope({state}, remaining={self.remaining()})>"
