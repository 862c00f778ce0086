"""Cooperative cancellation shared between the process and a running verb.

A :class:`CancellationToken` is triggered at most once.  Handlers observe
it by polling :attr:`CancellationToken.cancelled`, by awaiting
:meth:`CancellationToken.wait`, or through :meth:`CancellationToken.sleep`,
which behaves like a delay that aborts early.

Tokens may be triggered from signal handlers or other threads: waiters are
woken through ``loop.call_soon_threadsafe``.
"""

from __future__ import annotations

import asyncio
import threading
from collections.abc import Callable

from verbkit.exceptions import OperationCancelledError


class CancellationToken:
    """A one-shot, thread-safe cancellation flag with async waiting."""

    def __init__(self, *, can_cancel: bool = True) -> None:
        self._can_cancel = can_cancel
        self._cancelled = False
        # Re-entrant: signal handlers call cancel() on the thread that may hold it.
        self._lock = threading.RLock()
        self._callbacks: list[Callable[[], None]] = []

    @classmethod
    def none(cls) -> CancellationToken:
        """Return a token that never triggers."""
        return cls(can_cancel=False)

    def __repr__(self) -> str:
        return f"<CancellationToken cancelled={self._cancelled}>"

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def can_be_cancelled(self) -> bool:
        return self._can_cancel

    def cancel(self) -> bool:
        """Trigger the token.

        Returns ``True`` when this call triggered it and ``False`` when it
        was already triggered (or can never be).  Registered callbacks run
        exactly once, on the triggering call.
        """
        with self._lock:
            if self._cancelled or not self._can_cancel:
                return False
            self._cancelled = True
            callbacks, self._callbacks = self._callbacks, []

        for callback in callbacks:
            callback()
        return True

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise OperationCancelledError("The operation was cancelled.")

    # ------------------------------------------------------------------
    # Callbacks
    # ------------------------------------------------------------------

    def register(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Run *callback* when the token triggers.

        The callback runs immediately if the token is already cancelled.
        Returns a function that unregisters it.
        """
        with self._lock:
            registered = not self._cancelled
            if registered:
                self._callbacks.append(callback)
                # A signal handler may have cancelled between the check and the append.
                if self._cancelled and self._discard(callback):
                    registered = False

        if registered:
            return lambda: self._unregister(callback)
        callback()
        return lambda: None

    def _unregister(self, callback: Callable[[], None]) -> None:
        with self._lock:
            self._discard(callback)

    def _discard(self, callback: Callable[[], None]) -> bool:
        try:
            self._callbacks.remove(callback)
        except ValueError:
            return False
        return True

    # ------------------------------------------------------------------
    # Async helpers
    # ------------------------------------------------------------------

    async def wait(self) -> None:
        """Suspend until the token is triggered."""
        if self._cancelled:
            return

        loop = asyncio.get_running_loop()
        waiter: asyncio.Future[None] = loop.create_future()

        def _wake() -> None:
            if not waiter.done():
                waiter.set_result(None)

        unregister = self.register(lambda: loop.call_soon_threadsafe(_wake))
        try:
            await waiter
        finally:
            unregister()

    async def sleep(self, seconds: float) -> None:
        """Sleep for *seconds* unless the token triggers first.

        Raises
        ------
        OperationCancelledError
            When the token is (or becomes) cancelled before the delay ends.
        """
        self.raise_if_cancelled()
        try:
            await asyncio.wait_for(self.wait(), timeout=max(seconds, 0))
        except asyncio.TimeoutError:
            return
        self.raise_if_cancelled()
