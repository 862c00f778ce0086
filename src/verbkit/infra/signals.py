"""Derive a cancellation token from process termination.

:func:`token_from_sigterm` returns a :class:`~verbkit.core.cancellation.CancellationToken`
that is triggered the first time the process receives SIGINT (Ctrl+C) or
SIGTERM, or starts shutting down through :mod:`atexit`.  The signal
handlers replace the default behaviour, so Ctrl+C no longer raises
``KeyboardInterrupt``: the running verb observes the token and winds
down on its own.

The handlers and the exit hook are shared by every live token.  They are
installed when the first token is handed out; :func:`release_sigterm`
detaches a token and, once none is left, puts the previous signal
handlers back.
"""

from __future__ import annotations

import atexit
import logging
import signal
import threading
from types import FrameType
from typing import Any

from verbkit.core.cancellation import CancellationToken

logger = logging.getLogger(__name__)

_SIGNALS: tuple[str, ...] = ("SIGINT", "SIGTERM")

_registry_lock = threading.Lock()
_tokens: list[CancellationToken] = []
_previous: dict[int, Any] = {}
_exit_hook_registered = False


def token_from_sigterm(token: CancellationToken | None = None) -> CancellationToken:
    """Wire *token* (or a new one) to SIGINT, SIGTERM and interpreter exit.

    Signal handlers can only be installed from the main thread; elsewhere
    only the exit hook applies.
    """
    global _exit_hook_registered

    token = token or CancellationToken()
    with _registry_lock:
        if not _exit_hook_registered:
            atexit.register(_cancel_all)
            _exit_hook_registered = True
        if not _tokens:
            _install_handlers()
        if not any(known is token for known in _tokens):
            _tokens.append(token)
    return token


def release_sigterm(token: CancellationToken) -> None:
    """Stop cancelling *token* on termination.

    When no token is left the signal handlers that were active before the
    first :func:`token_from_sigterm` call are restored.
    """
    with _registry_lock:
        _tokens[:] = [known for known in _tokens if known is not token]
        if not _tokens:
            _restore_handlers()


def _on_signal(signum: int, _frame: FrameType | None) -> None:
    # Runs between bytecodes of the main thread; only touches re-entrant locks.
    for token in tuple(_tokens):
        if token.cancel():
            logger.info("Received %s; cancelling", signal.Signals(signum).name)


def _cancel_all() -> None:
    for token in tuple(_tokens):
        token.cancel()


def _install_handlers() -> None:
    if _previous:
        return
    if threading.current_thread() is not threading.main_thread():
        logger.debug("Not on the main thread; signal handlers not installed")
        return
    for name in _SIGNALS:
        signum = getattr(signal, name, None)
        if signum is not None:
            _previous[signum] = signal.signal(signum, _on_signal)


def _restore_handlers() -> None:
    if not _previous:
        return
    if threading.current_thread() is not threading.main_thread():
        logger.debug("Not on the main thread; signal handlers left in place")
        return
    for signum, handler in _previous.items():
        signal.signal(signum, signal.SIG_DFL if handler is None else handler)
    _previous.clear()
