"""Offline-mode network guard.

Patches the socket APIs of the current process so that any outbound
connection or DNS lookup fails with ``OfflineModeError``. The CLI wraps a run
in ``block_network()`` when ``--offline`` is given; the equivalence oracle then
fails fast and degrades to its conservative verdict.

Nested ``block_network()`` blocks are allowed. The original socket functions
are restored when the outermost block exits.
"""

from __future__ import annotations

from contextlib import contextmanager
import logging
import socket
from typing import Any, Callable, Dict, Iterator

logger = logging.getLogger(__name__)


class OfflineModeError(RuntimeError):
    """Raised when a network operation is attempted in offline mode."""


_depth = 0
_saved: Dict[str, Callable[..., Any]] = {}


def is_network_blocked() -> bool:
    return _depth > 0


def ensure_network_allowed(action: str) -> None:
    """Fail before starting a request, instead of partway through it."""
    if is_network_blocked():
        raise OfflineModeError(f"{action} is not available in offline mode")


def _install(reason: str) -> None:
    def _refuse_connect(*args, **kwargs):
        raise OfflineModeError(f"Network disabled ({reason})")

    def _refuse_lookup(*args, **kwargs):
        raise OfflineModeError(f"DNS lookups disabled ({reason})")

    _saved["connect"] = socket.socket.connect
    _saved["create_connection"] = socket.create_connection
    _saved["getaddrinfo"] = socket.getaddrinfo

    socket.socket.connect = _refuse_connect  # type: ignore[assignment]
    socket.create_connection = _refuse_connect  # type: ignore[assignment]
    socket.getaddrinfo = _refuse_lookup  # type: ignore[assignment]


def _restore() -> None:
    socket.socket.connect = _saved.pop("connect")  # type: ignore[assignment]
    socket.create_connection = _saved.pop("create_connection")  # type: ignore[assignment]
    socket.getaddrinfo = _saved.pop("getaddrinfo")  # type: ignore[assignment]


@contextmanager
def block_network(reason: str = "offline mode") -> Iterator[None]:
    """Block outbound network access for the duration of the block."""
    global _depth

    if _depth == 0:
        _install(reason)
        logger.info(f"Network access blocked ({reason})")
    _depth += 1
    try:
        yield
    finally:
        _depth -= 1
        if _depth == 0:
            _restore()
            logger.debug("Network access restored")
