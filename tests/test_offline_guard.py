import socket

import pytest

from decipher_engine.core.offline_guard import (
    OfflineModeError,
    block_network,
    ensure_network_allowed,
    is_network_blocked,
)


def test_block_network_blocks_socket_calls():
    assert is_network_blocked() is False

    with block_network():
        assert is_network_blocked() is True
        with pytest.raises(OfflineModeError):
            socket.getaddrinfo("example.com", 80)
        with pytest.raises(OfflineModeError):
            socket.create_connection(("example.com", 80), timeout=0.1)

    assert is_network_blocked() is False


def test_nested_blocks_restore_on_outermost_exit():
    original = socket.getaddrinfo
    with block_network("outer"):
        with block_network("inner"):
            assert is_network_blocked() is True
        assert is_network_blocked() is True
        assert socket.getaddrinfo is not original
    assert socket.getaddrinfo is original


def test_restored_after_exception():
    original = socket.create_connection
    with pytest.raises(ValueError):
        with block_network():
            raise ValueError("boom")
    assert socket.create_connection is original
    assert is_network_blocked() is False


def test_ensure_network_allowed():
    ensure_network_allowed("Lookup")
    with block_network():
        with pytest.raises(OfflineModeError, match="Lookup is not available in offline mode"):
            ensure_network_allowed("Lookup")
