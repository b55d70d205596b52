"""Shared test fixtures for mcast-rpc test suite."""

from __future__ import annotations

import os

# Configure Django settings before any Django imports
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "tests.settings")

import django

django.setup()

import socket

import pytest

from mcast_rpc.config import RpcConfig, reset_config
from mcast_rpc.dispatcher import Dispatcher
from mcast_rpc.registry import MethodRegistry
from tests.fixtures.services import EchoService, GeometryService, MathService

# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def _reset_config():
    """Reload configuration from settings for every test."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def rpc_config():
    """Configuration independent of Django settings."""
    return RpcConfig(client_timeout=2.0)


# ============================================================================
# Registry Fixtures
# ============================================================================


@pytest.fixture
def registry():
    """Registry with the Math, Geometry and Echo services."""
    registry = MethodRegistry()
    registry.register(MathService(), "Math")
    registry.register(GeometryService(), "Geometry")
    registry.register(EchoService(), "Echo")
    return registry


@pytest.fixture
def dispatcher(registry, rpc_config):
    """Dispatcher over the shared registry."""
    return Dispatcher(registry, rpc_config)


# ============================================================================
# Signal Fixtures
# ============================================================================


@pytest.fixture
def capture_signal():
    """Connect a recording receiver to a signal for the duration of a test."""
    connected = []

    def connect(signal):
        calls = []

        def receiver(sender, **kwargs):
            calls.append({"sender": sender, **kwargs})

        signal.connect(receiver, weak=False)
        connected.append((signal, receiver))
        return calls

    yield connect

    for signal, receiver in connected:
        signal.disconnect(receiver)


# ============================================================================
# Socket Fixtures
# ============================================================================


@pytest.fixture
def loopback_socket():
    """UDP socket bound to an ephemeral loopback port."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sock.bind(("127.0.0.1", 0))
    yield sock
    sock.close()


class FakeSocket:
    """Socket stand-in feeding queued datagrams to a server loop.

    Each queued item is either a ``(data, address)`` pair or an exception
    to raise from ``recvfrom``. Once the queue is empty the owning server is
    asked to stop.
    """

    def __init__(self, items, server=None, address=("0.0.0.0", 18042)):
        self.items = list(items)
        self.server = server
        self.address = address
        self.sent = []
        self.send_error = None
        self.closed = False

    def getsockname(self):
        return self.address

    def settimeout(self, timeout):
        self.timeout = timeout

    def fileno(self):
        return -1 if self.closed else 3

    def recvfrom(self, bufsize):
        if not self.items:
            if self.server is not None:
                self.server._shutdown_request = True
            raise TimeoutError
        item = self.items.pop(0)
        if isinstance(item, BaseException):
            raise item
        data, address = item
        return data[:bufsize], address

    def sendto(self, data, address):
        if self.send_error is not None:
            raise self.send_error
        self.sent.append((data, address))
        return len(data)


@pytest.fixture
def fake_socket_factory():
    """Build :class:`FakeSocket` instances."""
    return FakeSocket
