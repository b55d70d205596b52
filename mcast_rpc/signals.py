"""Django signals for RPC lifecycle events.

This module provides signals that are emitted at various points in the
datagram handling lifecycle. These signals enable monitoring, logging and
metrics collection without modifying the dispatch pipeline.

Signals
-------
rpc_method_started
    Sent right before a registered method is invoked.
rpc_method_completed
    Sent when a registered method completes successfully.
rpc_method_failed
    Sent when a registered method returns or raises an error.
rpc_server_started
    Sent when a server has joined the group and starts reading datagrams.
rpc_server_stopped
    Sent when a server leaves its receive loop.

Examples
--------
Count failures per method::

    from collections import Counter
    from mcast_rpc.signals import rpc_method_failed

    failures = Counter()

    def on_failure(sender, method_name, **kwargs):
        failures[method_name] += 1

    rpc_method_failed.connect(on_failure)

Notes
-----
Signals are sent synchronously on the receive loop. Keep signal handlers
lightweight: a slow handler delays every client.
"""

from __future__ import annotations

import logging
from typing import Any

from django.dispatch import Signal

from mcast_rpc import logs

logger = logging.getLogger("mcast_rpc")

rpc_method_started = Signal()
"""Sent right before a registered method is invoked.

Arguments:
    sender: The dispatcher class
    dispatcher: The dispatcher instance
    method_name (str): Fully qualified ``Service.Method`` name
    params: Decoded argument value
    rpc_id (int): Request ID
    address (tuple | None): Source address of the datagram
"""

rpc_method_completed = Signal()
"""Sent when a registered method completes successfully.

Arguments:
    sender: The dispatcher class
    dispatcher: The dispatcher instance
    method_name (str): Fully qualified ``Service.Method`` name
    result: Value left in the reply slot
    rpc_id (int): Request ID
    address (tuple | None): Source address of the datagram
    duration (float): Execution time in seconds
"""

rpc_method_failed = Signal()
"""Sent when a registered method returns or raises an error.

Arguments:
    sender: The dispatcher class
    dispatcher: The dispatcher instance
    method_name (str): Fully qualified ``Service.Method`` name
    error (BaseException): The error reported by the method
    rpc_id (int): Request ID
    address (tuple | None): Source address of the datagram
    duration (float): Time before failure in seconds
"""

rpc_server_started = Signal()
"""Sent when a server starts reading datagrams.

Arguments:
    sender: The server class
    server: The server instance
    address (tuple): Local ``(host, port)`` the socket is bound to
"""

rpc_server_stopped = Signal()
"""Sent when a server leaves its receive loop.

Arguments:
    sender: The server class
    server: The server instance
    address (tuple): Local ``(host, port)`` the socket was bound to
"""


def send_robust(signal: Signal, sender: Any, **kwargs: Any) -> None:
    """Send a signal, logging receivers that raise instead of propagating."""
    for receiver, response in signal.send_robust(sender=sender, **kwargs):
        if isinstance(response, Exception):
            logger.error(logs.SIGNAL_HANDLER_FAILED, receiver, response)


__all__ = [
    "rpc_method_completed",
    "rpc_method_failed",
    "rpc_method_started",
    "rpc_server_started",
    "rpc_server_stopped",
    "send_robust",
]
