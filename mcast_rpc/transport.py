"""UDP multicast sockets.

Servers bind the group port and join the group; clients only need a plain
UDP socket with a multicast TTL. Both helpers close the socket on every
failure path.
"""

from __future__ import annotations

import contextlib
import socket
import struct
from collections.abc import Iterator

from mcast_rpc.exceptions import TransportError


def create_multicast_socket(
    group: str, port: int, interface: str = "0.0.0.0"  # noqa: S104
) -> socket.socket:
    """Open a UDP socket bound to ``port`` and joined to ``group``.

    Parameters
    ----------
    group : str
        IPv4 multicast group address.
    port : int
        UDP port to bind.
    interface : str, optional
        Local interface address used for the membership, by default any.

    Returns
    -------
    socket.socket
        The bound socket. The caller owns it and must close it.

    Raises
    ------
    TransportError
        If the address is invalid, or the bind or group join fails.
    """
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM, socket.IPPROTO_UDP)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind(("", port))
        membership = struct.pack(
            "4s4s", socket.inet_aton(group), socket.inet_aton(interface)
        )
        sock.setsockopt(socket.IPPROTO_IP, socket.IP_ADD_MEMBERSHIP, membership)
    except OSError as e:
        sock.close()
        msg = f"Cannot listen on multicast group {group}:{port}: {e}"
        raise TransportError(msg) from e
    return sock


@contextlib.contextmanager
def open_multicast_socket(
    group: str, port: int, interface: str = "0.0.0.0"  # noqa: S104
) -> Iterator[socket.socket]:
    """Context manager around :func:`create_multicast_socket`.

    The socket is closed when the block exits, whichever way it exits.
    """
    sock = create_multicast_socket(group, port, interface)
    try:
        yield sock
    finally:
        sock.close()


def create_client_socket(ttl: int = 1, timeout: float | None = None) -> socket.socket:
    """Open a UDP socket for sending requests to a multicast group.

    Parameters
    ----------
    ttl : int, optional
        Multicast time-to-live, by default 1 (local network).
    timeout : float | None, optional
        Receive timeout in seconds.

    Returns
    -------
    socket.socket
        The socket. The caller owns it and must close it.

    Raises
    ------
    TransportError
        If the socket cannot be configured.
    """
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM, socket.IPPROTO_UDP)
    try:
        sock.setsockopt(socket.IPPROTO_IP, socket.IP_MULTICAST_TTL, ttl)
        sock.settimeout(timeout)
    except OSError as e:
        sock.close()
        msg = f"Cannot configure client socket: {e}"
        raise TransportError(msg) from e
    return sock
