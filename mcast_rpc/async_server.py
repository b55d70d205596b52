"""Asyncio multicast JSON-RPC server.

:class:`AsyncServer` shares registration and dispatch with
:class:`~mcast_rpc.server.Server` but reads datagrams through an asyncio
datagram endpoint, so it can run next to other coroutines. Dispatch still
happens synchronously inside :meth:`MulticastProtocol.datagram_received`:
datagrams are handled strictly one after the other, and a method that blocks
stalls the event loop.
"""

from __future__ import annotations

import asyncio
import logging
import socket
from typing import Any

from mcast_rpc import logs
from mcast_rpc.dispatcher import Dispatcher
from mcast_rpc.exceptions import TransportError
from mcast_rpc.server import Server
from mcast_rpc.signals import rpc_server_started, rpc_server_stopped, send_robust
from mcast_rpc.transport import create_multicast_socket

logger = logging.getLogger("mcast_rpc")


class MulticastProtocol(asyncio.DatagramProtocol):
    """Datagram protocol answering each request through a dispatcher."""

    def __init__(self, dispatcher: Dispatcher, max_datagram_size: int) -> None:
        self.dispatcher = dispatcher
        self.max_datagram_size = max_datagram_size
        self.transport: asyncio.DatagramTransport | None = None

    def connection_made(self, transport: asyncio.BaseTransport) -> None:
        self.transport = transport  # type: ignore[assignment]

    def datagram_received(self, data: bytes, addr: tuple[str, int]) -> None:
        response = self.dispatcher.handle_datagram(
            data[: self.max_datagram_size], addr
        )
        if response is not None and self.transport is not None:
            self.transport.sendto(response, addr)

    def error_received(self, exc: Exception) -> None:
        # asyncio reports failed sends and receives here
        logger.warning(logs.RECEIVE_FAILED, exc)


class AsyncServer(Server):
    """Multicast JSON-RPC server running on an asyncio event loop.

    Examples
    --------
    >>> server = AsyncServer()
    >>> server.register(Math(), "Math")
    >>> asyncio.run(server.serve_forever())
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._transport: asyncio.DatagramTransport | None = None
        self._stopped: asyncio.Event | None = None
        self._address: tuple[str, int] | None = None

    @property
    def address(self) -> tuple[str, int] | None:
        """Local address of the socket, or None when not started."""
        return self._address

    async def start(self, sock: socket.socket | None = None) -> None:
        """Start reading datagrams without blocking.

        Parameters
        ----------
        sock : socket.socket | None, optional
            Bound UDP socket to use. By default a socket joined to the
            configured group and port is created. The server owns the
            socket from here on and closes it in :meth:`close`.

        Raises
        ------
        TransportError
            If the socket cannot be created or attached to the event loop.
        """
        self.registry.freeze()
        if sock is None:
            sock = create_multicast_socket(
                self.config.multicast_group, self.config.port, self.config.interface
            )

        loop = asyncio.get_running_loop()
        try:
            transport, _ = await loop.create_datagram_endpoint(
                lambda: MulticastProtocol(
                    self.dispatcher, self.config.max_datagram_size
                ),
                sock=sock,
            )
        except OSError as e:
            sock.close()
            msg = f"Cannot start datagram endpoint: {e}"
            raise TransportError(msg) from e

        self._transport = transport
        self._stopped = asyncio.Event()
        self._address = sock.getsockname()
        logger.info(logs.SERVER_STARTED, *self._address)
        send_robust(
            rpc_server_started, self.__class__, server=self, address=self._address
        )

    async def serve_forever(self, sock: socket.socket | None = None) -> None:
        """Start the server and run until :meth:`shutdown`, then close it."""
        await self.start(sock)
        try:
            await self._stopped.wait()
        finally:
            self.close()

    def shutdown(self) -> None:
        """Ask :meth:`serve_forever` to return. Does not block."""
        if self._stopped is not None:
            self._stopped.set()

    def close(self) -> None:
        """Close the datagram endpoint and its socket."""
        if self._transport is None:
            return
        self._transport.close()
        self._transport = None
        logger.info(logs.SERVER_STOPPED, *self._address)
        send_robust(
            rpc_server_stopped, self.__class__, server=self, address=self._address
        )
