"""Blocking multicast JSON-RPC server.

Example
-------
::

    from pydantic import BaseModel, Field

    from mcast_rpc import Reply, Server, rpc_method


    class AddArgs(BaseModel):
        a: int = Field(alias="A")
        b: int = Field(alias="B")


    class Math:
        @rpc_method("Add")
        def add(self, args: AddArgs, reply: Reply[int]) -> None:
            reply.value = args.a + args.b


    server = Server()
    server.register(Math(), "Math")
    server.listen_and_serve("239.255.42.42", 8042)
"""

from __future__ import annotations

import logging
import socket
import threading
from typing import Any

from mcast_rpc import logs
from mcast_rpc.config import RpcConfig, get_config
from mcast_rpc.dispatcher import Dispatcher
from mcast_rpc.exceptions import TransportError
from mcast_rpc.registry import MethodRegistry, Service
from mcast_rpc.signals import rpc_server_started, rpc_server_stopped, send_robust
from mcast_rpc.transport import open_multicast_socket

logger = logging.getLogger("mcast_rpc")


class Server:
    """Multicast JSON-RPC server.

    Datagrams are handled one at a time on the thread that calls
    :meth:`serve`: a datagram is decoded, dispatched and answered before the
    next one is read. A method that blocks therefore blocks every client.

    Attributes
    ----------
    config : RpcConfig
        Server configuration, by default the global one.
    registry : MethodRegistry
        Registry of exposed services. Frozen once serving starts.
    dispatcher : Dispatcher
        Pipeline turning request datagrams into responses.
    poll_interval : float
        Seconds between checks for a shutdown request while idle.
    """

    poll_interval: float = 0.5

    def __init__(
        self,
        config: RpcConfig | None = None,
        registry: MethodRegistry | None = None,
    ) -> None:
        self.config = config or get_config()
        self.registry = registry or MethodRegistry()
        self.dispatcher = Dispatcher(self.registry, self.config)
        self._shutdown_request = False
        self._is_shut_down = threading.Event()
        self._is_shut_down.set()

    def register(self, receiver: Any, name: str) -> Service:
        """Expose the conforming methods of ``receiver`` as ``name.Method``.

        Raises
        ------
        RegistrationError
            See :meth:`MethodRegistry.register`.
        """
        return self.registry.register(receiver, name)

    def describe_api(self) -> dict[str, Any]:
        """Describe every exposed method, see :meth:`MethodRegistry.describe`."""
        return self.registry.describe()

    def listen_and_serve(
        self, group: str | None = None, port: int | None = None
    ) -> None:
        """Join the multicast group and serve until :meth:`shutdown`.

        Parameters
        ----------
        group : str | None, optional
            Multicast group, by default ``config.multicast_group``.
        port : int | None, optional
            UDP port, by default ``config.port``.

        Raises
        ------
        TransportError
            If the socket cannot be bound or the group cannot be joined.
        """
        group = self.config.multicast_group if group is None else group
        port = self.config.port if port is None else port
        with open_multicast_socket(group, port, self.config.interface) as sock:
            self.serve(sock)

    def serve(self, sock: socket.socket) -> None:
        """Serve datagrams arriving on an already bound socket.

        The socket is not closed when serving stops.

        Parameters
        ----------
        sock : socket.socket
            Bound UDP socket.

        Raises
        ------
        TransportError
            If the socket is closed while serving.
        """
        self.registry.freeze()
        self._shutdown_request = False
        self._is_shut_down.clear()
        address = sock.getsockname()
        sock.settimeout(self.poll_interval)
        logger.info(logs.SERVER_STARTED, *address)
        try:
            send_robust(
                rpc_server_started, self.__class__, server=self, address=address
            )
            while not self._shutdown_request:
                self._handle_request(sock)
        finally:
            logger.info(logs.SERVER_STOPPED, *address)
            self._is_shut_down.set()
            send_robust(
                rpc_server_stopped, self.__class__, server=self, address=address
            )

    def shutdown(self) -> None:
        """Stop the receive loop and wait for it to exit.

        Must be called from another thread than the one running
        :meth:`serve`, otherwise it deadlocks.
        """
        self._shutdown_request = True
        self._is_shut_down.wait()

    def _handle_request(self, sock: socket.socket) -> None:
        try:
            data, address = sock.recvfrom(self.config.max_datagram_size)
        except TimeoutError:
            return
        except OSError as e:
            if sock.fileno() == -1:
                msg = f"Socket closed while serving: {e}"
                raise TransportError(msg) from e
            logger.warning(logs.RECEIVE_FAILED, e)
            return

        response = self.dispatcher.handle_datagram(data, address)
        if response is None:
            return
        try:
            sock.sendto(response, address)
        except OSError as e:
            logger.warning(logs.SEND_FAILED, address, e)
