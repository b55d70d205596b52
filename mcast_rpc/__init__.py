"""JSON-RPC 2.0 over UDP multicast.

Clients send a request datagram to a multicast group; every server hosting
the named method answers unicast to the sender.

Public API
----------
Servers:
    - Server: Blocking server owning the multicast socket and receive loop
    - AsyncServer: The same server on an asyncio event loop

Client:
    - MulticastClient: Sends requests and collects responses

Service authors:
    - Reply: Mutable reply slot passed to every exposed method
    - rpc_method: Decorator setting a method's wire name

Building blocks:
    - MethodRegistry: ``Service.Method`` name to method descriptor mapping
    - Dispatcher: Datagram in, response envelope out

Exceptions:
    - JsonRpcError: Base of every per-datagram error
    - JsonRpcErrorCode: Enum of the wire error codes
    - ParseError, MethodNotFoundError, ArgumentShapeError, InvocationError
    - RegistrationError: Raised at startup by ``register``
    - TransportError: Socket failures

Error Codes:
    - JsonRpcErrorCode.PARSE_ERROR (-32700)
    - JsonRpcErrorCode.INVALID_REQUEST (-32600)
    - JsonRpcErrorCode.METHOD_NOT_FOUND (-32601)
    - JsonRpcErrorCode.METHOD_EXECUTION_ERROR (-32000)

Configuration:
    Configure via Django settings::

        MCAST_RPC = {
            'MULTICAST_GROUP': '239.255.42.42',
            'PORT': 8042,
            'MAX_DATAGRAM_SIZE': 8042,
            'LOG_RPC_PARAMS': False,
        }
"""

from mcast_rpc.async_server import AsyncServer
from mcast_rpc.client import MulticastClient
from mcast_rpc.decorators import rpc_method
from mcast_rpc.dispatcher import Dispatcher
from mcast_rpc.exceptions import (
    ArgumentShapeError,
    InvocationError,
    JsonRpcError,
    JsonRpcErrorCode,
    MethodNotFoundError,
    ParseError,
    RegistrationError,
    RemoteCallError,
    ResponseTimeoutError,
    TransportError,
)
from mcast_rpc.protocols import MethodDescriptor, Reply
from mcast_rpc.registry import MethodRegistry
from mcast_rpc.server import Server

__all__ = [
    "ArgumentShapeError",
    "AsyncServer",
    "Dispatcher",
    "InvocationError",
    "JsonRpcError",
    "JsonRpcErrorCode",
    "MethodDescriptor",
    "MethodNotFoundError",
    "MethodRegistry",
    "MulticastClient",
    "ParseError",
    "RegistrationError",
    "RemoteCallError",
    "Reply",
    "ResponseTimeoutError",
    "Server",
    "TransportError",
    "rpc_method",
]
