"""Definition of the :class:`Dispatcher` class.

The dispatcher turns one request datagram into one response envelope:

1. decode the envelope (``-32700`` on failure, id unknown so 0),
2. resolve ``Service.Method`` in the registry (``-32601``),
3. validate ``params`` into the method's argument shape (``-32600``),
4. invoke the method with a fresh :class:`~mcast_rpc.protocols.Reply`,
5. put the reply value in ``result``, or the method's error text in
   ``error`` (``-32000``).

Every failure ends the pipeline with an error envelope; nothing raised while
handling a datagram escapes :meth:`Dispatcher.dispatch`, except for a reply
that cannot be serialized, for which no response is produced at all.
"""

from __future__ import annotations

import logging
import time
from typing import Any

from django.dispatch import Signal
from pydantic_core import PydanticSerializationError

from mcast_rpc import logs
from mcast_rpc.codec import (
    ErrorObject,
    RequestEnvelope,
    ResponseEnvelope,
    decode_request,
    encode_response,
)
from mcast_rpc.config import RpcConfig, get_config
from mcast_rpc.exceptions import InvocationError, JsonRpcError, ParseError
from mcast_rpc.protocols import MethodDescriptor, Reply
from mcast_rpc.registry import MethodRegistry
from mcast_rpc.signals import (
    rpc_method_completed,
    rpc_method_failed,
    rpc_method_started,
    send_robust,
)

logger = logging.getLogger("mcast_rpc")

Address = tuple[str, int]

# circular containers raise a plain ValueError, deep nesting a RecursionError
_DUMP_ERRORS = (PydanticSerializationError, ValueError, TypeError, RecursionError)


class Dispatcher:
    """Request dispatch pipeline over a :class:`MethodRegistry`.

    The dispatcher keeps no state between datagrams; it only reads the
    registry, so it can be shared by several servers.

    Attributes
    ----------
    registry : MethodRegistry
        Registry used to resolve method names.
    config : RpcConfig
        Configuration, by default the global one.
    """

    def __init__(
        self, registry: MethodRegistry, config: RpcConfig | None = None
    ) -> None:
        self.registry = registry
        self.config = config or get_config()

    def handle_datagram(
        self, data: bytes, address: Address | None = None
    ) -> bytes | None:
        """Process a datagram and return the encoded response.

        Parameters
        ----------
        data : bytes
            Raw request datagram.
        address : tuple[str, int] | None, optional
            Source address, used for logging and signals.

        Returns
        -------
        bytes | None
            Response datagram, or None when there is nothing to send.
        """
        logger.debug(logs.DATAGRAM_RECEIVED, len(data), address)
        response = self.dispatch(data, address)
        if response is None:
            return None
        return encode_response(response)

    def dispatch(
        self, data: bytes, address: Address | None = None
    ) -> ResponseEnvelope | None:
        """Run the dispatch pipeline on a datagram.

        Parameters
        ----------
        data : bytes
            Raw request datagram.
        address : tuple[str, int] | None, optional
            Source address, used for logging and signals.

        Returns
        -------
        ResponseEnvelope | None
            Response to send back, or None if the reply value could not be
            serialized.
        """
        try:
            request = decode_request(data)
        except ParseError as e:
            logger.info(logs.PARSE_FAILED, address, e)
            return self._error_response(e)

        try:
            descriptor = self.registry.resolve(request.method)
            args = request.params.decode_into(descriptor.argument_shape, request.id)
        except JsonRpcError as e:
            e.rpc_id = request.id
            logger.info(logs.REQUEST_REJECTED, request.id, request.method, e)
            return self._error_response(e)

        return self._invoke(descriptor, request, args, address)

    def _invoke(
        self,
        descriptor: MethodDescriptor,
        request: RequestEnvelope,
        args: Any,
        address: Address | None,
    ) -> ResponseEnvelope | None:
        method_name = descriptor.full_name
        logger.info(logs.RPC_METHOD_CALL_START, method_name, request.id)
        if self.config.log_rpc_params:
            logger.debug(logs.RPC_METHOD_CALL_PARAMS, request.id, request.params.value)

        self._send(
            rpc_method_started,
            method_name=method_name,
            params=args,
            rpc_id=request.id,
            address=address,
        )

        start_time = time.time()
        reply: Reply[Any] = Reply()
        try:
            error = descriptor(args, reply)
        except Exception as e:  # noqa: BLE001
            error = e
        duration = time.time() - start_time

        if error is not None:
            logger.info(logs.RPC_METHOD_CALL_FAILED, request.id, method_name, error)
            self._send(
                rpc_method_failed,
                method_name=method_name,
                error=error,
                rpc_id=request.id,
                address=address,
                duration=duration,
            )
            return self._error_response(InvocationError(request.id, error))

        try:
            result = descriptor.reply_shape.dump_python(reply.value, mode="json")
        except _DUMP_ERRORS as e:
            logger.error(logs.ENCODE_FAILED, request.id, e)
            return None

        logger.debug(logs.RPC_METHOD_CALL_END, request.id, method_name, result)
        self._send(
            rpc_method_completed,
            method_name=method_name,
            result=reply.value,
            rpc_id=request.id,
            address=address,
            duration=duration,
        )
        return ResponseEnvelope(id=request.id, result=result)

    def _send(self, signal: Signal, **kwargs: Any) -> None:
        send_robust(signal, self.__class__, dispatcher=self, **kwargs)

    @staticmethod
    def _error_response(error: JsonRpcError) -> ResponseEnvelope:
        return ResponseEnvelope(
            id=error.rpc_id or 0,
            error=ErrorObject(code=int(error.code), message=error.message),
        )
