"""Multicast JSON-RPC client.

A request goes to the multicast group; every server hosting the method
answers unicast. :meth:`MulticastClient.call` returns the first answer,
:meth:`MulticastClient.collect` waits for the timeout and returns all of
them.

Responses are matched on the request id. A server that could not decode a
request answers with id 0, so such answers are never matched and the call
times out.
"""

from __future__ import annotations

import itertools
import logging
import time
from collections.abc import Iterator
from typing import Any

from pydantic_core import to_jsonable_python

from mcast_rpc import logs
from mcast_rpc.codec import (
    OpaquePayload,
    RequestEnvelope,
    ResponseEnvelope,
    decode_response,
    encode_request,
)
from mcast_rpc.config import RpcConfig, get_config
from mcast_rpc.exceptions import (
    ParseError,
    RemoteCallError,
    ResponseTimeoutError,
    TransportError,
)
from mcast_rpc.transport import create_client_socket

logger = logging.getLogger("mcast_rpc")

Address = tuple[str, int]


class MulticastClient:
    """Client sending JSON-RPC requests to a multicast group.

    Parameters
    ----------
    group : str | None, optional
        Destination group, by default ``config.multicast_group``. A unicast
        address works as well.
    port : int | None, optional
        Destination port, by default ``config.port``.
    timeout : float | None, optional
        Seconds to wait for responses, by default ``config.client_timeout``.
    ttl : int | None, optional
        Multicast TTL, by default ``config.multicast_ttl``.
    config : RpcConfig | None, optional
        Configuration, by default the global one.

    Examples
    --------
    >>> with MulticastClient() as client:
    ...     client.call("Math.Add", {"A": 2, "B": 3})
    5
    """

    def __init__(
        self,
        group: str | None = None,
        port: int | None = None,
        *,
        timeout: float | None = None,
        ttl: int | None = None,
        config: RpcConfig | None = None,
    ) -> None:
        self.config = config or get_config()
        self.group = self.config.multicast_group if group is None else group
        self.port = self.config.port if port is None else port
        self.timeout = self.config.client_timeout if timeout is None else timeout
        self._sock = create_client_socket(
            self.config.multicast_ttl if ttl is None else ttl
        )
        self._ids = itertools.count(1)

    def call(self, method: str, params: Any = None) -> Any:
        """Call a method and return the result of the first response.

        Parameters
        ----------
        method : str
            ``Service.Method`` name.
        params : Any, optional
            Parameters; pydantic models and dataclasses are dumped by alias.
            None is sent as an empty object.

        Returns
        -------
        Any
            The JSON ``result`` of the first matching response.

        Raises
        ------
        RemoteCallError
            If the first matching response carries an error.
        ResponseTimeoutError
            If no matching response arrives in time.
        TransportError
            If the request cannot be sent or a receive fails.
        """
        rpc_id = self._send(method, params)
        for _, response in self._responses(rpc_id):
            if response.error.is_error:
                raise RemoteCallError(
                    rpc_id, response.error.code, response.error.message
                )
            return response.result
        msg = f"No response to '{method}' (RPC ID #{rpc_id}) within {self.timeout}s"
        raise ResponseTimeoutError(msg)

    def collect(
        self, method: str, params: Any = None
    ) -> list[tuple[Address, ResponseEnvelope]]:
        """Call a method and gather every response received before the timeout.

        Returns
        -------
        list[tuple[tuple[str, int], ResponseEnvelope]]
            ``(server address, response)`` pairs in arrival order, errors
            included.
        """
        rpc_id = self._send(method, params)
        return list(self._responses(rpc_id))

    def close(self) -> None:
        self._sock.close()

    def __enter__(self) -> MulticastClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _send(self, method: str, params: Any) -> int:
        rpc_id = next(self._ids)
        payload = OpaquePayload(
            {} if params is None else to_jsonable_python(params, by_alias=True)
        )
        request = RequestEnvelope(method=method, id=rpc_id, params=payload)
        data = encode_request(request)
        try:
            self._sock.sendto(data, (self.group, self.port))
        except OSError as e:
            msg = f"Cannot send request to {self.group}:{self.port}: {e}"
            raise TransportError(msg) from e
        logger.debug(logs.REQUEST_SENT, rpc_id, method, self.group, self.port)
        return rpc_id

    def _responses(self, rpc_id: int) -> Iterator[tuple[Address, ResponseEnvelope]]:
        deadline = time.monotonic() + self.timeout
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return
            self._sock.settimeout(remaining)
            try:
                data, address = self._sock.recvfrom(self.config.max_datagram_size)
            except TimeoutError:
                return
            except OSError as e:
                msg = f"Cannot receive response: {e}"
                raise TransportError(msg) from e

            try:
                response = decode_response(data)
            except ParseError as e:
                logger.debug(logs.RESPONSE_MALFORMED, address, e)
                continue
            if response.id != rpc_id:
                logger.debug(logs.RESPONSE_UNMATCHED, response.id, address)
                continue
            yield address, response
