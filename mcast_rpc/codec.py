"""Envelope codec for the multicast JSON-RPC wire format.

A request datagram holds a single JSON object::

    {"jsonrpc": "2.0", "id": 1, "method": "Math.Add", "params": {"A": 2, "B": 3}}

and every response carries both ``result`` and ``error``::

    {"jsonrpc": "2.0", "id": 1, "result": 5, "error": {"code": 0, "message": ""}}

A zero error code means success. ``params`` stays an :class:`OpaquePayload`
until the dispatcher knows which argument shape to validate it against.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any

from pydantic import TypeAdapter, ValidationError

from mcast_rpc import logs
from mcast_rpc.exceptions import ArgumentShapeError, ParseError

logger = logging.getLogger("mcast_rpc")

JSONRPC_VERSION = "2.0"


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def summarize_validation_error(exc: ValidationError) -> str:
    """Render a pydantic validation error on one line.

    Parameters
    ----------
    exc : ValidationError
        Error raised while validating params.

    Returns
    -------
    str
        ``loc: msg`` pairs joined with ``"; "``.
    """
    parts = []
    for error in exc.errors():
        loc = ".".join(str(part) for part in error["loc"])
        parts.append(f"{loc}: {error['msg']}" if loc else error["msg"])
    return "; ".join(parts)


@dataclass(frozen=True)
class OpaquePayload:
    """Request params kept as parsed until the target shape is known.

    Attributes
    ----------
    value : Any
        The JSON value of the ``params`` member.
    missing : bool
        True when the request had no ``params`` member at all.
    """

    value: Any = None
    missing: bool = False

    def decode_into(self, shape: TypeAdapter[Any], rpc_id: int | None = None) -> Any:
        """Validate the payload into a concrete argument value.

        Parameters
        ----------
        shape : TypeAdapter
            Argument shape of the resolved method.
        rpc_id : int | None, optional
            Request ID for error reporting.

        Returns
        -------
        Any
            The validated argument.

        Raises
        ------
        ArgumentShapeError
            If params are missing or do not fit the shape.
        """
        if self.missing:
            raise ArgumentShapeError(rpc_id, message="missing params")
        try:
            return shape.validate_python(self.value)
        except ValidationError as e:
            raise ArgumentShapeError(
                rpc_id, message=summarize_validation_error(e)
            ) from e


@dataclass
class ErrorObject:
    """Error member of a response; a zero ``code`` means no error."""

    code: int = 0
    message: str = ""

    @property
    def is_error(self) -> bool:
        return self.code != 0


@dataclass
class RequestEnvelope:
    """Decoded request datagram."""

    method: str
    id: int = 0
    params: OpaquePayload = field(
        default_factory=lambda: OpaquePayload(missing=True)
    )
    jsonrpc: str = JSONRPC_VERSION


@dataclass
class ResponseEnvelope:
    """Response datagram.

    ``result`` must already be JSON-compatible.
    """

    id: int = 0
    result: Any = None
    error: ErrorObject = field(default_factory=ErrorObject)
    jsonrpc: str = JSONRPC_VERSION

    def as_dict(self) -> dict[str, Any]:
        return {
            "jsonrpc": self.jsonrpc,
            "id": self.id,
            "result": self.result,
            "error": {"code": self.error.code, "message": self.error.message},
        }


def _loads_object(data: bytes | str) -> dict[str, Any]:
    try:
        message = json.loads(data)
    except (ValueError, RecursionError) as e:
        # JSONDecodeError, UnicodeDecodeError and nesting too deep to parse
        raise ParseError(str(e)) from e
    if not isinstance(message, dict):
        msg = f"expected a JSON object, got {type(message).__name__}"
        raise ParseError(msg)
    if message.get("jsonrpc") != JSONRPC_VERSION:
        logger.warning(logs.INVALID_JSON_RPC_VERSION, message.get("jsonrpc"))
        msg = f"invalid JSON-RPC version {message.get('jsonrpc')!r}, expected '2.0'"
        raise ParseError(msg)
    return message


def _read_id(message: dict[str, Any]) -> int:
    rpc_id = message.get("id")
    if rpc_id is None:
        return 0
    if not _is_int(rpc_id):
        msg = f"'id' must be an integer, got {type(rpc_id).__name__}"
        raise ParseError(msg)
    return rpc_id


def decode_request(data: bytes | str) -> RequestEnvelope:
    """Decode a request datagram.

    Unknown members are ignored; ``params`` is not validated.

    Parameters
    ----------
    data : bytes | str
        Raw datagram.

    Returns
    -------
    RequestEnvelope
        The decoded request.

    Raises
    ------
    ParseError
        If the datagram is not a JSON object, has the wrong protocol
        version, a non-integer id, or no string ``method``.
    """
    message = _loads_object(data)
    rpc_id = _read_id(message)

    method = message.get("method")
    if method is None:
        msg = "missing required 'method' field"
        raise ParseError(msg)
    if not isinstance(method, str):
        msg = f"'method' must be a string, got {type(method).__name__}"
        raise ParseError(msg)

    if "params" in message:
        params = OpaquePayload(message["params"])
    else:
        params = OpaquePayload(missing=True)

    return RequestEnvelope(method=method, id=rpc_id, params=params)


def encode_response(response: ResponseEnvelope) -> bytes | None:
    """Encode a response envelope into compact JSON.

    Encoding never raises: a response that cannot be serialized is logged
    and None is returned, since the failure cannot be reported to the client.

    Parameters
    ----------
    response : ResponseEnvelope
        Response to encode.

    Returns
    -------
    bytes | None
        UTF-8 JSON, or None if the response is not serializable.
    """
    try:
        return json.dumps(
            response.as_dict(), separators=(",", ":"), allow_nan=False
        ).encode()
    except (TypeError, ValueError, RecursionError) as e:
        logger.error(logs.ENCODE_FAILED, response.id, e)
        return None


def create_request(rpc_id: int, method: str, params: Any = None) -> dict[str, Any]:
    """Create a JSON-RPC 2.0 request message.

    Parameters
    ----------
    rpc_id : int
        Request identifier.
    method : str
        ``Service.Method`` name to call.
    params : Any
        JSON-compatible parameters.

    Returns
    -------
    dict[str, Any]
        JSON-RPC 2.0 request message.
    """
    return {
        "jsonrpc": JSONRPC_VERSION,
        "id": rpc_id,
        "method": method,
        "params": params,
    }


def encode_request(request: RequestEnvelope) -> bytes:
    """Encode a request envelope into compact JSON."""
    message = create_request(request.id, request.method, request.params.value)
    if request.params.missing:
        del message["params"]
    return json.dumps(message, separators=(",", ":")).encode()


def decode_response(data: bytes | str) -> ResponseEnvelope:
    """Decode a response datagram.

    A missing or null ``error`` member reads as the zero error.

    Raises
    ------
    ParseError
        If the datagram is not a well-formed response envelope.
    """
    message = _loads_object(data)
    rpc_id = _read_id(message)

    error = message.get("error") or {}
    if not isinstance(error, dict):
        msg = f"'error' must be an object, got {type(error).__name__}"
        raise ParseError(msg)
    code = error.get("code", 0)
    text = error.get("message", "")
    if not _is_int(code) or not isinstance(text, str):
        msg = "'error' must hold an integer code and a string message"
        raise ParseError(msg)

    return ResponseEnvelope(
        id=rpc_id,
        result=message.get("result"),
        error=ErrorObject(code=code, message=text),
    )
