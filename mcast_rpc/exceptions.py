"""Exceptions for the mcast-rpc package."""

from __future__ import annotations

import json
from enum import IntEnum
from typing import Any


class JsonRpcErrorCode(IntEnum):
    """JSON-RPC 2.0 error codes used on the wire.

    Standard error codes are defined by the JSON-RPC 2.0 specification.
    Server-defined error codes are in the range -32099 to -32000.

    Standard Attributes
    -------------------
    PARSE_ERROR : int
        The datagram is not a valid request envelope (-32700).
    INVALID_REQUEST : int
        The request params do not match the method's argument shape (-32600).
    METHOD_NOT_FOUND : int
        The method does not exist / is not available (-32601).

    Server-Defined Attributes
    -------------------------
    METHOD_EXECUTION_ERROR : int
        The registered method reported a failure (-32000).
    """

    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601

    METHOD_EXECUTION_ERROR = -32000


RPC_ERRORS: dict[int, str] = {
    JsonRpcErrorCode.PARSE_ERROR: "Parse Error",
    JsonRpcErrorCode.INVALID_REQUEST: "Invalid Request",
    JsonRpcErrorCode.METHOD_NOT_FOUND: "Method Not Found",
    JsonRpcErrorCode.METHOD_EXECUTION_ERROR: "Method Execution Error",
}


class JsonRpcError(Exception):
    """General JSON-RPC exception class.

    Every error raised while handling a single datagram derives from this
    class and is turned into an error envelope by the dispatcher.
    """

    code: int = JsonRpcErrorCode.METHOD_EXECUTION_ERROR

    def __init__(
        self, rpc_id: int | None, code: int | None = None, message: str | None = None
    ):
        """Initialize a new :class:`JsonRpcError` instance.

        Parameters
        ----------
        rpc_id : int | None
            Request ID, or None when the request could not be decoded.
        code : int | None, optional
            RPC error code, by default the class-level code.
        message : str | None, optional
            Error message, by default the generic message for the code.
        """
        if code is not None:
            self.code = code
        self.rpc_id = rpc_id
        self.message = message or RPC_ERRORS.get(self.code, "Unknown Error")
        super().__init__(self.message)

    def as_dict(self) -> dict[str, Any]:
        """Return the wire representation of the error object.

        Returns
        -------
        dict[str, Any]
            ``{"code": ..., "message": ...}``.
        """
        return {"code": int(self.code), "message": self.message}

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"{type(self).__name__}({json.dumps(self.as_dict())})"


class ParseError(JsonRpcError):
    """The datagram could not be decoded into a request envelope."""

    code = JsonRpcErrorCode.PARSE_ERROR

    def __init__(self, message: str):
        super().__init__(rpc_id=None, message=message)


class MethodNotFoundError(JsonRpcError):
    """The requested ``Service.Method`` is not registered."""

    code = JsonRpcErrorCode.METHOD_NOT_FOUND

    def __init__(
        self, method: str, message: str | None = None, rpc_id: int | None = None
    ):
        self.method = method
        super().__init__(
            rpc_id=rpc_id, message=message or f"can't find method '{method}'"
        )


class ArgumentShapeError(JsonRpcError):
    """The request params do not fit the method's argument shape."""

    code = JsonRpcErrorCode.INVALID_REQUEST


class InvocationError(JsonRpcError):
    """The registered method returned or raised an error.

    The original exception is kept in ``cause`` and its text is sent back
    verbatim as the error message.
    """

    code = JsonRpcErrorCode.METHOD_EXECUTION_ERROR

    def __init__(self, rpc_id: int | None, cause: BaseException):
        self.cause = cause
        super().__init__(rpc_id=rpc_id, message=str(cause) or type(cause).__name__)


class RemoteCallError(JsonRpcError):
    """A server answered a client call with an error envelope."""

    def __init__(self, rpc_id: int | None, code: int, message: str):
        super().__init__(rpc_id=rpc_id, code=code, message=message)
        # keep the server's text even when it is empty
        self.message = message


class RegistrationError(Exception):
    """A service could not be registered.

    Raised only at startup, before any datagram is served.
    """


class TransportError(Exception):
    """A socket operation failed."""


class ResponseTimeoutError(TransportError):
    """No matching response arrived before the client timeout."""
