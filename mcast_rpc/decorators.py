"""Decorator and signature inspection for exposed methods.

A receiver method is exposed when it follows the calling convention::

    def method(self, args: ArgumentType, reply: Reply[ReplyType]) -> None: ...

The return annotation may also name an exception type (optionally
``| None``): returning an exception instance reports a failure, just like
raising it.
"""

from __future__ import annotations

import inspect
import types
import typing
from collections.abc import Callable
from typing import Any, TypeVar

from mcast_rpc.protocols import Reply

F = TypeVar("F", bound=Callable[..., Any])

RPC_NAME_ATTR = "__rpc_name__"

_POSITIONAL = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
)


class CallingConventionError(TypeError):
    """A function does not follow the exposed-method calling convention."""


def rpc_method(name: str | None = None) -> Callable[[F], F]:
    """Set the wire name of a receiver method.

    Without the decorator a method is exposed under its function name.

    Parameters
    ----------
    name : str, optional
        Method part of the ``Service.Method`` wire name, by default the
        function name.

    Returns
    -------
    Callable
        Decorator returning the function unchanged apart from the name tag.

    Examples
    --------
    >>> class Math:
    ...     @rpc_method("Add")
    ...     def add(self, args: AddArgs, reply: Reply[int]) -> None:
    ...         reply.value = args.a + args.b
    """

    def wrap(func: F) -> F:
        if name is not None and (not name or "." in name):
            msg = f"Invalid RPC method name: {name!r}"
            raise ValueError(msg)
        setattr(func, RPC_NAME_ATTR, name or func.__name__)
        return func

    return wrap


def get_rpc_name(func: Callable[..., Any]) -> str:
    """Return the wire name of a receiver method."""
    return getattr(func, RPC_NAME_ATTR, func.__name__)


def _reply_type(annotation: Any) -> Any:
    if annotation is Reply:
        return Any
    if typing.get_origin(annotation) is Reply:
        return typing.get_args(annotation)[0]
    msg = "second parameter must be annotated as Reply[...]"
    raise CallingConventionError(msg)


def _is_error_like(annotation: Any) -> bool:
    if annotation is type(None):
        return True
    if isinstance(annotation, type):
        return issubclass(annotation, BaseException)
    if typing.get_origin(annotation) in (typing.Union, types.UnionType):
        return all(_is_error_like(arg) for arg in typing.get_args(annotation))
    return False


def inspect_calling_convention(func: Callable[..., Any]) -> tuple[Any, Any]:
    """Check a plain function against the exposed-method calling convention.

    Parameters
    ----------
    func : Callable
        Function defined on a receiver class, ``self`` included.

    Returns
    -------
    tuple[Any, Any]
        The argument type and the reply type. Missing argument annotations
        read as ``Any``.

    Raises
    ------
    CallingConventionError
        If the function does not take exactly ``(self, args, reply)``, the
        reply parameter is not annotated as ``Reply``, or the return
        annotation is not error-like.
    """
    try:
        sig = inspect.signature(func)
    except (TypeError, ValueError) as e:
        msg = f"signature not available: {e}"
        raise CallingConventionError(msg) from e

    params = list(sig.parameters.values())
    if len(params) != 3 or any(p.kind not in _POSITIONAL for p in params):
        msg = f"expected (self, args, reply), got {sig}"
        raise CallingConventionError(msg)

    try:
        hints = typing.get_type_hints(func)
    except (NameError, TypeError) as e:
        msg = f"annotations cannot be resolved: {e}"
        raise CallingConventionError(msg) from e

    _, args_param, reply_param = params
    if reply_param.name not in hints:
        msg = "second parameter must be annotated as Reply[...]"
        raise CallingConventionError(msg)
    reply_type = _reply_type(hints[reply_param.name])

    if "return" in hints and not _is_error_like(hints["return"]):
        msg = f"return annotation {hints['return']!r} is not None or an exception"
        raise CallingConventionError(msg)

    return hints.get(args_param.name, Any), reply_type
