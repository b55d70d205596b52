"""Shared data structures for the method registry and the dispatcher.

This module holds the reply slot handed to every invocation and the
descriptor the registry records for each exposed method. Keeping them here
avoids circular imports between the registry, the decorators and the
dispatcher.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from pydantic import TypeAdapter

T = TypeVar("T")


class Reply(Generic[T]):
    """Mutable slot a method writes its result into.

    A fresh slot is created for every invocation. Annotate the second
    parameter of an exposed method with ``Reply[T]``; ``T`` is the reply
    shape used to serialize ``value``.

    Examples
    --------
    >>> class Math:
    ...     def add(self, args: AddArgs, reply: Reply[int]) -> None:
    ...         reply.value = args.a + args.b
    """

    __slots__ = ("value",)

    def __init__(self, value: T | None = None) -> None:
        self.value = value

    def __repr__(self) -> str:
        return f"Reply({self.value!r})"


@dataclass(frozen=True)
class MethodDescriptor:
    """Registry record for an exposed method.

    Attributes
    ----------
    service_name : str
        Name the owning receiver was registered under.
    method_name : str
        Method part of the wire name.
    func : Callable
        The plain function defined on the receiver's class.
    receiver : Any
        The registered receiver instance.
    argument_shape : TypeAdapter
        Validator for the ``params`` payload.
    reply_shape : TypeAdapter
        Serializer for the reply slot's value.
    """

    service_name: str
    method_name: str
    func: Callable[..., Any]
    receiver: Any = field(repr=False)
    argument_shape: TypeAdapter[Any] = field(repr=False)
    reply_shape: TypeAdapter[Any] = field(repr=False)

    @property
    def full_name(self) -> str:
        return f"{self.service_name}.{self.method_name}"

    def invoke(
        self, receiver: Any, args: Any, reply: Reply[Any]
    ) -> BaseException | None:
        """Call the method and return the error it reports.

        Exceptions raised by the method propagate to the caller.

        Parameters
        ----------
        receiver : Any
            Instance the method is bound to.
        args : Any
            Argument value already validated against ``argument_shape``.
        reply : Reply
            Slot the method writes its result into.

        Returns
        -------
        BaseException | None
            The exception returned by the method, or None on success.
        """
        error = self.func(receiver, args, reply)
        if error is None or isinstance(error, BaseException):
            return error
        return TypeError(
            f"{self.full_name} returned {type(error).__name__}, "
            "expected an exception or None"
        )

    def __call__(self, args: Any, reply: Reply[Any]) -> BaseException | None:
        """Invoke the method on the registered receiver."""
        return self.invoke(self.receiver, args, reply)

    def describe(self) -> dict[str, Any]:
        """Return a JSON-serializable description of the method."""
        return {
            "name": self.full_name,
            "doc": self.func.__doc__,
            "params": self.argument_shape.json_schema(),
            "result": self.reply_shape.json_schema(),
        }
