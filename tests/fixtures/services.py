"""Receiver classes registered by the test suite."""

from __future__ import annotations

import math
from dataclasses import dataclass

from pydantic import BaseModel, Field

from mcast_rpc import Reply, rpc_method


class AddArgs(BaseModel):
    a: int = Field(alias="A")
    b: int = Field(alias="B")


@dataclass
class DivideArgs:
    numerator: float
    denominator: float


class TranslateArgs(BaseModel):
    x: int
    y: int
    dx: int = 0
    dy: int = 0


class Point(BaseModel):
    x: int
    y: int


class MathService:
    """Arithmetic used by the end-to-end scenarios."""

    @rpc_method("Add")
    def add(self, args: AddArgs, reply: Reply[int]) -> None:
        """Add two integers."""
        reply.value = args.a + args.b

    @rpc_method("Divide")
    def divide(
        self, args: DivideArgs, reply: Reply[float]
    ) -> ZeroDivisionError | None:
        if args.denominator == 0:
            return ZeroDivisionError("division by zero")
        reply.value = args.numerator / args.denominator
        return None

    @rpc_method("Sqrt")
    def sqrt(self, args: float, reply: Reply[float]) -> None:
        if args < 0:
            msg = "square root of a negative number"
            raise ValueError(msg)
        reply.value = math.sqrt(args)

    # Not exposed: wrong arity
    def helper(self, value):
        return value

    # Not exposed: second parameter is not a reply slot
    def scale(self, args: int, factor: int) -> None:
        pass

    # Not exposed: returns a value instead of an error
    def total(self, args: list[int], reply: Reply[int]) -> int:
        return sum(args)

    # Not exposed: private
    def _private(self, args: int, reply: Reply[int]) -> None:
        reply.value = args

    # Not exposed: static
    @staticmethod
    def static(args: int, reply: Reply[int]) -> None:
        reply.value = args


class AdvancedMathService(MathService):
    @rpc_method("Pow")
    def pow(self, args: list[int], reply: Reply[int]) -> None:
        base, exponent = args
        reply.value = base**exponent


class GeometryService:
    def translate(self, args: TranslateArgs, reply: Reply[Point]) -> None:
        reply.value = Point(x=args.x + args.dx, y=args.y + args.dy)


class EchoService:
    def echo(self, args, reply: Reply) -> None:
        reply.value = args

    def bogus(self, args, reply: Reply):
        return "not an exception"

    def unserializable(self, args, reply: Reply) -> None:
        reply.value = object()

    def fresh(self, args, reply: Reply[int]) -> None:
        if reply.value is not None:
            msg = "reply slot reused"
            raise RuntimeError(msg)
        reply.value = 1


class NoMethodsService:
    def helper(self):
        return None

    def _hidden(self, args: int, reply: Reply[int]) -> None:
        reply.value = args


class DuplicateNameService:
    @rpc_method("Run")
    def run(self, args, reply: Reply) -> None:
        pass

    @rpc_method("Run")
    def run_again(self, args, reply: Reply) -> None:
        pass


class CyclicService:
    def loop(self, args, reply: Reply) -> None:
        value: list = []
        value.append(value)
        reply.value = value
