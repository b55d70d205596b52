"""Tests for rpc_method and calling convention inspection."""

from __future__ import annotations

from typing import Any, Optional

import pytest

from mcast_rpc.decorators import (
    CallingConventionError,
    get_rpc_name,
    inspect_calling_convention,
    rpc_method,
)
from mcast_rpc.protocols import Reply
from tests.fixtures.services import AddArgs


def conforming(self, args: AddArgs, reply: Reply[int]) -> None:
    pass


def bare_reply(self, args, reply: Reply):
    pass


def error_return(self, args: int, reply: Reply[str]) -> ValueError | None:
    pass


def optional_error_return(self, args: int, reply: Reply[str]) -> Optional[KeyError]:
    pass


def too_few(self, args: int) -> None:
    pass


def too_many(self, args: int, reply: Reply[int], extra: int) -> None:
    pass


def keyword_only(self, args: int, *, reply: Reply[int]) -> None:
    pass


def var_args(self, *args: Any) -> None:
    pass


def unannotated_reply(self, args: int, reply) -> None:
    pass


def wrong_reply(self, args: int, reply: list[int]) -> None:
    pass


def value_return(self, args: int, reply: Reply[int]) -> int:
    return 0


def mixed_return(self, args: int, reply: Reply[int]) -> ValueError | int:
    return 0


def unresolvable(self, args: UndefinedArgs, reply: Reply[int]) -> None:  # noqa: F821
    pass


@pytest.mark.unit
class TestRpcMethod:
    """Test the rpc_method decorator."""

    def test_sets_wire_name(self):
        """Should tag the function with the given name."""

        @rpc_method("Add")
        def add(self, args, reply: Reply) -> None:
            pass

        assert get_rpc_name(add) == "Add"
        assert add.__name__ == "add"

    def test_defaults_to_function_name(self):
        """Should fall back to the function name."""

        @rpc_method()
        def add(self, args, reply: Reply) -> None:
            pass

        assert get_rpc_name(add) == "add"

    def test_undecorated(self):
        """Should use the function name for undecorated functions."""
        assert get_rpc_name(conforming) == "conforming"

    @pytest.mark.parametrize("name", ["", "Math.Add"])
    def test_invalid_name(self, name):
        """Should reject empty and dotted names."""
        with pytest.raises(ValueError, match="Invalid RPC method name"):
            rpc_method(name)(conforming)


@pytest.mark.unit
class TestInspectCallingConvention:
    """Test inspect_calling_convention()."""

    def test_conforming(self):
        """Should return argument and reply types."""
        assert inspect_calling_convention(conforming) == (AddArgs, int)

    def test_bare_reply_and_unannotated_argument(self):
        """Should read missing types as Any."""
        assert inspect_calling_convention(bare_reply) == (Any, Any)

    @pytest.mark.parametrize("func", [error_return, optional_error_return])
    def test_error_like_returns(self, func):
        """Should accept exception return annotations."""
        assert inspect_calling_convention(func) == (int, str)

    @pytest.mark.parametrize(
        "func,reason",
        [
            (too_few, "expected \\(self, args, reply\\)"),
            (too_many, "expected \\(self, args, reply\\)"),
            (keyword_only, "expected \\(self, args, reply\\)"),
            (var_args, "expected \\(self, args, reply\\)"),
            (unannotated_reply, "Reply"),
            (wrong_reply, "Reply"),
            (value_return, "not None or an exception"),
            (mixed_return, "not None or an exception"),
            (unresolvable, "annotations cannot be resolved"),
        ],
    )
    def test_non_conforming(self, func, reason):
        """Should explain why a function does not conform."""
        with pytest.raises(CallingConventionError, match=reason):
            inspect_calling_convention(func)

    def test_builtin_without_signature(self):
        """Should not crash on callables without a signature."""
        with pytest.raises(CallingConventionError):
            inspect_calling_convention(dict.fromkeys)
