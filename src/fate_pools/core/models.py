"""Transport-neutral descriptions of read-only Move calls.

A ``MoveCall`` names a view function and its arguments without saying how
they reach the chain.  The Sui client turns it into BCS bytes and a
``devInspect`` request; in-memory fakes answer it directly.
"""

from dataclasses import dataclass
from typing import Any

PURE_SHAPES = frozenset({"u32", "u64", "bool", "address"})
_TARGET_PARTS = 3


@dataclass(frozen=True)
class PureArg:
    """A typed scalar argument passed by value to a Move function.

    Args:
        shape: Scalar shape name, one of ``PURE_SHAPES``.
        value: Python value of the argument.

    """

    shape: str
    value: Any

    def __post_init__(self) -> None:
        """Validate the shape name."""
        if self.shape not in PURE_SHAPES:
            msg = f"Unsupported pure argument shape: {self.shape}"
            raise ValueError(msg)

    @classmethod
    def u32(cls, value: int) -> "PureArg":
        """Build a ``u32`` argument."""
        return cls("u32", value)

    @classmethod
    def u64(cls, value: int) -> "PureArg":
        """Build a ``u64`` argument."""
        return cls("u64", value)

    @classmethod
    def address(cls, value: str) -> "PureArg":
        """Build an ``address`` argument."""
        return cls("address", value)


@dataclass(frozen=True)
class MoveCall:
    """A single read-only Move function invocation.

    Object arguments are passed first, in order, followed by the pure
    arguments, matching how every Fate view function is declared
    (``registry``/``pool`` object first, then scalars).

    Args:
        target: Fully qualified function, ``<package>::<module>::<function>``.
        objects: Object ids passed by reference.
        pure: Scalar arguments passed by value.
        expected_returns: Minimum number of return values the caller needs.

    """

    target: str
    objects: tuple[str, ...] = ()
    pure: tuple[PureArg, ...] = ()
    expected_returns: int = 1

    def __post_init__(self) -> None:
        """Validate the target format."""
        if len(self.target.split("::")) != _TARGET_PARTS:
            msg = f"Move call target must be package::module::function, got {self.target!r}"
            raise ValueError(msg)

    @property
    def package(self) -> str:
        """Return the package id of the target."""
        return self.target.split("::")[0]

    @property
    def module(self) -> str:
        """Return the module name of the target."""
        return self.target.split("::")[1]

    @property
    def function(self) -> str:
        """Return the function name of the target."""
        return self.target.split("::")[2]


def move_target(package_id: str, module: str, function: str) -> str:
    """Join a package id, module and function into a call target."""
    return f"{package_id}::{module}::{function}"
