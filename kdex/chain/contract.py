"""Base class for contracts deployed on a Chain."""

from __future__ import annotations

import functools
from collections.abc import Callable
from typing import Any, TypeVar

from kdex.chain.chain import Chain, Context
from kdex.models.events import Event
from kdex.models.types import normalize_address

F = TypeVar("F", bound=Callable[..., Any])


class Contract:
    """A stateful object living at an address on a chain.

    All mutable data must live in `self.state` (a dataclass). The chain
    snapshots and restores `state` when a call fails, so anything stored
    elsewhere on the instance is treated as immutable configuration.
    """

    state: Any

    def __init__(self, chain: Chain, address: str) -> None:
        self.chain = chain
        self.address = normalize_address(address, validate=True)

    def _deploy(self) -> None:
        """Register with the chain once state is initialised."""
        self.chain.register(self)

    def _emit(self, event: Event) -> None:
        self.chain.emit(event)

    @property
    def _as_caller(self) -> Context:
        """Context for calls this contract makes to other contracts."""
        return Context(sender=self.address)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.address})"


def external(method: F) -> F:
    """Mark a contract method as an atomic external entry point."""

    @functools.wraps(method)
    def wrapper(self: Contract, *args: Any, **kwargs: Any) -> Any:
        with self.chain.atomic(f"{type(self).__name__}.{method.__name__}"):
            return method(self, *args, **kwargs)

    return wrapper  # type: ignore[return-value]
