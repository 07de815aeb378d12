"""Wiring of a complete engine: chain, registry and ILP manager.

`deploy()` builds a fresh, fully connected system. The HTTP service serves
the process-wide instance returned by `get_default_deployment()`.
"""

from __future__ import annotations

import os
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TypeVar

import structlog

from kdex.chain import Chain, Context
from kdex.core.factory import Factory
from kdex.ilp.manager import ILPManager

logger = structlog.get_logger()

T = TypeVar("T")

# Seed for the default deployer identity
DEFAULT_DEPLOYER_SEED = "kdex-deployer"


@dataclass
class Deployment:
    """A chain with its registry and ILP manager deployed.

    The engine is single-threaded: every call that touches contract state
    must go through `call()`, which serializes access.
    """

    chain: Chain
    factory: Factory
    manager: ILPManager
    owner: str
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def call(self, fn: Callable[..., T], *args: object) -> T:
        """Run fn(*args) while holding the deployment lock."""
        with self.lock:
            return fn(*args)


def deploy(owner: str | None = None, chain: Chain | None = None) -> Deployment:
    """Deploy a registry and ILP manager owned by owner and link them.

    The owner becomes the registry's fee_to_setter, the manager's owner and
    its admin (holding every setter role).
    """
    chain = chain or Chain()
    owner = owner or chain.derive_address(DEFAULT_DEPLOYER_SEED)
    as_owner = Context(owner)

    factory = Factory(chain, chain.derive_address(owner, "factory"), fee_to_setter=owner)
    manager = ILPManager(chain, chain.derive_address(owner, "ilp-manager"), factory, owner=owner)
    factory.set_ilp_manager_address(as_owner, manager.address)
    manager.set_ilp_manager_admin(as_owner, owner)

    logger.info(
        "engine_deployed",
        factory=factory.address,
        manager=manager.address,
        owner=as_owner.sender,
    )
    return Deployment(chain=chain, factory=factory, manager=manager, owner=as_owner.sender)


def _create_default_deployment() -> Deployment:
    """Deploy the service's engine, honouring KDEX_OWNER when set."""
    owner = os.environ.get("KDEX_OWNER")
    if owner:
        logger.info("deployer_from_env", owner=owner)
    return deploy(owner=owner or None)


_default_deployment: Deployment | None = None
_default_lock = threading.Lock()


def get_default_deployment() -> Deployment:
    global _default_deployment
    with _default_lock:
        if _default_deployment is None:
            _default_deployment = _create_default_deployment()
        return _default_deployment
