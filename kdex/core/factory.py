"""Pair registry.

Creates pairs at deterministic addresses, maps token pairs to pair
addresses in both orderings, and holds the settings every pair reads at
swap time: the protocol fee recipient, the ILP manager and the per-pair ILP
fee roles.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import structlog

from kdex.chain import Chain, Context, Contract, external
from kdex.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from kdex.constants import ZERO_ADDRESS
from kdex.core.pair import Pair
from kdex.core.permissions import GLOBAL_SCOPE, Permissions, Role
from kdex.errors import IdenticalAddresses, PairExists, PairNotFound, ZeroAddress
from kdex.models.events import PairCreated
from kdex.models.types import normalize_address, sort_tokens

logger = structlog.get_logger()


@dataclass
class FactoryState:
    fee_to: str = ZERO_ADDRESS
    ilp_manager_address: str = ZERO_ADDRESS
    pairs: dict[tuple[str, str], str] = field(default_factory=dict)
    all_pairs: list[str] = field(default_factory=list)
    permissions: Permissions = field(default_factory=Permissions)


class Factory(Contract):
    """Registry of pairs and their shared settings."""

    state: FactoryState

    def __init__(
        self,
        chain: Chain,
        address: str,
        fee_to_setter: str,
        permissions: Permissions | None = None,
        config: EngineConfig = DEFAULT_ENGINE_CONFIG,
    ) -> None:
        super().__init__(chain, address)
        self.config = config
        self.state = FactoryState(permissions=permissions or Permissions())
        self.state.permissions.assign(Role.FEE_TO_SETTER, fee_to_setter)
        self._deploy()

    # --- Views ---

    @property
    def fee_to(self) -> str:
        return self.state.fee_to

    @property
    def fee_to_setter(self) -> str:
        return self.state.permissions.holder(Role.FEE_TO_SETTER)

    @property
    def ilp_manager_address(self) -> str:
        return self.state.ilp_manager_address

    @property
    def permissions(self) -> Permissions:
        return self.state.permissions

    def get_pair(self, token_a: str, token_b: str) -> str:
        key = (normalize_address(token_a), normalize_address(token_b))
        return self.state.pairs.get(key, ZERO_ADDRESS)

    def all_pairs(self, index: int) -> str:
        return self.state.all_pairs[index]

    def all_pairs_length(self) -> int:
        return len(self.state.all_pairs)

    def is_pair(self, address: str) -> bool:
        return normalize_address(address) in self.state.all_pairs

    def pair_at(self, address: str) -> Pair:
        """Deployed pair at address.

        Raises:
            PairNotFound: If address is not a pair created by this registry
        """
        if not self.is_pair(address):
            raise PairNotFound(f"{PairNotFound.reason} ({address})")
        return self.chain.get(address, Pair)

    def is_pair_ilp_fee_admin(self, pair: str, account: str) -> bool:
        return self.state.permissions.has_role(Role.PAIR_ILP_FEE_ADMIN, account, pair)

    def is_pair_ilp_fee_manager(self, pair: str, account: str) -> bool:
        return self.state.permissions.has_role(Role.PAIR_ILP_FEE_MANAGER, account, pair)

    # --- Pair creation ---

    @external
    def create_pair(self, ctx: Context, token_a: str, token_b: str) -> str:
        """Deploy the pair for two tokens and register it.

        Raises:
            IdenticalAddresses: If both tokens are the same
            ZeroAddress: If either token is the zero address
            PairExists: If the pair was already created
        """
        token_a = normalize_address(token_a)
        token_b = normalize_address(token_b)
        if token_a == token_b:
            raise IdenticalAddresses()
        token0, token1 = sort_tokens(token_a, token_b)
        if token0 == ZERO_ADDRESS:
            raise ZeroAddress()
        if self.get_pair(token0, token1) != ZERO_ADDRESS:
            raise PairExists()

        address = self.chain.derive_address(self.address, token0, token1)
        Pair(self.chain, address, self, token0, token1, self.config)

        self.state.pairs[(token0, token1)] = address
        self.state.pairs[(token1, token0)] = address
        self.state.all_pairs.append(address)
        self._emit(
            PairCreated(
                emitter=self.address,
                token0=token0,
                token1=token1,
                pair=address,
                pair_count=len(self.state.all_pairs),
            )
        )
        logger.info(
            "pair_created",
            pair=address,
            token0=token0,
            token1=token1,
            pair_count=len(self.state.all_pairs),
        )
        return address

    # --- Settings ---

    @external
    def set_fee_to(self, ctx: Context, fee_to: str) -> None:
        self._require_fee_to_setter(ctx)
        self.state.fee_to = normalize_address(fee_to)
        logger.info("fee_to_set", fee_to=self.state.fee_to)

    @external
    def set_fee_to_setter(self, ctx: Context, fee_to_setter: str) -> None:
        self._require_fee_to_setter(ctx)
        self.state.permissions.assign(Role.FEE_TO_SETTER, fee_to_setter)
        logger.info("fee_to_setter_set", fee_to_setter=normalize_address(fee_to_setter))

    @external
    def set_ilp_manager_address(self, ctx: Context, manager: str) -> None:
        self._require_fee_to_setter(ctx)
        self.state.ilp_manager_address = normalize_address(manager)
        logger.info("ilp_manager_set", manager=self.state.ilp_manager_address)

    @external
    def set_pair_ilp_fee_admin(self, ctx: Context, pair: str, account: str) -> None:
        """Make account the ILP fee admin (status toggle) of a pair."""
        self._require_fee_to_setter(ctx)
        self.pair_at(pair)
        self.state.permissions.assign(Role.PAIR_ILP_FEE_ADMIN, account, pair)
        logger.info(
            "pair_ilp_fee_admin_set",
            pair=normalize_address(pair),
            account=normalize_address(account),
        )

    @external
    def set_pair_ilp_fee_manager(self, ctx: Context, pair: str, account: str) -> None:
        """Make account the ILP fee manager (rate setter) of a pair."""
        self._require_fee_to_setter(ctx)
        self.pair_at(pair)
        self.state.permissions.assign(Role.PAIR_ILP_FEE_MANAGER, account, pair)
        logger.info(
            "pair_ilp_fee_manager_set",
            pair=normalize_address(pair),
            account=normalize_address(account),
        )

    def _require_fee_to_setter(self, ctx: Context) -> None:
        self.state.permissions.require(Role.FEE_TO_SETTER, ctx.sender, GLOBAL_SCOPE)
