"""Role table used for every authorization check.

Roles are held per scope: the registry scopes the per-pair ILP fee roles by
pair address, everything else lives in the global scope. Contracts receive
their table at construction, so tests can inject any assignment they need.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from kdex.constants import ZERO_ADDRESS
from kdex.errors import Forbidden
from kdex.models.types import normalize_address

GLOBAL_SCOPE = "*"


class Role(str, Enum):
    """Capabilities checked by the registry, the pairs and the ILP manager."""

    # Registry
    FEE_TO_SETTER = "fee_to_setter"
    PAIR_ILP_FEE_ADMIN = "pair_ilp_fee_admin"  # scoped by pair
    PAIR_ILP_FEE_MANAGER = "pair_ilp_fee_manager"  # scoped by pair

    # ILP manager
    ILP_MANAGER_OWNER = "ilp_manager_owner"
    UPKEEP_CALLER = "upkeep_caller"
    UPKEEP_CALLER_SETTER = "upkeep_caller_setter"
    TREASURY_SETTER = "treasury_setter"
    THRESHOLD_SETTER = "threshold_setter"
    PROCESSING_FEE_SETTER = "processing_fee_setter"


# Roles granted together by ILPManager.set_ilp_manager_admin
ILP_ADMIN_ROLES = (
    Role.UPKEEP_CALLER_SETTER,
    Role.TREASURY_SETTER,
    Role.THRESHOLD_SETTER,
    Role.PROCESSING_FEE_SETTER,
)


@dataclass
class Permissions:
    """Holders of each (role, scope).

    Most roles have a single holder and are changed with `assign`; `grant`
    adds a holder without displacing the existing ones. The zero address
    never holds a role.
    """

    holders: dict[tuple[Role, str], set[str]] = field(default_factory=dict)

    def assign(self, role: Role, account: str, scope: str = GLOBAL_SCOPE) -> None:
        """Make `account` the only holder of role in scope (zero address clears it)."""
        account = normalize_address(account)
        key = (role, _scope(scope))
        if account == ZERO_ADDRESS:
            self.holders.pop(key, None)
        else:
            self.holders[key] = {account}

    def grant(self, role: Role, account: str, scope: str = GLOBAL_SCOPE) -> None:
        account = normalize_address(account)
        if account == ZERO_ADDRESS:
            return
        self.holders.setdefault((role, _scope(scope)), set()).add(account)

    def revoke(self, role: Role, account: str, scope: str = GLOBAL_SCOPE) -> None:
        key = (role, _scope(scope))
        members = self.holders.get(key)
        if members is None:
            return
        members.discard(normalize_address(account))
        if not members:
            del self.holders[key]

    def has_role(self, role: Role, account: str, scope: str = GLOBAL_SCOPE) -> bool:
        return normalize_address(account) in self.holders.get((role, _scope(scope)), ())

    def holder(self, role: Role, scope: str = GLOBAL_SCOPE) -> str:
        """The single holder of a role, or the zero address when unassigned."""
        members = self.holders.get((role, _scope(scope)))
        if not members:
            return ZERO_ADDRESS
        return min(members)

    def require(
        self,
        role: Role,
        account: str,
        scope: str = GLOBAL_SCOPE,
        error: type[Forbidden] = Forbidden,
        reason: str | None = None,
    ) -> None:
        """Raise `error` unless account holds role in scope."""
        if not self.has_role(role, account, scope):
            raise error(reason)


def _scope(scope: str) -> str:
    return scope if scope == GLOBAL_SCOPE else normalize_address(scope)
