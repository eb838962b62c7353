"""
AccessScope -- role-based visibility of contracts, drafts and LTAs.

Responsibility:
    Turns a ``UserIdentity`` into an ``AccessScope`` value describing which
    rows the user may see.  The scope is plain data: it can be inspected,
    logged and tested without a database.  ContractSelector translates it
    into SQL criteria; the ``permits_*`` methods evaluate the very same
    rules in memory.

Rules (conjunctive, roles are non-exclusive):
    - ADMIN: everything is visible.
    - Anyone else: rows in the user's country only.
    - GOVERNMENT: contracts and drafts must be on the government's behalf.
      LTAs are not narrowed by this rule.
    - ISP: contracts and drafts must belong to the ISP named like the user;
      LTAs must include such an ISP.

Architecture position:
    Kernel > Domain -- pure, zero I/O.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from uuid import UUID

from contract_kernel.domain.roles import Role, UserIdentity, has_any_role


@dataclass(frozen=True)
class AccessScope:
    """
    Visibility restrictions for one user.

    ``unrestricted`` short-circuits every other field.  ``country_id`` is
    compared even when None, so a non-admin user without a country sees
    nothing.
    """

    unrestricted: bool
    country_id: UUID | None = None
    government_behalf_only: bool = False
    isp_name: str | None = None

    @classmethod
    def everything(cls) -> AccessScope:
        return cls(unrestricted=True)

    def permits_contract(
        self,
        country_id: UUID | None,
        government_behalf: bool,
        isp_name: str | None,
    ) -> bool:
        if self.unrestricted:
            return True
        if country_id is None or country_id != self.country_id:
            return False
        if self.government_behalf_only and not government_behalf:
            return False
        if self.isp_name is not None and isp_name != self.isp_name:
            return False
        return True

    # Drafts follow exactly the same rules as contracts.
    permits_draft = permits_contract

    def permits_lta(self, country_id: UUID | None, isp_names: Iterable[str]) -> bool:
        if self.unrestricted:
            return True
        if country_id is None or country_id != self.country_id:
            return False
        if self.isp_name is not None and self.isp_name not in set(isp_names):
            return False
        return True

    def describe(self) -> dict[str, object]:
        """Loggable summary of the restrictions in force."""
        return {
            "unrestricted": self.unrestricted,
            "country_id": self.country_id,
            "government_behalf_only": self.government_behalf_only,
            "isp_name": self.isp_name,
        }


def resolve_scope(user: UserIdentity) -> AccessScope:
    """Compute the visibility scope for ``user``."""
    if has_any_role(user, [Role.ADMIN]):
        return AccessScope.everything()

    return AccessScope(
        unrestricted=False,
        country_id=user.country_id,
        government_behalf_only=has_any_role(user, [Role.GOVERNMENT]),
        isp_name=user.name if has_any_role(user, [Role.ISP]) else None,
    )
