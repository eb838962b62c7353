"""
Roles and user identity.

Responsibility:
    A closed set of roles and the single capability check
    ``has_any_role``.  Role names arriving from the identity source are
    mapped onto ``Role`` once, at the boundary (``roles_from_names``), so
    nothing downstream compares raw strings.

Architecture position:
    Kernel > Domain -- pure, zero I/O.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from uuid import UUID


class Role(str, Enum):
    """Roles that influence contract visibility."""

    ADMIN = "admin"
    GOVERNMENT = "government"
    ISP = "isp"


# Names used by the identity source when no configuration overrides them.
DEFAULT_ROLE_NAMES: dict[str, Role] = {
    "Admin": Role.ADMIN,
    "Government": Role.GOVERNMENT,
    "ISP": Role.ISP,
}


@dataclass(frozen=True)
class UserIdentity:
    """The acting user as supplied by the identity collaborator."""

    id: UUID
    name: str
    country_id: UUID | None
    roles: frozenset[Role] = field(default_factory=frozenset)


def roles_from_names(
    names: Iterable[str],
    role_names: Mapping[str, Role] | None = None,
) -> frozenset[Role]:
    """Map external role names to ``Role`` members; unknown names are ignored."""
    mapping = DEFAULT_ROLE_NAMES if role_names is None else role_names
    return frozenset(mapping[name] for name in names if name in mapping)


def has_any_role(user: UserIdentity, roles: Iterable[Role]) -> bool:
    return any(role in user.roles for role in roles)
