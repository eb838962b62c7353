"""
Contract kernel domain layer -- pure functional core.

Everything here is free of I/O (SystemClock aside): statuses, roles, access
scopes, the connectivity classifier, DTOs and the presentation builder.
"""

from contract_kernel.domain.access_scope import AccessScope, resolve_scope
from contract_kernel.domain.connectivity import (
    ConnectivityClass,
    ConnectivityTally,
    ExpectedMetricSpec,
    classify,
)
from contract_kernel.domain.dtos import (
    ContractCreation,
    ContractInfo,
    StatusTransitionInfo,
)
from contract_kernel.domain.presentation import (
    ContractCountView,
    ContractListView,
    build_count_view,
    build_list_view,
    percentage,
)
from contract_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from contract_kernel.domain.roles import Role, UserIdentity, has_any_role, roles_from_names
from contract_kernel.domain.status import ContractStatus, OrderedStatus

__all__ = [
    "AccessScope",
    "resolve_scope",
    "ConnectivityClass",
    "ConnectivityTally",
    "ExpectedMetricSpec",
    "classify",
    "ContractCreation",
    "ContractInfo",
    "StatusTransitionInfo",
    "ContractCountView",
    "ContractListView",
    "build_count_view",
    "build_list_view",
    "percentage",
    "Role",
    "UserIdentity",
    "has_any_role",
    "roles_from_names",
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "ContractStatus",
    "OrderedStatus",
]
