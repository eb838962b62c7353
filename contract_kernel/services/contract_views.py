"""
ContractViewService -- role-scoped read views over contracts and drafts.

Responsibility:
    Resolves the caller's AccessScope, pulls the scoped rows through
    ContractSelector inside a read-only session, and hands them to the pure
    presentation builder.

Architecture position:
    Kernel > Services -- imperative shell, read side.  Never commits.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy.orm import Session, sessionmaker

from contract_kernel.db.engine import get_session_factory, read_scope
from contract_kernel.domain.access_scope import resolve_scope
from contract_kernel.domain.dtos import StatusTransitionInfo
from contract_kernel.domain.presentation import (
    ContractCountView,
    ContractListView,
    build_count_view,
    build_list_view,
)
from contract_kernel.domain.roles import UserIdentity
from contract_kernel.exceptions import ContractNotFoundError
from contract_kernel.logging_config import get_logger
from contract_kernel.selectors.contract_selector import ContractSelector

logger = get_logger("services.contract_views")


class ContractViewService:
    """Read-only list, count and history views."""

    def __init__(self, session_factory: sessionmaker[Session] | None = None):
        self._session_factory = session_factory or get_session_factory()

    def list_view(self, user: UserIdentity) -> ContractListView:
        scope = resolve_scope(user)
        with read_scope(self._session_factory) as session:
            rows = ContractSelector(session, scope).list_rows()

        view = build_list_view(rows)
        logger.debug(
            "list_view_built",
            extra={
                "scope": scope.describe(),
                "contracts": len(rows.contracts),
                "drafts": len(rows.drafts),
                "ltas": len(rows.ltas),
            },
        )
        return view

    def count_view(self, user: UserIdentity | None) -> ContractCountView | None:
        """Counts per status plus drafts; None without a user."""
        if user is None:
            return None

        scope = resolve_scope(user)
        with read_scope(self._session_factory) as session:
            selector = ContractSelector(session, scope)
            status_counts = selector.status_counts()
            draft_count = selector.draft_count()

        return build_count_view(status_counts, draft_count)

    def transition_history(self, contract_id: UUID) -> list[StatusTransitionInfo]:
        """
        The contract's lifecycle ledger, oldest first.

        Raises:
            ContractNotFoundError: No contract with this id.
        """
        with read_scope(self._session_factory) as session:
            selector = ContractSelector(session)
            if not selector.contract_exists(contract_id):
                raise ContractNotFoundError(str(contract_id))
            return selector.transition_history(contract_id)
