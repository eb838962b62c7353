"""Kernel services -- the lifecycle write paths and the read views."""

from contract_kernel.services.attachment_links import AttachmentLinkService
from contract_kernel.services.base import (
    LifecycleResult,
    LifecycleStatus,
    TransactionalService,
)
from contract_kernel.services.contract_creation import ContractCreationOrchestrator
from contract_kernel.services.contract_views import ContractViewService
from contract_kernel.services.status_transition_engine import StatusTransitionEngine

__all__ = [
    "AttachmentLinkService",
    "ContractCreationOrchestrator",
    "ContractViewService",
    "LifecycleResult",
    "LifecycleStatus",
    "StatusTransitionEngine",
    "TransactionalService",
]
