"""
AttachmentLinkService -- detaches an attachment from every contract.

The attachment row itself belongs to the external attachment store; this
service only removes the contract relations so the store can delete the
file and row afterwards.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from contract_kernel.exceptions import AttachmentNotFoundError
from contract_kernel.logging_config import get_logger
from contract_kernel.models.contract import contract_attachments
from contract_kernel.models.reference import Attachment
from contract_kernel.services.base import LifecycleResult, TransactionalService

logger = get_logger("services.attachment_links")

DETACH_FAILED_MESSAGE = "Some dependency failed while detaching attachment"


class AttachmentLinkService(TransactionalService):
    def detach_attachment(self, attachment_id: UUID) -> LifecycleResult[int]:
        """Remove all contract links of an attachment; the value is the count removed."""
        return self._run(
            "detach_attachment",
            DETACH_FAILED_MESSAGE,
            lambda session: self._detach(session, attachment_id),
        )

    def _detach(self, session: Session, attachment_id: UUID) -> int:
        exists = session.execute(
            select(Attachment.id).where(Attachment.id == attachment_id)
        ).scalar_one_or_none()
        if exists is None:
            raise AttachmentNotFoundError(str(attachment_id))

        removed = session.execute(
            delete(contract_attachments).where(
                contract_attachments.c.attachment_id == attachment_id
            )
        ).rowcount

        logger.info(
            "attachment_detached",
            extra={"attachment_id": str(attachment_id), "contracts": removed},
        )
        return removed
