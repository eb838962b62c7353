"""
Typed Exception Hierarchy for the Contract Kernel.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from ContractKernelError:

    ContractKernelError (base)
    |
    +-- NotFoundError
    |   +-- ContractNotFoundError
    |   +-- DraftNotFoundError
    |   +-- AttachmentNotFoundError
    |
    +-- InvalidStatusError
    |
    +-- DependencyFailureError
    |
    +-- ImmutabilityViolationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Code                | When Raised
--------------------|------------------------------------------------------
NOT_FOUND           | Referenced contract, draft or attachment is missing
INVALID_STATUS      | Transition is not exactly current -> next, or the
                    | target is not a known status
FAILED_DEPENDENCY   | Any other failure inside a transactional write
                    | (constraint violation, storage error, bug)
IMMUTABILITY_VIOLATION | UPDATE/DELETE attempted on a status transition row

===============================================================================
HANDLING PATTERNS
===============================================================================

NotFoundError and InvalidStatusError are business outcomes and reach the
caller exactly as raised.  DependencyFailureError is produced once, at the
transaction boundary (services/base.py), and deliberately carries a generic
message.  The underlying exception is chained on ``__cause__`` and logged,
never rendered into the message:

    result = orchestrator.create_contract(payload)
    if result.status is LifecycleStatus.NOT_FOUND:
        return 404, result.error.message
    if result.status is LifecycleStatus.DEPENDENCY_FAILURE:
        return 424, result.error.message

Codes mirror the HTTP statuses an API layer maps them to (404, 400, 424).
"""


class ContractKernelError(Exception):
    """
    Base exception for all contract kernel errors.

    Every subclass carries a ``code`` class attribute for machine-readable
    identification.
    """

    code: str = "CONTRACT_KERNEL_ERROR"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


# Not-found exceptions


class NotFoundError(ContractKernelError):
    """A referenced record does not exist."""

    code: str = "NOT_FOUND"


class ContractNotFoundError(NotFoundError):
    """Contract with given ID was not found."""

    def __init__(self, contract_id: str):
        self.contract_id = contract_id
        super().__init__("Contract not found")


class DraftNotFoundError(NotFoundError):
    """Draft referenced by a contract creation payload was not found."""

    def __init__(self, draft_id: str):
        self.draft_id = draft_id
        super().__init__("Draft not found")


class AttachmentNotFoundError(NotFoundError):
    """Attachment with given ID was not found."""

    def __init__(self, attachment_id: str):
        self.attachment_id = attachment_id
        super().__init__("Attachment not found")


# Lifecycle exceptions


class InvalidStatusError(ContractKernelError):
    """
    Requested status change violates the forward-only sequence.

    ``requested_status`` is the raw value when it is not a member of the
    status enum.  ``current_status`` is None only when raised outside an
    engine that has read the contract.
    """

    code: str = "INVALID_STATUS"

    def __init__(
        self,
        requested_status: object,
        current_status: object | None = None,
    ):
        self.requested_status = requested_status
        self.current_status = current_status
        super().__init__("Invalid status")


class DependencyFailureError(ContractKernelError):
    """
    A multi-step transactional write failed and was rolled back.

    The message never exposes the underlying cause; callers only learn that
    nothing was persisted.
    """

    code: str = "FAILED_DEPENDENCY"

    def __init__(self, operation: str, message: str):
        self.operation = operation
        super().__init__(message)


# Immutability


class ImmutabilityViolationError(ContractKernelError):
    """Attempted to modify or delete an append-only record."""

    code: str = "IMMUTABILITY_VIOLATION"

    def __init__(self, entity_type: str, entity_id: str, reason: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.reason = reason
        super().__init__(f"Cannot modify {entity_type} {entity_id}: {reason}")
