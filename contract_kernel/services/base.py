"""
TransactionalService -- base for lifecycle services that own their transaction.

Responsibility:
    Runs one unit of work per call inside ``transaction_scope`` and turns
    its outcome into a ``LifecycleResult``.  This is the single place where
    unexpected failures are normalized to DependencyFailureError.

Architecture position:
    Kernel > Services -- imperative shell.  ContractCreationOrchestrator,
    StatusTransitionEngine and AttachmentLinkService extend this class.

Invariants enforced:
    - Commit happens only when the unit of work returns normally.
    - NotFoundError and InvalidStatusError reach the caller unchanged.
    - Every other exception is logged with its traceback, rolled back, and
      reported as DependencyFailureError with a generic message.  The
      original exception is kept on ``__cause__``.

Failure modes:
    - None escape as exceptions from ``_run``; callers branch on the
      result status or call ``unwrap()``.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

from sqlalchemy.orm import Session, sessionmaker

from contract_kernel.db.engine import get_session_factory, transaction_scope
from contract_kernel.domain.clock import Clock, SystemClock
from contract_kernel.exceptions import (
    ContractKernelError,
    DependencyFailureError,
    InvalidStatusError,
    NotFoundError,
)
from contract_kernel.logging_config import get_logger

logger = get_logger("services.base")

T = TypeVar("T")


class LifecycleStatus(str, Enum):
    """Outcome of a lifecycle operation."""

    SUCCESS = "success"
    NOT_FOUND = "not_found"
    INVALID_STATUS = "invalid_status"
    DEPENDENCY_FAILURE = "dependency_failure"
    SKIPPED = "skipped"


_STATUS_BY_ERROR: tuple[tuple[type[ContractKernelError], LifecycleStatus], ...] = (
    (NotFoundError, LifecycleStatus.NOT_FOUND),
    (InvalidStatusError, LifecycleStatus.INVALID_STATUS),
    (DependencyFailureError, LifecycleStatus.DEPENDENCY_FAILURE),
)


@dataclass(frozen=True)
class LifecycleResult(Generic[T]):
    """Result of a lifecycle operation: a value or a typed error, never both."""

    status: LifecycleStatus
    value: T | None = None
    error: ContractKernelError | None = None

    @property
    def is_success(self) -> bool:
        """True for SUCCESS and for the no-actor SKIPPED no-op."""
        return self.status in (LifecycleStatus.SUCCESS, LifecycleStatus.SKIPPED)

    @property
    def contract(self) -> T | None:
        return self.value

    def unwrap(self) -> T | None:
        """Return the value or raise the typed error unchanged."""
        if self.error is not None:
            raise self.error
        return self.value

    @classmethod
    def success(cls, value: T | None) -> LifecycleResult[T]:
        return cls(status=LifecycleStatus.SUCCESS, value=value)

    @classmethod
    def skipped(cls) -> LifecycleResult[T]:
        return cls(status=LifecycleStatus.SKIPPED)

    @classmethod
    def failure(cls, error: ContractKernelError) -> LifecycleResult[T]:
        for error_type, status in _STATUS_BY_ERROR:
            if isinstance(error, error_type):
                return cls(status=status, error=error)
        raise TypeError(f"No lifecycle status for {type(error).__name__}")


class TransactionalService:
    """
    Base class for services whose calls each own one transaction.

    Contract:
        Constructed with a session factory (defaults to the engine's) and a
        Clock.  Subclasses implement each operation as a function of the
        session and hand it to ``_run``.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session] | None = None,
        clock: Clock | None = None,
    ):
        self._session_factory = session_factory or get_session_factory()
        self._clock = clock or SystemClock()

    def _run(
        self,
        operation: str,
        failure_message: str,
        work: Callable[[Session], T],
    ) -> LifecycleResult[T]:
        """
        Execute ``work`` in a fresh transaction and classify the outcome.

        Args:
            operation: Short name used in logs and on DependencyFailureError.
            failure_message: Caller-facing message for dependency failures.
            work: Unit of work; receives the transaction's session.
        """
        try:
            with transaction_scope(self._session_factory) as session:
                value = work(session)
        except (NotFoundError, InvalidStatusError) as exc:
            logger.info(
                "transaction_rolled_back",
                extra={"operation": operation, "error_code": exc.code},
            )
            return LifecycleResult.failure(exc)
        except Exception as exc:
            logger.error(
                "dependency_failure",
                extra={
                    "operation": operation,
                    "cause_type": type(exc).__name__,
                },
                exc_info=True,
            )
            error = DependencyFailureError(operation, failure_message)
            error.__cause__ = exc
            return LifecycleResult.failure(error)

        return LifecycleResult.success(value)
