"""
Ordered lifecycle statuses.

Responsibility:
    Defines the ordered-enum abstraction the status transition engine is
    generic over, and the concrete contract lifecycle.  The "exactly one
    step forward" rule lives here as ``next()`` / ``can_advance_to()``
    rather than as integer arithmetic scattered through services.

Architecture position:
    Kernel > Domain -- pure, zero I/O.
"""

from __future__ import annotations

from enum import IntEnum


class OrderedStatus(IntEnum):
    """
    Base for strictly linear, forward-only status sequences.

    Members must use consecutive integer values starting at 0; the value
    is the position in the sequence.
    """

    @property
    def label(self) -> str:
        """Human-readable label (``SENT`` -> ``"Sent"``)."""
        return self.name.replace("_", " ").title()

    def next(self) -> OrderedStatus | None:
        """Return the successor, or None at the terminal state."""
        return type(self)._value2member_map_.get(self.value + 1)

    @property
    def is_terminal(self) -> bool:
        return self.next() is None

    def can_advance_to(self, target: OrderedStatus) -> bool:
        """True only when ``target`` is exactly the successor of self."""
        successor = self.next()
        return successor is not None and successor is target

    @classmethod
    def coerce(cls, value: object) -> OrderedStatus | None:
        """
        Resolve ``value`` to a member of this enum.

        Accepts members, plain ints (not bools) and member names.
        Returns None when the value is not part of the sequence.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            return None
        if isinstance(value, int):
            return cls._value2member_map_.get(value)
        if isinstance(value, str):
            return cls.__members__.get(value.upper())
        return None


class ContractStatus(OrderedStatus):
    """Contract lifecycle: DRAFT -> SENT -> CONFIRMED -> ONGOING -> EXPIRED -> COMPLETED.

    DRAFT is never stored on a contract row; it only appears as the
    initial status of a draft-promotion transition and as the synthetic
    bucket in count views.
    """

    DRAFT = 0
    SENT = 1
    CONFIRMED = 2
    ONGOING = 3
    EXPIRED = 4
    COMPLETED = 5
