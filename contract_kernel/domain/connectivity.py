"""
Connectivity classification of a school against a contract's expected metrics.

Responsibility:
    ``classify`` puts one (contract, school) pair into one of three
    buckets; ``ConnectivityTally`` accumulates the buckets over all the
    schools of a contract.

Policy:
    - A school with no measured averages at all is WITHOUT_CONNECTION.
    - Expected metrics are checked in the given order; the first metric
      whose average is missing or strictly below target decides
      AT_LEAST_ONE_BELOW_AVERAGE.  A missing average counts as failing.
    - A contract with zero expected metrics classifies every measured
      school as ALL_AT_OR_ABOVE_AVERAGE.

Architecture position:
    Kernel > Domain -- pure, zero I/O.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum
from uuid import UUID


class ConnectivityClass(str, Enum):
    WITHOUT_CONNECTION = "without_connection"
    AT_LEAST_ONE_BELOW_AVERAGE = "at_least_one_below_average"
    ALL_AT_OR_ABOVE_AVERAGE = "all_at_or_above_average"


@dataclass(frozen=True)
class ExpectedMetricSpec:
    """Target value a contract commits a school to meet for one metric."""

    metric_id: UUID
    value: Decimal

    def __post_init__(self) -> None:
        if isinstance(self.value, Decimal):
            return
        try:
            object.__setattr__(self, "value", Decimal(str(self.value)))
        except InvalidOperation:
            raise ValueError(
                f"expected metric value must be a decimal string, got {self.value!r}"
            ) from None


def classify(
    averages: Mapping[UUID, Decimal],
    expected_metrics: Sequence[ExpectedMetricSpec],
) -> ConnectivityClass:
    """Classify one school given its per-metric averages."""
    if not averages:
        return ConnectivityClass.WITHOUT_CONNECTION

    for expected in expected_metrics:
        average = averages.get(expected.metric_id)
        if average is None or average < expected.value:
            return ConnectivityClass.AT_LEAST_ONE_BELOW_AVERAGE

    return ConnectivityClass.ALL_AT_OR_ABOVE_AVERAGE


@dataclass(frozen=True)
class ConnectivityTally:
    """Per-contract counts of schools in each connectivity bucket."""

    without_connection: int = 0
    at_least_one_below_average: int = 0
    all_at_or_above_average: int = 0

    @property
    def total(self) -> int:
        return (
            self.without_connection
            + self.at_least_one_below_average
            + self.all_at_or_above_average
        )

    def add(self, bucket: ConnectivityClass) -> ConnectivityTally:
        """Return a new tally with ``bucket`` incremented."""
        counts = {
            "without_connection": self.without_connection,
            "at_least_one_below_average": self.at_least_one_below_average,
            "all_at_or_above_average": self.all_at_or_above_average,
        }
        counts[bucket.value] += 1
        return ConnectivityTally(**counts)

    @classmethod
    def for_schools(
        cls,
        school_ids: Sequence[UUID],
        school_averages: Mapping[UUID, Mapping[UUID, Decimal]],
        expected_metrics: Sequence[ExpectedMetricSpec],
    ) -> ConnectivityTally:
        tally = cls()
        for school_id in school_ids:
            tally = tally.add(
                classify(school_averages.get(school_id, {}), expected_metrics)
            )
        return tally
