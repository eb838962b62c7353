"""Domain models for the contract kernel."""

from contract_kernel.models.contract import (
    Contract,
    ExpectedMetric,
    Payment,
    contract_attachments,
    contract_schools,
)
from contract_kernel.models.draft import Draft
from contract_kernel.models.measure import Measure
from contract_kernel.models.reference import (
    Attachment,
    Country,
    Currency,
    Frequency,
    Isp,
    Lta,
    Metric,
    School,
    lta_isps,
)
from contract_kernel.models.status_transition import StatusTransition

__all__ = [
    "Attachment",
    "Contract",
    "Country",
    "Currency",
    "Draft",
    "ExpectedMetric",
    "Frequency",
    "Isp",
    "Lta",
    "Measure",
    "Metric",
    "Payment",
    "School",
    "StatusTransition",
    "contract_attachments",
    "contract_schools",
    "lta_isps",
]
