"""Read-only selectors."""

from contract_kernel.selectors.base import BaseSelector
from contract_kernel.selectors.contract_selector import ContractSelector, contract_to_info

__all__ = ["BaseSelector", "ContractSelector", "contract_to_info"]
