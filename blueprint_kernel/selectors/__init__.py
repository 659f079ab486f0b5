"""Read-only query selectors."""

from blueprint_kernel.selectors.contract_selector import (
    ContractGroup,
    ContractSelector,
    ContractSummary,
    missing_required_fields,
)

__all__ = [
    "ContractGroup",
    "ContractSelector",
    "ContractSummary",
    "missing_required_fields",
]
