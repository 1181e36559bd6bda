"""Read-only selectors over invoicing reference data."""

from invoicing_kernel.selectors.reference_selector import ReferenceDataSelector

__all__ = ["ReferenceDataSelector"]
