"""
Core utilities: error taxonomy shared by the privacy, compliance,
attestation, and transfer packages.
"""

from backend_payshield.core.exceptions import (
    ConservationViolationError,
    InvalidSeedLengthError,
    InvalidTransitionError,
    PayshieldError,
    ProviderError,
    ProvingBackendError,
    ValidationError,
)

__all__ = [
    "ConservationViolationError",
    "InvalidSeedLengthError",
    "InvalidTransitionError",
    "PayshieldError",
    "ProviderError",
    "ProvingBackendError",
    "ValidationError",
]
