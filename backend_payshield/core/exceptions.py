"""
Application-level exceptions.

- ValidationError: malformed or out-of-range input; raised before any external call.
- ProviderError: risk provider failure; the compliance gateway fails closed on it.
- ProvingBackendError: real proof generation/verification failure; recovered locally.
- ConservationViolationError: split output does not sum to the requested total.
- InvalidTransitionError: illegal scheduled-withdrawal status change.
"""

from __future__ import annotations


class PayshieldError(Exception):
    """Base class for all engine errors."""


class ValidationError(PayshieldError, ValueError):
    """Input rejected before any work begins. Never retried."""


class InvalidSeedLengthError(ValidationError):
    """Derivation seed is not exactly 32 bytes."""

    def __init__(self, length: int) -> None:
        super().__init__(f"Invalid seed length: expected 32 bytes, got {length}")
        self.length = length


class ProviderError(PayshieldError):
    """Risk-score provider call failed; no verdict is fabricated."""

    def __init__(self, message: str, *, address: str | None = None, status_code: int | None = None) -> None:
        super().__init__(message)
        self.address = address
        self.status_code = status_code


class ProvingBackendError(PayshieldError):
    """Proving backend failed to load, prove, or verify a circuit."""

    def __init__(self, message: str, *, circuit_type: str | None = None) -> None:
        super().__init__(message)
        self.circuit_type = circuit_type


class ConservationViolationError(PayshieldError):
    """Fragments do not sum to the requested total within tolerance."""

    def __init__(self, total: float, fragment_sum: float) -> None:
        super().__init__(
            f"Split does not conserve total: expected {total}, fragments sum to {fragment_sum}"
        )
        self.total = total
        self.fragment_sum = fragment_sum


class InvalidTransitionError(PayshieldError, ValueError):
    """Scheduled withdrawal status may only move pending -> ready -> executed."""
