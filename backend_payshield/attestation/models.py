"""
Data models for proofs and attestations.

Proof.is_real=False marks a placeholder proof produced without a proving
backend; verification of placeholders is structural only.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from backend_payshield.compliance.models import RiskVerdict


class CircuitType(str, Enum):
    AGE_VERIFICATION = "age_verification"
    RISK_THRESHOLD = "risk_threshold"
    SELECTIVE_DISCLOSURE = "selective_disclosure"


class AttestationState(str, Enum):
    STARTED = "started"
    RISK_CHECKED = "risk_checked"
    PROOFS_REQUESTED = "proofs_requested"
    COMPLIANT = "compliant"
    NON_COMPLIANT = "non_compliant"


@dataclass(frozen=True)
class Proof:
    data: bytes
    public_inputs: tuple[str, ...]
    is_real: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "data", bytes(self.data))
        object.__setattr__(self, "public_inputs", tuple(str(p) for p in self.public_inputs))


@dataclass(frozen=True)
class AgeVerificationInput:
    age: int
    minimum_age: int


@dataclass(frozen=True)
class RiskThresholdInput:
    risk_score: int
    max_allowed_risk: int


@dataclass(frozen=True)
class SelectiveDisclosureInput:
    age: int
    risk_score: int
    is_sanctioned: bool
    wallet_balance_usd: float
    minimum_age: int
    max_risk_score: int
    min_balance_usd: float


@dataclass(frozen=True)
class AttestationRequest:
    """
    Caller input for generate_attestation. Thresholds left as None take the
    service defaults; wallet_balance_usd defaults to 0.
    """

    wallet_address: str
    age: int
    minimum_age: int | None = None
    max_risk_score: int | None = None
    min_balance_usd: float | None = None
    wallet_balance_usd: float | None = None


@dataclass(frozen=True)
class AttestationPublicInputs:
    minimum_age: int
    max_risk_score: int
    min_balance_usd: float


@dataclass(frozen=True)
class Attestation:
    """
    Immutable record of one compliance request. is_compliant is True iff all
    three proofs were produced; proofs after the first validation failure are absent.
    """

    id: str
    timestamp: int
    is_compliant: bool
    verdict: RiskVerdict
    public_inputs: AttestationPublicInputs
    age_proof: Proof | None = None
    risk_proof: Proof | None = None
    selective_disclosure_proof: Proof | None = None
    state: AttestationState = AttestationState.NON_COMPLIANT
    failure_reason: str | None = None

    @property
    def proofs(self) -> dict[str, Proof]:
        out: dict[str, Proof] = {}
        if self.age_proof is not None:
            out["age"] = self.age_proof
        if self.risk_proof is not None:
            out["risk"] = self.risk_proof
        if self.selective_disclosure_proof is not None:
            out["selective_disclosure"] = self.selective_disclosure_proof
        return out


@dataclass(frozen=True)
class PrivateTransferRequest:
    sender_address: str
    recipient_address: str
    amount: float
    token: str = "SOL"
    require_compliance: bool = True
    signer: Any = None


@dataclass
class PrivateTransferResult:
    success: bool
    transfer_result: Any = None
    recipient_verdict: RiskVerdict | None = None
    error: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)
