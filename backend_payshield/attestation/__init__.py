"""
Compliance attestations: proof generation/verification and the attestation service.
"""

from backend_payshield.attestation.artifact_cache import LoadOnceCache
from backend_payshield.attestation.models import (
    Attestation,
    AttestationPublicInputs,
    AttestationRequest,
    AttestationState,
    CircuitType,
    PrivateTransferRequest,
    PrivateTransferResult,
    Proof,
)
from backend_payshield.attestation.proof_service import (
    CircuitBackend,
    ProofOutput,
    ProofService,
    ProvingBackend,
    create_placeholder_proof,
)
from backend_payshield.attestation.serialization import (
    attestation_from_dict,
    attestation_to_dict,
    deserialize_proof,
    serialize_proof,
)
from backend_payshield.attestation.service import AttestationService, create_attestation_service

__all__ = [
    "Attestation",
    "AttestationPublicInputs",
    "AttestationRequest",
    "AttestationService",
    "AttestationState",
    "CircuitBackend",
    "CircuitType",
    "LoadOnceCache",
    "PrivateTransferRequest",
    "PrivateTransferResult",
    "Proof",
    "ProofOutput",
    "ProofService",
    "ProvingBackend",
    "attestation_from_dict",
    "attestation_to_dict",
    "create_attestation_service",
    "create_placeholder_proof",
    "deserialize_proof",
    "serialize_proof",
]
