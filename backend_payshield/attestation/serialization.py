"""
Proof and attestation serialization.

Proofs travel as {"proof": [byte, ...], "public_inputs": [str, ...], "is_real": bool};
byte order, byte length, and public-input order survive the round trip.
"""

from __future__ import annotations

import json
from typing import Any

from backend_payshield.attestation.models import (
    Attestation,
    AttestationPublicInputs,
    AttestationState,
    Proof,
)
from backend_payshield.compliance.models import RiskVerdict
from backend_payshield.core.exceptions import ValidationError

_PROOF_SLOTS = (
    ("age", "age_proof"),
    ("risk", "risk_proof"),
    ("selective_disclosure", "selective_disclosure_proof"),
)


def proof_to_dict(proof: Proof) -> dict[str, Any]:
    return {
        "proof": list(proof.data),
        "public_inputs": list(proof.public_inputs),
        "is_real": proof.is_real,
    }


def proof_from_dict(data: dict[str, Any]) -> Proof:
    try:
        raw = data["proof"]
        public_inputs = data["public_inputs"]
        if isinstance(raw, (str, bytes)) or isinstance(public_inputs, (str, bytes)):
            raise TypeError("proof and public_inputs must be lists")
        proof_bytes = bytes(int(b) for b in raw)
        inputs = tuple(str(p) for p in public_inputs)
    except (KeyError, TypeError, ValueError) as e:
        raise ValidationError(f"Malformed proof: {e}") from e
    return Proof(data=proof_bytes, public_inputs=inputs, is_real=bool(data.get("is_real", False)))


def serialize_proof(proof: Proof) -> str:
    return json.dumps(proof_to_dict(proof))


def deserialize_proof(serialized: str | bytes) -> Proof:
    try:
        data = json.loads(serialized)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Malformed proof JSON: {e}") from e
    if not isinstance(data, dict):
        raise ValidationError("Malformed proof: expected an object")
    return proof_from_dict(data)


def attestation_to_dict(attestation: Attestation) -> dict[str, Any]:
    proofs = {
        key: proof_to_dict(getattr(attestation, attr)) if getattr(attestation, attr) is not None else None
        for key, attr in _PROOF_SLOTS
    }
    return {
        "id": attestation.id,
        "timestamp": attestation.timestamp,
        "is_compliant": attestation.is_compliant,
        "state": attestation.state.value,
        "failure_reason": attestation.failure_reason,
        "proofs": proofs,
        "verdict": attestation.verdict.to_dict(),
        "public_inputs": {
            "minimum_age": attestation.public_inputs.minimum_age,
            "max_risk_score": attestation.public_inputs.max_risk_score,
            "min_balance_usd": attestation.public_inputs.min_balance_usd,
        },
    }


def attestation_from_dict(data: dict[str, Any]) -> Attestation:
    try:
        proofs = data.get("proofs") or {}
        loaded = {
            attr: proof_from_dict(proofs[key]) if proofs.get(key) else None
            for key, attr in _PROOF_SLOTS
        }
        pub = data["public_inputs"]
        return Attestation(
            id=str(data["id"]),
            timestamp=int(data["timestamp"]),
            is_compliant=bool(data["is_compliant"]),
            verdict=RiskVerdict.from_dict(data["verdict"]),
            public_inputs=AttestationPublicInputs(
                minimum_age=pub["minimum_age"],
                max_risk_score=pub["max_risk_score"],
                min_balance_usd=pub["min_balance_usd"],
            ),
            state=AttestationState(data.get("state") or AttestationState.NON_COMPLIANT.value),
            failure_reason=data.get("failure_reason"),
            **loaded,
        )
    except (KeyError, TypeError, ValueError) as e:
        raise ValidationError(f"Malformed attestation: {e}") from e
