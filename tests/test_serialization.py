"""
Tests for proof and attestation serialization.
"""

from __future__ import annotations

import asyncio
import json

import pytest

from backend_payshield.attestation.models import AttestationRequest, AttestationState, Proof
from backend_payshield.attestation.serialization import (
    attestation_from_dict,
    attestation_to_dict,
    deserialize_proof,
    proof_from_dict,
    proof_to_dict,
    serialize_proof,
)
from backend_payshield.core.exceptions import ValidationError

from conftest import CLEAN_ADDRESS


def test_proof_round_trip_preserves_inputs_and_length():
    proof = Proof(data=bytes(range(256)) + b"\x00\x00", public_inputs=("18", "5", "1000"), is_real=True)
    restored = deserialize_proof(serialize_proof(proof))
    assert restored.public_inputs == proof.public_inputs
    assert len(restored.data) == len(proof.data)
    assert restored == proof


def test_serialized_proof_shape():
    data = json.loads(serialize_proof(Proof(data=b"\x01\xff", public_inputs=("18",))))
    assert data == {"proof": [1, 255], "public_inputs": ["18"], "is_real": False}


def test_deserialize_accepts_bytes():
    assert deserialize_proof(b'{"proof": [7], "public_inputs": []}') == Proof(b"\x07", ())


@pytest.mark.parametrize(
    "raw",
    [
        "not json",
        "[]",
        '{"public_inputs": []}',
        '{"proof": "abc", "public_inputs": []}',
        '{"proof": [1, 300], "public_inputs": []}',
        '{"proof": [1], "public_inputs": "18"}',
        None,
    ],
)
def test_deserialize_malformed(raw):
    with pytest.raises(ValidationError):
        deserialize_proof(raw)


def test_proof_dict_round_trip():
    proof = Proof(data=b"abc", public_inputs=("5",), is_real=False)
    assert proof_from_dict(proof_to_dict(proof)) == proof


def test_attestation_round_trip(service):
    attestation = asyncio.run(
        service.generate_attestation(AttestationRequest(wallet_address=CLEAN_ADDRESS, age=25))
    )
    data = json.loads(json.dumps(attestation_to_dict(attestation)))
    assert data["state"] == "compliant"
    assert data["verdict"]["address"] == CLEAN_ADDRESS
    assert attestation_from_dict(data) == attestation


def test_non_compliant_attestation_round_trip(service):
    attestation = asyncio.run(
        service.generate_attestation(AttestationRequest(wallet_address=CLEAN_ADDRESS, age=16))
    )
    data = attestation_to_dict(attestation)
    assert data["proofs"] == {"age": None, "risk": None, "selective_disclosure": None}
    restored = attestation_from_dict(data)
    assert restored.state is AttestationState.NON_COMPLIANT
    assert restored.failure_reason == attestation.failure_reason
    assert restored.selective_disclosure_proof is None


def test_attestation_from_dict_malformed():
    with pytest.raises(ValidationError, match="Malformed attestation"):
        attestation_from_dict({"id": "att_1"})
