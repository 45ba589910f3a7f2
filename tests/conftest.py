"""
Pytest fixtures for PayShield tests. Fakes stand in for the risk provider,
proving backend, and transfer network; nothing touches the network.
"""

from __future__ import annotations

import asyncio
from typing import Any, Sequence

import pytest

from backend_payshield.attestation.models import CircuitType
from backend_payshield.attestation.proof_service import ProofOutput, ProofService
from backend_payshield.attestation.service import AttestationService
from backend_payshield.compliance.gateway import ComplianceGateway
from backend_payshield.compliance.models import MaliciousEvidence, RiskLevel, RiskScoreResponse
from backend_payshield.compliance.risk_client import MockRiskProvider
from backend_payshield.transfer.network import BalanceResult, TransferResult

TEST_SEED = bytes([42] * 32)
CLEAN_ADDRESS = "9QCfNuQuxct1Xk9ytFYgxc5fThmTzL4pHQnSjjrVUrka"
RISKY_ADDRESS = "7F1WzVNQ1Qpurqxxdyv3UrFQR3uoNepULVW9A4bAJ5nZ"
SANCTIONED_ADDRESS = "So11111111111111111111111111111111111111112"


def risk_response(
    score: int,
    level: RiskLevel = RiskLevel.LOW,
    evidence: Sequence[MaliciousEvidence] = (),
    reasoning: str = "test",
) -> RiskScoreResponse:
    return RiskScoreResponse(
        risk_score=score,
        risk_level=level,
        reasoning=reasoning,
        num_hops=3,
        malicious_addresses_found=tuple(evidence),
    )


class FakeCircuitBackend:
    def __init__(self, owner: "FakeProvingBackend", artifact: Any) -> None:
        self.owner = owner
        self.artifact = artifact

    async def generate_proof(self, solved_witness: Any) -> ProofOutput:
        if self.owner.fail_generate:
            raise RuntimeError("prover crashed")
        return ProofOutput(proof=b"real-proof:" + self.artifact["circuit"].encode())

    async def verify_proof(self, proof: bytes, public_inputs: Sequence[str]) -> bool:
        self.owner.verify_calls += 1
        if self.owner.fail_verify:
            raise RuntimeError("verifier crashed")
        return self.owner.verify_result


class FakeProvingBackend:
    """Records loads and circuit-backend construction so caching can be asserted."""

    def __init__(
        self,
        *,
        init_ok: bool = True,
        fail_load: bool = False,
        fail_generate: bool = False,
        fail_verify: bool = False,
        verify_result: bool = True,
        init_delay: float = 0.0,
    ) -> None:
        self.init_ok = init_ok
        self.init_delay = init_delay
        self.fail_load = fail_load
        self.fail_generate = fail_generate
        self.fail_verify = fail_verify
        self.verify_result = verify_result
        self.init_calls = 0
        self.load_calls: list[CircuitType] = []
        self.created = 0
        self.verify_calls = 0

    async def initialize(self) -> bool:
        self.init_calls += 1
        if self.init_delay:
            await asyncio.sleep(self.init_delay)
        return self.init_ok

    async def load_circuit_artifact(self, circuit_type: CircuitType) -> Any:
        self.load_calls.append(circuit_type)
        await asyncio.sleep(0)
        if self.fail_load:
            raise RuntimeError("artifact missing")
        return {"circuit": circuit_type.value}

    async def execute(self, artifact: Any, witness: dict[str, Any]) -> Any:
        return {"solved": dict(witness)}

    def create_circuit_backend(self, artifact: Any) -> FakeCircuitBackend:
        self.created += 1
        return FakeCircuitBackend(self, artifact)


class FakeTransferNetwork:
    def __init__(self, *, succeed: bool = True, raise_for: set[str] | None = None) -> None:
        self.succeed = succeed
        self.raise_for = raise_for or set()
        self.transfers: list[tuple[str, str, float, str]] = []

    async def deposit(self, wallet: str, amount: float, token: str = "SOL") -> TransferResult:
        return TransferResult(success=True, transaction_id="dep")

    async def withdraw(self, wallet: str, amount: float, token: str = "SOL") -> TransferResult:
        return TransferResult(success=True, transaction_id="wd")

    async def transfer(self, sender, recipient, amount, token="SOL", *, signer=None) -> TransferResult:
        if recipient in self.raise_for:
            raise ConnectionError("relayer down")
        self.transfers.append((sender, recipient, amount, token))
        if not self.succeed:
            return TransferResult(success=False, error="insufficient shielded balance")
        return TransferResult(success=True, transaction_id=f"tx_{len(self.transfers)}")

    async def get_balance(self, wallet: str, token: str = "SOL") -> BalanceResult:
        return BalanceResult(available=0.0, pending=0.0, token=token)


@pytest.fixture
def seed() -> bytes:
    return TEST_SEED


@pytest.fixture
def provider() -> MockRiskProvider:
    p = MockRiskProvider()
    p.set_response(RISKY_ADDRESS, risk_response(7, RiskLevel.HIGH))
    p.set_response(
        SANCTIONED_ADDRESS,
        risk_response(10, RiskLevel.CRITICAL, reasoning="Directly linked to OFAC list"),
    )
    return p


@pytest.fixture
def gateway(provider) -> ComplianceGateway:
    return ComplianceGateway(provider)


@pytest.fixture
def fake_backend() -> FakeProvingBackend:
    return FakeProvingBackend()


@pytest.fixture
def transfer_network() -> FakeTransferNetwork:
    return FakeTransferNetwork()


@pytest.fixture
def service(gateway, transfer_network) -> AttestationService:
    return AttestationService(gateway, ProofService(), transfer_network=transfer_network)
