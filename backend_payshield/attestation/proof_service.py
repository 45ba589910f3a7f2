"""
Proof generation and verification for the three compliance circuits.

Inputs are validated before any backend work; a validation failure raises
ValidationError. Generation uses the proving backend when one was injected
and initialized, and falls back to a placeholder proof (is_real=False) on any
backend error. Verification of placeholders checks only that the payload is
non-empty; real proofs go to the circuit backend cached per circuit type,
with the same structural fallback if the backend errors.
"""

from __future__ import annotations

import asyncio
import hashlib
import json
import math
import time
from dataclasses import asdict, dataclass
from typing import Any, Protocol, Sequence

from backend_payshield.attestation.artifact_cache import LoadOnceCache
from backend_payshield.attestation.models import (
    AgeVerificationInput,
    CircuitType,
    Proof,
    RiskThresholdInput,
    SelectiveDisclosureInput,
)
from backend_payshield.core.exceptions import ProvingBackendError, ValidationError
from backend_payshield.payshield_logging import get_logger

logger = get_logger(__name__)

U8_MAX = 255
RISK_MIN = 1
RISK_MAX = 10


@dataclass(frozen=True)
class ProofOutput:
    proof: bytes
    public_inputs: Sequence[str] | None = None


class CircuitBackend(Protocol):
    """Prover/verifier bound to one circuit artifact."""

    async def generate_proof(self, solved_witness: Any) -> ProofOutput: ...

    async def verify_proof(self, proof: bytes, public_inputs: Sequence[str]) -> bool: ...


class ProvingBackend(Protocol):
    async def initialize(self) -> bool: ...

    async def load_circuit_artifact(self, circuit_type: CircuitType) -> Any: ...

    async def execute(self, artifact: Any, witness: dict[str, Any]) -> Any: ...

    def create_circuit_backend(self, artifact: Any) -> CircuitBackend: ...


def require_number(name: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"Invalid {name}: expected a number, got {type(value).__name__}")
    if isinstance(value, float) and not math.isfinite(value):
        raise ValidationError(f"Invalid {name}: must be finite")
    return value


def format_public_input(value: Any) -> str:
    """Integral floats render without a trailing .0 so inputs match circuit fields."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def validate_age_input(inp: AgeVerificationInput) -> None:
    age = require_number("age", inp.age)
    minimum_age = require_number("minimum age", inp.minimum_age)
    if age < 0 or age > U8_MAX:
        raise ValidationError("Invalid age: must be between 0 and 255 (u8)")
    if minimum_age < 0 or minimum_age > U8_MAX:
        raise ValidationError("Invalid minimum age: must be between 0 and 255 (u8)")
    if age < minimum_age:
        raise ValidationError("Age verification will fail: age is below minimum")


def validate_risk_input(inp: RiskThresholdInput) -> None:
    risk_score = require_number("risk score", inp.risk_score)
    max_allowed = require_number("max risk", inp.max_allowed_risk)
    if risk_score < RISK_MIN or risk_score > RISK_MAX:
        raise ValidationError("Invalid risk score: must be between 1 and 10")
    if max_allowed < RISK_MIN or max_allowed > RISK_MAX:
        raise ValidationError("Invalid max risk: must be between 1 and 10")
    if risk_score > max_allowed:
        raise ValidationError("Risk verification will fail: risk exceeds threshold")


def validate_selective_disclosure_input(inp: SelectiveDisclosureInput) -> None:
    validate_age_input(AgeVerificationInput(age=inp.age, minimum_age=inp.minimum_age))
    validate_risk_input(RiskThresholdInput(risk_score=inp.risk_score, max_allowed_risk=inp.max_risk_score))
    if not isinstance(inp.is_sanctioned, bool):
        raise ValidationError("Invalid sanction flag: expected bool")
    balance = require_number("wallet balance", inp.wallet_balance_usd)
    min_balance = require_number("minimum balance", inp.min_balance_usd)
    if inp.is_sanctioned:
        raise ValidationError("Selective disclosure will fail: address is sanctioned")
    if balance < min_balance:
        raise ValidationError("Selective disclosure will fail: balance below minimum")


def public_inputs_for(circuit_type: CircuitType, witness: dict[str, Any]) -> tuple[str, ...]:
    if circuit_type is CircuitType.AGE_VERIFICATION:
        return (format_public_input(witness["minimum_age"]),)
    if circuit_type is CircuitType.RISK_THRESHOLD:
        return (format_public_input(witness["max_allowed_risk"]),)
    return (
        format_public_input(witness["minimum_age"]),
        format_public_input(witness["max_risk_score"]),
        format_public_input(witness["min_balance_usd"]),
    )


def _witness_digest(witness: dict[str, Any]) -> str:
    return hashlib.sha256(json.dumps(witness, sort_keys=True).encode("utf-8")).hexdigest()


def create_placeholder_proof(circuit_type: CircuitType, witness: dict[str, Any]) -> Proof:
    """Non-cryptographic stand-in; carries a digest of the witness, never the witness."""
    public_inputs = public_inputs_for(circuit_type, witness)
    payload = {
        "circuit_type": circuit_type.value,
        "public_inputs": list(public_inputs),
        "timestamp": int(time.time() * 1000),
        "placeholder": True,
        "witness_digest": _witness_digest(witness),
    }
    return Proof(
        data=json.dumps(payload, sort_keys=True).encode("utf-8"),
        public_inputs=public_inputs,
        is_real=False,
    )


class ProofService:
    """
    Generates and verifies circuit proofs.

    backend: optional ProvingBackend; None means placeholder proofs only.
    use_real_proofs=False ignores any injected backend.
    The artifact and circuit-backend caches belong to this instance.
    """

    def __init__(self, backend: ProvingBackend | None = None, *, use_real_proofs: bool = True) -> None:
        self.backend = backend if use_real_proofs else None
        self.artifacts: LoadOnceCache[Any] = LoadOnceCache()
        self.circuit_backends: LoadOnceCache[CircuitBackend] = LoadOnceCache()
        self._initialized = False
        self._init_done = False
        self._init_task: asyncio.Future[bool] | None = None

    @property
    def uses_real_proofs(self) -> bool:
        return self.backend is not None and self._initialized

    async def initialize(self) -> bool:
        """
        Initialize the backend once; a failed init leaves the service on placeholders.
        Concurrent first callers share one in-flight initialization.
        """
        if self.backend is None:
            return False
        if self._init_done:
            return self._initialized
        if self._init_task is None or self._init_task.cancelled():
            self._init_task = asyncio.ensure_future(self._initialize_backend())
        return await asyncio.shield(self._init_task)

    async def _initialize_backend(self) -> bool:
        try:
            ready = bool(await self.backend.initialize())
        except Exception as e:
            logger.warning("proving_backend_init_failed", error=str(e))
            ready = False
        self._initialized = ready
        self._init_done = True
        logger.info("proving_backend_initialized", ready=ready)
        return ready

    async def _load_artifact(self, circuit_type: CircuitType) -> Any:
        backend = self.backend

        async def load() -> Any:
            try:
                artifact = await backend.load_circuit_artifact(circuit_type)
            except Exception as e:
                raise ProvingBackendError(
                    f"Failed to load circuit {circuit_type.value}: {e}", circuit_type=circuit_type.value
                ) from e
            if artifact is None:
                raise ProvingBackendError(
                    f"Circuit {circuit_type.value} not available", circuit_type=circuit_type.value
                )
            return artifact

        return await self.artifacts.get_or_load(circuit_type, load)

    async def _circuit_backend(self, circuit_type: CircuitType, artifact: Any) -> CircuitBackend:
        backend = self.backend

        async def create() -> CircuitBackend:
            return backend.create_circuit_backend(artifact)

        return await self.circuit_backends.get_or_load(circuit_type, create)

    async def _generate_real(self, circuit_type: CircuitType, witness: dict[str, Any]) -> Proof:
        artifact = await self._load_artifact(circuit_type)
        solved = await self.backend.execute(artifact, witness)
        circuit_backend = await self._circuit_backend(circuit_type, artifact)
        output = await circuit_backend.generate_proof(solved)
        if not output.proof:
            raise ProvingBackendError("Backend returned an empty proof", circuit_type=circuit_type.value)
        return Proof(
            data=output.proof,
            public_inputs=output.public_inputs or public_inputs_for(circuit_type, witness),
            is_real=True,
        )

    async def _generate(self, circuit_type: CircuitType, witness: dict[str, Any]) -> Proof:
        if self.uses_real_proofs:
            try:
                proof = await self._generate_real(circuit_type, witness)
                logger.info("proof_generated", circuit_type=circuit_type.value, is_real=True)
                return proof
            except Exception as e:
                logger.warning("proof_backend_fallback", circuit_type=circuit_type.value, error=str(e))
        proof = create_placeholder_proof(circuit_type, witness)
        logger.info("proof_generated", circuit_type=circuit_type.value, is_real=False)
        return proof

    async def generate_age_proof(self, age: int, minimum_age: int) -> Proof:
        inp = AgeVerificationInput(age=age, minimum_age=minimum_age)
        validate_age_input(inp)
        return await self._generate(CircuitType.AGE_VERIFICATION, asdict(inp))

    async def generate_risk_proof(self, risk_score: int, max_allowed_risk: int) -> Proof:
        inp = RiskThresholdInput(risk_score=risk_score, max_allowed_risk=max_allowed_risk)
        validate_risk_input(inp)
        return await self._generate(CircuitType.RISK_THRESHOLD, asdict(inp))

    async def generate_selective_disclosure_proof(
        self,
        *,
        age: int,
        risk_score: int,
        is_sanctioned: bool,
        wallet_balance_usd: float,
        minimum_age: int,
        max_risk_score: int,
        min_balance_usd: float,
    ) -> Proof:
        inp = SelectiveDisclosureInput(
            age=age,
            risk_score=risk_score,
            is_sanctioned=is_sanctioned,
            wallet_balance_usd=wallet_balance_usd,
            minimum_age=minimum_age,
            max_risk_score=max_risk_score,
            min_balance_usd=min_balance_usd,
        )
        validate_selective_disclosure_input(inp)
        return await self._generate(CircuitType.SELECTIVE_DISCLOSURE, asdict(inp))

    async def verify_proof(self, circuit_type: CircuitType | str, proof: Proof) -> bool:
        try:
            ct = CircuitType(circuit_type)
        except ValueError as e:
            raise ValidationError(f"Unknown circuit type: {circuit_type!r}") from e
        structural = len(proof.data) > 0
        if not proof.is_real:
            return structural
        if not await self.initialize():
            logger.warning("proof_verify_no_backend", circuit_type=ct.value)
            return structural
        try:
            artifact = await self._load_artifact(ct)
            verifier = await self._circuit_backend(ct, artifact)
            is_valid = bool(await verifier.verify_proof(proof.data, list(proof.public_inputs)))
        except Exception as e:
            logger.warning("proof_verify_backend_fallback", circuit_type=ct.value, error=str(e))
            return structural
        logger.info("proof_verified", circuit_type=ct.value, is_valid=is_valid)
        return is_valid
