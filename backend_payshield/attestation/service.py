"""
Attestation service: risk verdict -> three proofs -> Attestation.

State per request: started -> risk_checked -> proofs_requested ->
compliant | non_compliant. Malformed requests (non-numeric age, empty
address) raise ValidationError before any external call. Failed proof
validation does not raise: the attestation comes back non-compliant with
the proofs produced before the failure. Risk provider failures propagate
(fail closed).
"""

from __future__ import annotations

import secrets
import time
from typing import Any

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
from backend_payshield.attestation.proof_service import ProofService, ProvingBackend, require_number, format_public_input
from backend_payshield.compliance.gateway import ComplianceGateway
from backend_payshield.compliance.risk_client import RiskProvider, create_risk_provider
from backend_payshield.config.settings import Settings, get_settings
from backend_payshield.core.exceptions import PayshieldError, ValidationError
from backend_payshield.payshield_logging import bind_attestation, get_logger, mask_address
from backend_payshield.transfer.network import TransferNetwork, token_info

logger = get_logger(__name__)

DEFAULT_MINIMUM_AGE = 18
DEFAULT_MIN_BALANCE_USD = 0.0


def new_attestation_id(now_ms: int | None = None) -> str:
    """Opaque id: millisecond timestamp (hex) + 8 random hex chars."""
    now_ms = now_ms if now_ms is not None else int(time.time() * 1000)
    return f"att_{now_ms:x}_{secrets.token_hex(4)}"


class AttestationService:
    def __init__(
        self,
        gateway: ComplianceGateway,
        proof_service: ProofService,
        *,
        transfer_network: TransferNetwork | None = None,
        default_minimum_age: int = DEFAULT_MINIMUM_AGE,
        default_max_risk_score: int | None = None,
        default_min_balance_usd: float = DEFAULT_MIN_BALANCE_USD,
    ) -> None:
        self.gateway = gateway
        self.proof_service = proof_service
        self.transfer_network = transfer_network
        self.default_minimum_age = default_minimum_age
        self.default_max_risk_score = default_max_risk_score
        self.default_min_balance_usd = default_min_balance_usd

    def _resolve_request(self, request: AttestationRequest) -> AttestationPublicInputs:
        if not isinstance(request.wallet_address, str) or not request.wallet_address.strip():
            raise ValidationError("Missing required field: wallet_address")
        require_number("age", request.age)
        minimum_age = request.minimum_age if request.minimum_age is not None else self.default_minimum_age
        max_risk = request.max_risk_score
        if max_risk is None:
            max_risk = self.default_max_risk_score or self.gateway.max_risk_threshold
        min_balance = request.min_balance_usd if request.min_balance_usd is not None else self.default_min_balance_usd
        require_number("minimum age", minimum_age)
        require_number("max risk score", max_risk)
        require_number("minimum balance", min_balance)
        if request.wallet_balance_usd is not None:
            require_number("wallet balance", request.wallet_balance_usd)
        return AttestationPublicInputs(
            minimum_age=minimum_age,
            max_risk_score=max_risk,
            min_balance_usd=min_balance,
        )

    async def generate_attestation(self, request: AttestationRequest) -> Attestation:
        public_inputs = self._resolve_request(request)
        attestation_id = new_attestation_id()
        log = bind_attestation(attestation_id)
        log.info("attestation_state", state=AttestationState.STARTED.value, address=mask_address(request.wallet_address))

        verdict = await self.gateway.check_compliance(request.wallet_address)
        log.info("attestation_state", state=AttestationState.RISK_CHECKED.value, risk_score=verdict.risk_score)

        await self.proof_service.initialize()
        log.info("attestation_state", state=AttestationState.PROOFS_REQUESTED.value)

        age_proof: Proof | None = None
        risk_proof: Proof | None = None
        sd_proof: Proof | None = None
        failure_reason: str | None = None
        try:
            age_proof = await self.proof_service.generate_age_proof(request.age, public_inputs.minimum_age)
            risk_proof = await self.proof_service.generate_risk_proof(verdict.risk_score, public_inputs.max_risk_score)
            sd_proof = await self.proof_service.generate_selective_disclosure_proof(
                age=request.age,
                risk_score=verdict.risk_score,
                is_sanctioned=verdict.is_sanctioned,
                wallet_balance_usd=request.wallet_balance_usd if request.wallet_balance_usd is not None else 0.0,
                minimum_age=public_inputs.minimum_age,
                max_risk_score=public_inputs.max_risk_score,
                min_balance_usd=public_inputs.min_balance_usd,
            )
        except ValidationError as e:
            failure_reason = str(e)

        is_compliant = failure_reason is None
        state = AttestationState.COMPLIANT if is_compliant else AttestationState.NON_COMPLIANT
        log.info("attestation_state", state=state.value, failure_reason=failure_reason)
        return Attestation(
            id=attestation_id,
            timestamp=int(time.time() * 1000),
            is_compliant=is_compliant,
            verdict=verdict,
            public_inputs=public_inputs,
            age_proof=age_proof,
            risk_proof=risk_proof,
            selective_disclosure_proof=sd_proof,
            state=state,
            failure_reason=failure_reason,
        )

    async def verify_attestation(self, attestation: Attestation) -> bool:
        """Valid only with a selective-disclosure proof that verifies."""
        proof = attestation.selective_disclosure_proof
        if proof is None:
            return False
        if not proof.is_real:
            pub = attestation.public_inputs
            expected = (
                format_public_input(pub.minimum_age),
                format_public_input(pub.max_risk_score),
                format_public_input(pub.min_balance_usd),
            )
            if proof.public_inputs != expected:
                logger.warning("attestation_public_inputs_mismatch", attestation_id=attestation.id)
                return False
        return await self.proof_service.verify_proof(CircuitType.SELECTIVE_DISCLOSURE, proof)

    async def quick_compliance_check(self, address: str) -> dict[str, Any]:
        return await self.gateway.quick_check(address)

    async def execute_private_transfer(self, request: PrivateTransferRequest) -> PrivateTransferResult:
        """Screen the recipient (unless disabled), then hand the transfer to the network."""
        if self.transfer_network is None:
            raise PayshieldError("No transfer network configured")
        for name in ("sender_address", "recipient_address"):
            value = getattr(request, name)
            if not isinstance(value, str) or not value.strip():
                raise ValidationError(f"Missing required field: {name}")
        amount = require_number("amount", request.amount)
        if amount <= 0:
            raise ValidationError("Invalid amount: must be a positive number")
        token_info(request.token)

        verdict = None
        if request.require_compliance:
            verdict = await self.gateway.check_compliance(request.recipient_address)
            if not verdict.is_compliant:
                logger.warning(
                    "private_transfer_blocked",
                    recipient=mask_address(request.recipient_address),
                    risk_score=verdict.risk_score,
                    is_sanctioned=verdict.is_sanctioned,
                )
                return PrivateTransferResult(
                    success=False,
                    recipient_verdict=verdict,
                    error=f"Recipient failed compliance: {verdict.reasoning}",
                )

        result = await self.transfer_network.transfer(
            request.sender_address,
            request.recipient_address,
            request.amount,
            request.token,
            signer=request.signer,
        )
        logger.info(
            "private_transfer_submitted",
            recipient=mask_address(request.recipient_address),
            token=request.token,
            success=result.success,
        )
        return PrivateTransferResult(
            success=result.success,
            transfer_result=result,
            recipient_verdict=verdict,
            error=result.error,
        )


def create_attestation_service(
    settings: Settings | None = None,
    *,
    proving_backend: ProvingBackend | None = None,
    risk_provider: RiskProvider | None = None,
    transfer_network: TransferNetwork | None = None,
) -> AttestationService:
    """Wire gateway, proof service, and optional transfer network from settings."""
    cfg = settings or get_settings()
    gateway = ComplianceGateway(
        risk_provider or create_risk_provider(cfg),
        max_risk_threshold=cfg.max_risk_threshold,
        batch_concurrency=cfg.batch_concurrency,
    )
    proof_service = ProofService(proving_backend, use_real_proofs=cfg.use_real_proofs)
    return AttestationService(
        gateway,
        proof_service,
        transfer_network=transfer_network,
        default_minimum_age=cfg.default_minimum_age,
        default_max_risk_score=cfg.max_risk_threshold,
        default_min_balance_usd=cfg.default_min_balance_usd,
    )
