"""
Compliance gateway: one risk query per address -> RiskVerdict.

Sanctioned when any evidence at a known distance <= policy.max_distance (default 0)
has a category containing a sanction keyword, or when the risk score reaches
policy.critical_risk_score (default 10). Compliant when risk_score <=
threshold and not sanctioned. Provider failures propagate as ProviderError;
no verdict is fabricated.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Iterable

from backend_payshield.compliance.models import MAX_RISK_SCORE, MIN_RISK_SCORE, RiskScoreResponse, RiskVerdict
from backend_payshield.compliance.risk_client import RiskProvider
from backend_payshield.config.env import DEFAULT_BATCH_CONCURRENCY, DEFAULT_MAX_RISK_THRESHOLD
from backend_payshield.core.exceptions import PayshieldError, ProviderError, ValidationError
from backend_payshield.payshield_logging import get_logger, mask_address

logger = get_logger(__name__)

SANCTION_CATEGORIES = frozenset({"ofac", "sanctions", "blacklist", "hack_funds"})


@dataclass(frozen=True)
class SanctionPolicy:
    """
    Heuristic sanction rule. Keywords match case-insensitively as substrings
    of the evidence category. critical_risk_score=None disables the score rule.
    """

    categories: frozenset[str] = field(default_factory=lambda: SANCTION_CATEGORIES)
    max_distance: int = 0
    critical_risk_score: int | None = MAX_RISK_SCORE

    def is_sanctioned(self, response: RiskScoreResponse) -> bool:
        if self.critical_risk_score is not None and response.risk_score >= self.critical_risk_score:
            return True
        for evidence in response.malicious_addresses_found:
            if evidence.distance is None or evidence.distance > self.max_distance:
                continue
            category = (evidence.category or "").lower()
            if any(keyword in category for keyword in self.categories):
                return True
        return False


def _check_threshold(value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError("Invalid risk threshold: expected int")
    if not MIN_RISK_SCORE <= value <= MAX_RISK_SCORE:
        raise ValidationError(f"Invalid risk threshold: must be between {MIN_RISK_SCORE} and {MAX_RISK_SCORE}")
    return value


class ComplianceGateway:
    """Screens addresses against a RiskProvider with a per-instance threshold."""

    def __init__(
        self,
        provider: RiskProvider,
        *,
        max_risk_threshold: int = DEFAULT_MAX_RISK_THRESHOLD,
        sanction_policy: SanctionPolicy | None = None,
        batch_concurrency: int = DEFAULT_BATCH_CONCURRENCY,
    ) -> None:
        self.provider = provider
        self._max_risk_threshold = _check_threshold(max_risk_threshold)
        self.sanction_policy = sanction_policy or SanctionPolicy()
        self.batch_concurrency = max(1, int(batch_concurrency))

    @property
    def max_risk_threshold(self) -> int:
        return self._max_risk_threshold

    @max_risk_threshold.setter
    def max_risk_threshold(self, value: int) -> None:
        self._max_risk_threshold = _check_threshold(value)

    async def check_compliance(self, address: str) -> RiskVerdict:
        if not isinstance(address, str) or not address.strip():
            raise ValidationError("Address must be a non-empty string")
        # threshold may change while the query is in flight
        threshold = self._max_risk_threshold
        try:
            response = await self.provider.get_risk_score(address)
        except PayshieldError:
            logger.warning("compliance_provider_failed", address=mask_address(address))
            raise
        except Exception as e:
            logger.warning("compliance_provider_failed", address=mask_address(address), error=str(e))
            raise ProviderError(f"Risk query failed: {e}", address=address) from e

        is_sanctioned = self.sanction_policy.is_sanctioned(response)
        is_compliant = response.risk_score <= threshold and not is_sanctioned
        verdict = RiskVerdict(
            address=address,
            is_compliant=is_compliant,
            risk_score=response.risk_score,
            risk_level=response.risk_level,
            is_sanctioned=is_sanctioned,
            reasoning=response.reasoning,
            raw_response=response,
        )
        logger.info(
            "compliance_checked",
            address=mask_address(address),
            risk_score=response.risk_score,
            is_sanctioned=is_sanctioned,
            is_compliant=is_compliant,
            threshold=threshold,
        )
        return verdict

    async def batch_check_compliance(self, addresses: Iterable[str]) -> dict[str, RiskVerdict]:
        """
        Screen addresses in windows of batch_concurrency; results keyed by address.
        Any provider failure aborts the batch with ProviderError.
        """
        unique = list(dict.fromkeys(addresses))
        results: dict[str, RiskVerdict] = {}
        for start in range(0, len(unique), self.batch_concurrency):
            window = unique[start : start + self.batch_concurrency]
            verdicts = await asyncio.gather(*(self.check_compliance(a) for a in window))
            for address, verdict in zip(window, verdicts):
                results[address] = verdict
        logger.info("compliance_batch_checked", count=len(results), window=self.batch_concurrency)
        return results

    async def quick_check(self, address: str) -> dict[str, Any]:
        verdict = await self.check_compliance(address)
        return {
            "is_compliant": verdict.is_compliant,
            "risk_score": verdict.risk_score,
            "is_sanctioned": verdict.is_sanctioned,
        }
