"""
Data models for risk screening.

RiskScoreResponse mirrors the provider payload (camelCase on the wire);
RiskVerdict is the gateway's immutable decision for one query.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from backend_payshield.core.exceptions import ProviderError

MIN_RISK_SCORE = 1
MAX_RISK_SCORE = 10


class RiskLevel(str, Enum):
    CRITICAL = "CRITICAL RISK (Directly malicious)"
    EXTREMELY_HIGH = "Extremely high risk"
    HIGH = "High risk"
    MEDIUM = "Medium risk"
    LOW = "Low risk"
    VERY_LOW = "Very low risk"

    @classmethod
    def parse(cls, raw: Any) -> "RiskLevel":
        text = str(raw or "").strip()
        for level in cls:
            if level.value.lower() == text.lower() or level.name.lower() == text.lower():
                return level
        raise ValueError(f"Unknown risk level: {raw!r}")


@dataclass(frozen=True)
class MaliciousEvidence:
    """Link from the queried address to a flagged address; distance None when the provider omits it."""

    address: str
    distance: int | None
    category: str
    name_tag: str | None = None
    entity: str | None = None

    @classmethod
    def from_api(cls, item: dict[str, Any]) -> "MaliciousEvidence":
        return cls(
            address=str(item.get("address") or ""),
            distance=None if item.get("distance") is None else int(item["distance"]),
            category=str(item.get("category") or ""),
            name_tag=item.get("name_tag"),
            entity=item.get("entity"),
        )


@dataclass(frozen=True)
class RiskScoreResponse:
    """Raw provider answer for one address."""

    risk_score: int
    risk_level: RiskLevel
    reasoning: str = ""
    num_hops: int = 0
    malicious_addresses_found: tuple[MaliciousEvidence, ...] = ()
    attribution: dict[str, Any] | None = None

    @classmethod
    def from_api(cls, payload: Any, address: str | None = None) -> "RiskScoreResponse":
        """Parse the provider JSON body; malformed payloads raise ProviderError."""
        if not isinstance(payload, dict):
            raise ProviderError("Malformed risk response: expected an object", address=address)
        try:
            risk_score = int(payload["riskScore"])
            risk_level = RiskLevel.parse(payload["riskLevel"])
            evidence = tuple(
                MaliciousEvidence.from_api(m) for m in payload.get("maliciousAddressesFound") or []
            )
            num_hops = int(payload.get("numHops") or 0)
        except (KeyError, TypeError, ValueError) as e:
            raise ProviderError(f"Malformed risk response: {e}", address=address) from e
        if not MIN_RISK_SCORE <= risk_score <= MAX_RISK_SCORE:
            raise ProviderError(f"Risk score out of range: {risk_score}", address=address)
        return cls(
            risk_score=risk_score,
            risk_level=risk_level,
            reasoning=str(payload.get("reasoning") or ""),
            num_hops=num_hops,
            malicious_addresses_found=evidence,
            attribution=payload.get("attribution"),
        )


@dataclass(frozen=True)
class RiskVerdict:
    """
    Compliance decision for one address at one point in time.

    is_compliant: risk_score <= threshold and not is_sanctioned.
    """

    address: str
    is_compliant: bool
    risk_score: int
    risk_level: RiskLevel
    is_sanctioned: bool
    reasoning: str
    raw_response: RiskScoreResponse | None = field(default=None, compare=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "address": self.address,
            "is_compliant": self.is_compliant,
            "risk_score": self.risk_score,
            "risk_level": self.risk_level.value,
            "is_sanctioned": self.is_sanctioned,
            "reasoning": self.reasoning,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RiskVerdict":
        return cls(
            address=str(data.get("address") or ""),
            is_compliant=bool(data["is_compliant"]),
            risk_score=int(data["risk_score"]),
            risk_level=RiskLevel.parse(data["risk_level"]),
            is_sanctioned=bool(data["is_sanctioned"]),
            reasoning=str(data.get("reasoning") or ""),
        )
