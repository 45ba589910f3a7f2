"""
Compliance screening: risk providers and the fail-closed compliance gateway.
"""

from backend_payshield.compliance.gateway import SANCTION_CATEGORIES, ComplianceGateway, SanctionPolicy
from backend_payshield.compliance.models import MaliciousEvidence, RiskLevel, RiskScoreResponse, RiskVerdict
from backend_payshield.compliance.risk_client import (
    MockRiskProvider,
    RangeRiskClient,
    RiskProvider,
    create_risk_provider,
)

__all__ = [
    "SANCTION_CATEGORIES",
    "ComplianceGateway",
    "MaliciousEvidence",
    "MockRiskProvider",
    "RangeRiskClient",
    "RiskLevel",
    "RiskProvider",
    "RiskScoreResponse",
    "RiskVerdict",
    "SanctionPolicy",
    "create_risk_provider",
]
