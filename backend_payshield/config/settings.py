"""
Application settings.

Builds a typed, immutable Settings object from the environment getters in
config.env. Services take Settings (or explicit arguments) at construction;
nothing reads the environment per call.
"""

from __future__ import annotations

from dataclasses import dataclass

from backend_payshield.config import env


@dataclass(frozen=True)
class Settings:
    """Engine configuration; see config.env for the backing variables."""

    range_api_key: str | None = None
    range_base_url: str = env.DEFAULT_RANGE_BASE_URL
    use_mock_risk_provider: bool = True
    max_risk_threshold: int = env.DEFAULT_MAX_RISK_THRESHOLD
    default_minimum_age: int = env.DEFAULT_MINIMUM_AGE
    default_min_balance_usd: float = env.DEFAULT_MIN_BALANCE_USD
    batch_concurrency: int = env.DEFAULT_BATCH_CONCURRENCY
    use_real_proofs: bool = True
    risk_request_timeout: float = env.DEFAULT_RISK_REQUEST_TIMEOUT


def get_settings() -> Settings:
    """Return settings resolved from the current environment (and .env)."""
    return Settings(
        range_api_key=env.get_range_api_key(),
        range_base_url=env.get_range_base_url(),
        use_mock_risk_provider=env.use_mock_risk_provider(),
        max_risk_threshold=env.get_max_risk_threshold(),
        default_minimum_age=env.get_default_minimum_age(),
        default_min_balance_usd=env.get_default_min_balance_usd(),
        batch_concurrency=env.get_batch_concurrency(),
        use_real_proofs=env.use_real_proofs(),
        risk_request_timeout=env.get_risk_request_timeout(),
    )
