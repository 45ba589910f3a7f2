"""
Environment variable loading and validation for PayShield.

- RANGE_API_KEY: risk provider API key (mock provider used when absent)
- RANGE_BASE_URL: risk provider base URL
- USE_MOCK_RANGE: force the in-process mock risk provider
- MAX_RISK_THRESHOLD, DEFAULT_MINIMUM_AGE, DEFAULT_MIN_BALANCE: attestation defaults
- COMPLIANCE_BATCH_CONCURRENCY: batch screening window size
- USE_REAL_PROOFS: set false to ignore an injected proving backend
- RISK_REQUEST_TIMEOUT: HTTP timeout for risk queries (seconds)
- Loads .env from project root when available.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

from backend_payshield.payshield_logging import get_logger

logger = get_logger(__name__)

# Project root: config is backend_payshield/config/, root is 2 levels up
_CONFIG_DIR = Path(__file__).resolve().parent
_BACKEND_DIR = _CONFIG_DIR.parent
_ROOT = _BACKEND_DIR.parent
_ENV_PATH = _ROOT / ".env"

DEFAULT_RANGE_BASE_URL = "https://api.range.org"
DEFAULT_MAX_RISK_THRESHOLD = 5
DEFAULT_MINIMUM_AGE = 18
DEFAULT_MIN_BALANCE_USD = 0.0
DEFAULT_BATCH_CONCURRENCY = 5
DEFAULT_RISK_REQUEST_TIMEOUT = 30.0

_TRUTHY = ("1", "true", "yes", "on")
_FALSY = ("0", "false", "no", "off")


def load_payshield_env() -> None:
    """Load .env from project root. Safe to call multiple times; existing env wins."""
    if _ENV_PATH.is_file():
        load_dotenv(_ENV_PATH, override=False)


def _get_str(name: str) -> str:
    return (os.getenv(name) or "").strip()


def _get_int(name: str, default: int) -> int:
    raw = _get_str(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("env_invalid_int", name=name, value=raw, default=default)
        return default


def _get_float(name: str, default: float) -> float:
    raw = _get_str(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("env_invalid_float", name=name, value=raw, default=default)
        return default


def _get_bool(name: str, default: bool) -> bool:
    raw = _get_str(name).lower()
    if raw in _TRUTHY:
        return True
    if raw in _FALSY:
        return False
    return default


def get_range_api_key() -> str | None:
    """Return RANGE_API_KEY, or None when unset."""
    load_payshield_env()
    return _get_str("RANGE_API_KEY") or None


def get_range_base_url() -> str:
    load_payshield_env()
    return _get_str("RANGE_BASE_URL") or DEFAULT_RANGE_BASE_URL


def use_mock_risk_provider() -> bool:
    """
    Return True when the mock risk provider should be used.
    USE_MOCK_RANGE=1 forces it; a missing RANGE_API_KEY implies it.
    """
    load_payshield_env()
    if _get_bool("USE_MOCK_RANGE", False):
        return True
    return get_range_api_key() is None


def get_max_risk_threshold() -> int:
    load_payshield_env()
    return _get_int("MAX_RISK_THRESHOLD", DEFAULT_MAX_RISK_THRESHOLD)


def get_default_minimum_age() -> int:
    load_payshield_env()
    return _get_int("DEFAULT_MINIMUM_AGE", DEFAULT_MINIMUM_AGE)


def get_default_min_balance_usd() -> float:
    load_payshield_env()
    return _get_float("DEFAULT_MIN_BALANCE", DEFAULT_MIN_BALANCE_USD)


def get_batch_concurrency() -> int:
    load_payshield_env()
    return max(1, _get_int("COMPLIANCE_BATCH_CONCURRENCY", DEFAULT_BATCH_CONCURRENCY))


def use_real_proofs() -> bool:
    """Return False only when USE_REAL_PROOFS is explicitly disabled."""
    load_payshield_env()
    return _get_bool("USE_REAL_PROOFS", True)


def get_risk_request_timeout() -> float:
    load_payshield_env()
    return _get_float("RISK_REQUEST_TIMEOUT", DEFAULT_RISK_REQUEST_TIMEOUT)
