"""
Risk-score providers.

RiskProvider is the narrow interface the gateway consumes. RangeRiskClient
queries the HTTP risk API (bearer auth, GET /v1/risk/address) with retry on
429 and transport errors; any failure surfaces as ProviderError.
MockRiskProvider answers in-process for demos and tests.
"""

from __future__ import annotations

import asyncio
from typing import Any, Protocol

import httpx

from backend_payshield.config.env import DEFAULT_RANGE_BASE_URL, DEFAULT_RISK_REQUEST_TIMEOUT
from backend_payshield.config.settings import Settings
from backend_payshield.compliance.models import RiskLevel, RiskScoreResponse
from backend_payshield.core.exceptions import ProviderError
from backend_payshield.payshield_logging import get_logger, mask_address

logger = get_logger(__name__)

RISK_ADDRESS_PATH = "/v1/risk/address"
RISK_NETWORK = "solana"
MAX_RETRIES = 3
RETRY_BACKOFF = 1.0


class RiskProvider(Protocol):
    async def get_risk_score(self, address: str) -> RiskScoreResponse: ...


class RangeRiskClient:
    """
    Async client for the address risk API.

    Owns its httpx.AsyncClient; use as an async context manager or call
    aclose(). transport is passed through to httpx (tests use MockTransport).
    """

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = DEFAULT_RANGE_BASE_URL,
        timeout: float = DEFAULT_RISK_REQUEST_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
        max_retries: int = MAX_RETRIES,
        retry_backoff: float = RETRY_BACKOFF,
    ) -> None:
        if not api_key:
            raise ValueError("RangeRiskClient requires an API key")
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
        )
        self.max_retries = max(1, max_retries)
        self.retry_backoff = retry_backoff

    async def __aenter__(self) -> "RangeRiskClient":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request_with_retry(self, address: str) -> httpx.Response:
        last_err: Exception | None = None
        for attempt in range(self.max_retries):
            try:
                r = await self._client.get(
                    RISK_ADDRESS_PATH,
                    params={"address": address, "network": RISK_NETWORK},
                )
                if r.status_code == 429 and attempt < self.max_retries - 1:
                    await asyncio.sleep(self.retry_backoff * (2 ** attempt))
                    continue
                return r
            except httpx.TransportError as e:
                last_err = e
                logger.warning(
                    "risk_request_retry",
                    address=mask_address(address),
                    attempt=attempt + 1,
                    error=str(e),
                )
                if attempt < self.max_retries - 1:
                    await asyncio.sleep(self.retry_backoff * (2 ** attempt))
        raise ProviderError(f"Risk provider unreachable: {last_err}", address=address) from last_err

    async def get_risk_score(self, address: str) -> RiskScoreResponse:
        r = await self._request_with_retry(address)
        if r.status_code >= 400:
            raise ProviderError(
                f"Risk provider returned HTTP {r.status_code}",
                address=address,
                status_code=r.status_code,
            )
        try:
            payload = r.json()
        except ValueError as e:
            raise ProviderError("Risk provider returned invalid JSON", address=address) from e
        return RiskScoreResponse.from_api(payload, address=address)


DEFAULT_MOCK_RESPONSE = RiskScoreResponse(
    risk_score=1,
    risk_level=RiskLevel.VERY_LOW,
    reasoning="No suspicious paths found within 5 hops.",
    num_hops=5,
)


class MockRiskProvider:
    """In-process provider: very-low-risk default, per-address overrides or failures."""

    def __init__(self, default: RiskScoreResponse = DEFAULT_MOCK_RESPONSE) -> None:
        self.default = default
        self._responses: dict[str, RiskScoreResponse] = {}
        self._failures: dict[str, Exception] = {}
        self.calls: list[str] = []

    def set_response(self, address: str, response: RiskScoreResponse) -> None:
        self._responses[address] = response

    def set_failure(self, address: str, error: Exception) -> None:
        self._failures[address] = error

    async def get_risk_score(self, address: str) -> RiskScoreResponse:
        self.calls.append(address)
        if address in self._failures:
            raise self._failures[address]
        return self._responses.get(address, self.default)


def create_risk_provider(settings: Settings) -> RiskProvider:
    """Mock provider when configured (or no key); otherwise the HTTP client."""
    if settings.use_mock_risk_provider or not settings.range_api_key:
        logger.info("risk_provider_selected", provider="mock")
        return MockRiskProvider()
    logger.info("risk_provider_selected", provider="range", base_url=settings.range_base_url)
    return RangeRiskClient(
        settings.range_api_key,
        base_url=settings.range_base_url,
        timeout=settings.risk_request_timeout,
    )
