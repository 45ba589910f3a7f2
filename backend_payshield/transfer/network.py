"""
Transfer network interface and token helpers.

The shielded transfer network (deposit / withdraw / transfer / balance) is an
external collaborator; this module defines the narrow interface the engine
calls, the result types, and per-token decimals and relayer fees.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_FLOOR, Decimal
from typing import Any, Awaitable, Callable, Protocol

from backend_payshield.core.exceptions import ValidationError

Signer = Callable[[bytes], Awaitable[bytes]]

# token -> (decimals, relayer fee percent)
TOKEN_INFO: dict[str, tuple[int, float]] = {
    "SOL": (9, 0.5),
    "RADR": (9, 0.3),
    "USDC": (6, 1.0),
    "ORE": (11, 0.3),
    "BONK": (5, 1.0),
    "JIM": (9, 1.0),
    "GODL": (11, 1.0),
    "HUSTLE": (9, 0.3),
    "ZEC": (9, 1.0),
    "CRT": (9, 1.0),
    "BLACKCOIN": (6, 1.0),
    "GIL": (6, 1.0),
    "ANON": (9, 1.0),
    "WLFI": (6, 1.0),
    "USD1": (6, 1.0),
    "AOL": (6, 1.0),
    "IQLABS": (9, 0.5),
    "SANA": (6, 1.0),
    "POKI": (9, 1.0),
    "RAIN": (6, 2.0),
    "HOSICO": (9, 1.0),
    "SKR": (6, 0.5),
}


@dataclass
class TransferResult:
    success: bool
    transaction_id: str | None = None
    error: str | None = None
    fee: float | None = None
    net_amount: float | None = None


@dataclass(frozen=True)
class BalanceResult:
    available: float
    pending: float
    token: str


@dataclass(frozen=True)
class FeeQuote:
    fee: float
    net_amount: float
    fee_percent: float


class TransferNetwork(Protocol):
    async def deposit(self, wallet: str, amount: float, token: str = "SOL") -> TransferResult: ...

    async def withdraw(self, wallet: str, amount: float, token: str = "SOL") -> TransferResult: ...

    async def transfer(
        self,
        sender: str,
        recipient: str,
        amount: float,
        token: str = "SOL",
        *,
        signer: Signer | None = None,
    ) -> TransferResult: ...

    async def get_balance(self, wallet: str, token: str = "SOL") -> BalanceResult: ...


def token_info(token: str) -> tuple[int, float]:
    try:
        return TOKEN_INFO[token.upper()]
    except (KeyError, AttributeError) as e:
        raise ValidationError(f"Unsupported token: {token!r}") from e


def supported_tokens() -> list[str]:
    return list(TOKEN_INFO)


def calculate_fee(amount: float, token: str) -> FeeQuote:
    _, fee_percent = token_info(token)
    fee = amount * (fee_percent / 100)
    return FeeQuote(fee=fee, net_amount=amount - fee, fee_percent=fee_percent)


def to_smallest_unit(amount: Any, token: str) -> int:
    """Floor amount to the token's base units (e.g. lamports for SOL)."""
    decimals, _ = token_info(token)
    scaled = Decimal(str(amount)) * (Decimal(10) ** decimals)
    return int(scaled.to_integral_value(rounding=ROUND_FLOOR))


def from_smallest_unit(units: int, token: str) -> float:
    decimals, _ = token_info(token)
    return units / 10 ** decimals
