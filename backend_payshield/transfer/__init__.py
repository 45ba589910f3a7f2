"""
Transfer network interface, token helpers, and scheduled-withdrawal execution.
"""

from backend_payshield.transfer.executor import execute_ready_withdrawals
from backend_payshield.transfer.network import (
    TOKEN_INFO,
    BalanceResult,
    FeeQuote,
    TransferNetwork,
    TransferResult,
    calculate_fee,
    from_smallest_unit,
    supported_tokens,
    to_smallest_unit,
    token_info,
)

__all__ = [
    "TOKEN_INFO",
    "BalanceResult",
    "FeeQuote",
    "TransferNetwork",
    "TransferResult",
    "calculate_fee",
    "execute_ready_withdrawals",
    "from_smallest_unit",
    "supported_tokens",
    "to_smallest_unit",
    "token_info",
]
