"""
Release of scheduled withdrawals through the transfer network.

Each call refreshes statuses against now, sends every ready fragment to its
derived target address, and marks it executed on confirmed delivery. A failed
transfer is logged and left ready for the next pass; nothing is rolled back.
"""

from __future__ import annotations

import time
from typing import Sequence

from backend_payshield.payshield_logging import get_logger, mask_address
from backend_payshield.privacy.models import ScheduledWithdrawal
from backend_payshield.privacy.withdrawal_scheduler import refresh_statuses
from backend_payshield.transfer.network import Signer, TransferNetwork, TransferResult, token_info

logger = get_logger(__name__)


async def execute_ready_withdrawals(
    withdrawals: Sequence[ScheduledWithdrawal],
    network: TransferNetwork,
    sender: str,
    *,
    token: str = "SOL",
    now_ts: int | None = None,
    signer: Signer | None = None,
) -> dict[str, TransferResult]:
    """Execute due withdrawals sequentially; return results keyed by withdrawal id."""
    token_info(token)
    now_ts = now_ts if now_ts is not None else int(time.time())
    results: dict[str, TransferResult] = {}
    for w in refresh_statuses(withdrawals, now_ts):
        try:
            result = await network.transfer(sender, w.target_address, w.amount, token, signer=signer)
        except Exception as e:
            logger.warning(
                "withdrawal_transfer_failed",
                withdrawal_id=w.id,
                target=mask_address(w.target_address),
                error=str(e),
            )
            results[w.id] = TransferResult(success=False, error=str(e))
            continue
        results[w.id] = result
        if result.success:
            w.mark_executed(result.transaction_id)
            logger.info("withdrawal_executed", withdrawal_id=w.id, target=mask_address(w.target_address))
        else:
            logger.warning("withdrawal_transfer_rejected", withdrawal_id=w.id, error=result.error)
    return results
