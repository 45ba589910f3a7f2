"""
Private withdrawal planning: split -> derive -> schedule -> score.

Pure CPU work; nothing here touches the network. The plan is handed to the
transfer executor (transfer.executor) which releases fragments as they come due.
"""

from __future__ import annotations

import random
import time

from backend_payshield.payshield_logging import get_logger
from backend_payshield.privacy.amount_splitter import split_amount
from backend_payshield.privacy.models import DerivedAddress, Fragment, WithdrawalPlan
from backend_payshield.privacy.privacy_scorer import PrivacySignals, score
from backend_payshield.privacy.withdrawal_scheduler import SchedulerConfig, schedule_withdrawals

logger = get_logger(__name__)


def plan_private_withdrawal(
    total: float,
    seed: bytes,
    *,
    pool_size: int = 0,
    rng: random.Random | None = None,
    now_ts: int | None = None,
    start_index: int = 0,
    min_count: int | None = None,
    max_count: int | None = None,
    scheduler_config: SchedulerConfig | None = None,
) -> WithdrawalPlan:
    """
    Build a full withdrawal plan for total.

    pool_size: current anonymity-pool size reported by the transfer network.
    start_index: first derivation index to use; plan.next_index follows the last one used.
    """
    cfg = scheduler_config or SchedulerConfig()
    now_ts = now_ts if now_ts is not None else int(time.time())

    amounts = split_amount(total, min_count, max_count, rng=rng)
    withdrawals = schedule_withdrawals(
        amounts,
        seed,
        now_ts=now_ts,
        rng=rng,
        start_index=start_index,
        config=cfg,
    )
    addresses = [
        DerivedAddress(index=w.address_index, public_address=w.target_address, used=True)
        for w in withdrawals
    ]
    fragments = [Fragment(amount=w.amount, target_address=w.target_address) for w in withdrawals]

    privacy_score = score(
        PrivacySignals(
            split_count=len(fragments),
            unique_addresses=len({a.public_address for a in addresses}),
            min_aging_hours=cfg.min_aging_hours,
            pool_size=pool_size,
        )
    )
    times = [w.scheduled_time for w in withdrawals]
    plan = WithdrawalPlan(
        total=total,
        fragments=fragments,
        addresses=addresses,
        withdrawals=withdrawals,
        privacy_score=privacy_score,
        next_index=start_index + len(withdrawals),
        created_at=now_ts,
        window_start=min(times) if times else None,
        window_end=max(times) if times else None,
    )
    logger.info(
        "withdrawal_planned",
        fragment_count=len(fragments),
        privacy_score=privacy_score,
        window_hours=round((plan.window_end - now_ts) / 3600, 1) if plan.window_end else 0,
    )
    return plan
