"""
Withdrawal scheduler: Poisson-like release times for fragments.

Cursor starts at now + min_aging. For each fragment in order: add an
exponential inter-arrival delay (mean avg_delay, delay = -avg * ln(1 - U)),
then add symmetric jitter of +/- jitter_seconds. Jitter can invert adjacent
release times; output keeps fragment order and is not sorted.
Each fragment goes to a fresh address derived at a monotonically increasing index.
"""

from __future__ import annotations

import math
import random
import time
import uuid
from dataclasses import dataclass
from typing import Sequence

from backend_payshield.core.exceptions import ValidationError
from backend_payshield.payshield_logging import get_logger
from backend_payshield.privacy.address_deriver import derive_address
from backend_payshield.privacy.models import ScheduledWithdrawal, WithdrawalStatus

logger = get_logger(__name__)

MIN_AGING_SECONDS = 24 * 60 * 60
AVG_DELAY_SECONDS = 4 * 60 * 60
JITTER_SECONDS = 30 * 60

_SYSTEM_RANDOM = random.SystemRandom()


@dataclass
class SchedulerConfig:
    """
    min_aging_seconds: minimum delay before the first release can happen.
    avg_delay_seconds: mean of the exponential inter-arrival delay.
    jitter_seconds: half-width of the uniform jitter added to each release.
    """

    min_aging_seconds: int = MIN_AGING_SECONDS
    avg_delay_seconds: int = AVG_DELAY_SECONDS
    jitter_seconds: int = JITTER_SECONDS

    def __post_init__(self) -> None:
        if self.min_aging_seconds < 0 or self.avg_delay_seconds < 0 or self.jitter_seconds < 0:
            raise ValidationError("Scheduler durations must be non-negative")

    @property
    def min_aging_hours(self) -> float:
        return self.min_aging_seconds / 3600


def exponential_delay(mean_seconds: float, rng: random.Random) -> float:
    """Inverse-CDF draw from Exp(1/mean); U in [0, 1) keeps ln(1 - U) finite."""
    return -mean_seconds * math.log(1.0 - rng.random())


def _withdrawal_id(index: int) -> str:
    return f"wd_{uuid.uuid4().hex[:12]}_{index}"


def schedule_withdrawals(
    amounts: Sequence[float],
    seed: bytes,
    *,
    now_ts: int | None = None,
    rng: random.Random | None = None,
    start_index: int = 0,
    config: SchedulerConfig | None = None,
) -> list[ScheduledWithdrawal]:
    """
    Assign release times and fresh target addresses to fragment amounts.

    Address for amounts[i] is derived at start_index + i. Returned list is in
    the same order as amounts, all pending.
    """
    cfg = config or SchedulerConfig()
    source = rng or _SYSTEM_RANDOM
    now_ts = now_ts if now_ts is not None else int(time.time())

    cursor = float(now_ts + cfg.min_aging_seconds)
    out: list[ScheduledWithdrawal] = []
    for offset, amount in enumerate(amounts):
        index = start_index + offset
        cursor += exponential_delay(cfg.avg_delay_seconds, source)
        jitter = (source.random() - 0.5) * 2 * cfg.jitter_seconds
        out.append(
            ScheduledWithdrawal(
                id=_withdrawal_id(index),
                amount=amount,
                target_address=derive_address(seed, index),
                scheduled_time=int(round(cursor + jitter)),
                address_index=index,
            )
        )
    if out:
        logger.debug(
            "withdrawals_scheduled",
            count=len(out),
            first_release=min(w.scheduled_time for w in out),
            last_release=max(w.scheduled_time for w in out),
        )
    return out


def refresh_statuses(withdrawals: Sequence[ScheduledWithdrawal], now_ts: int | None = None) -> list[ScheduledWithdrawal]:
    """Promote due withdrawals to ready; return those that are ready now."""
    now_ts = now_ts if now_ts is not None else int(time.time())
    return [w for w in withdrawals if w.refresh(now_ts) is WithdrawalStatus.READY]
