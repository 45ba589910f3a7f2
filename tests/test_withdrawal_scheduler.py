"""
Tests for withdrawal scheduling and forward-only status transitions.
"""

from __future__ import annotations

import random

import pytest

from backend_payshield.core.exceptions import InvalidTransitionError, ValidationError
from backend_payshield.privacy.address_deriver import derive_address
from backend_payshield.privacy.models import ScheduledWithdrawal, WithdrawalStatus
from backend_payshield.privacy.withdrawal_scheduler import (
    JITTER_SECONDS,
    MIN_AGING_SECONDS,
    SchedulerConfig,
    exponential_delay,
    refresh_statuses,
    schedule_withdrawals,
)

NOW = 1_700_000_000


class SequenceRandom(random.Random):
    """random() returns the given values in order."""

    def __init__(self, values):
        super().__init__(0)
        self._values = list(values)

    def random(self):
        return self._values.pop(0)


def _withdrawal(scheduled_time: int = NOW) -> ScheduledWithdrawal:
    return ScheduledWithdrawal(
        id="wd_test_0",
        amount=1.0,
        target_address="target",
        scheduled_time=scheduled_time,
        address_index=0,
    )


def test_default_config():
    cfg = SchedulerConfig()
    assert cfg.min_aging_seconds == 24 * 3600
    assert cfg.avg_delay_seconds == 4 * 3600
    assert cfg.jitter_seconds == 30 * 60
    assert cfg.min_aging_hours == 24


def test_config_rejects_negative():
    with pytest.raises(ValidationError):
        SchedulerConfig(jitter_seconds=-1)


def test_schedule_preserves_order_and_amounts(seed):
    amounts = [1.2317, 0.8841, 2.0042]
    out = schedule_withdrawals(amounts, seed, now_ts=NOW, rng=random.Random(1))
    assert [w.amount for w in out] == amounts
    assert all(w.status is WithdrawalStatus.PENDING for w in out)
    assert len({w.id for w in out}) == 3


def test_schedule_respects_min_aging(seed):
    out = schedule_withdrawals([0.1] * 50, seed, now_ts=NOW)
    for w in out:
        assert w.scheduled_time >= NOW + MIN_AGING_SECONDS - JITTER_SECONDS


def test_schedule_fresh_addresses(seed):
    out = schedule_withdrawals([1.0, 2.0, 3.0], seed, now_ts=NOW, rng=random.Random(2), start_index=5)
    assert [w.address_index for w in out] == [5, 6, 7]
    assert [w.target_address for w in out] == [derive_address(seed, i) for i in (5, 6, 7)]
    assert out[0].id.startswith("wd_") and out[0].id.endswith("_5")


def test_schedule_exact_times_from_source(seed):
    cfg = SchedulerConfig(min_aging_seconds=100, avg_delay_seconds=1000, jitter_seconds=60)
    # (delay draw, jitter draw) per fragment; U=0 gives zero delay, 0.5 gives zero jitter
    out = schedule_withdrawals([1.0], seed, now_ts=NOW, rng=SequenceRandom([0.0, 0.5]), config=cfg)
    assert out[0].scheduled_time == NOW + 100


def test_jitter_can_invert_order(seed):
    cfg = SchedulerConfig(min_aging_seconds=100, avg_delay_seconds=1000, jitter_seconds=60)
    rng = SequenceRandom([0.0, 0.999, 0.01, 0.0])
    first, second = schedule_withdrawals([1.0, 2.0], seed, now_ts=NOW, rng=rng, config=cfg)
    assert first.amount == 1.0 and second.amount == 2.0
    assert second.scheduled_time < first.scheduled_time


def test_schedule_empty(seed):
    assert schedule_withdrawals([], seed, now_ts=NOW) == []


def test_exponential_delay_mean():
    rng = random.Random(99)
    draws = [exponential_delay(3600, rng) for _ in range(20_000)]
    assert all(d >= 0 for d in draws)
    assert 3400 < sum(draws) / len(draws) < 3800


def test_refresh_moves_pending_to_ready():
    w = _withdrawal(NOW + 10)
    assert w.refresh(NOW) is WithdrawalStatus.PENDING
    assert w.refresh(NOW + 10) is WithdrawalStatus.READY
    assert w.refresh(NOW) is WithdrawalStatus.READY


def test_mark_executed_requires_ready():
    w = _withdrawal(NOW + 10)
    with pytest.raises(InvalidTransitionError, match="pending"):
        w.mark_executed("tx")
    w.refresh(NOW + 10)
    w.mark_executed("tx_1")
    assert w.status is WithdrawalStatus.EXECUTED
    assert w.transaction_id == "tx_1"


def test_executed_never_moves_backward():
    w = _withdrawal(NOW)
    w.refresh(NOW)
    w.mark_executed("tx_1")
    assert w.refresh(NOW + 1000) is WithdrawalStatus.EXECUTED
    with pytest.raises(InvalidTransitionError):
        w.mark_executed("tx_2")
    assert w.transaction_id == "tx_1"


def test_refresh_statuses_returns_ready(seed):
    out = schedule_withdrawals([1.0, 2.0, 3.0], seed, now_ts=NOW, rng=random.Random(4))
    latest = max(w.scheduled_time for w in out)
    earliest = min(w.scheduled_time for w in out)
    assert refresh_statuses(out, NOW) == []
    assert len(refresh_statuses(out, earliest)) >= 1
    assert len(refresh_statuses(out, latest)) == 3


def test_withdrawal_to_dict():
    d = _withdrawal().to_dict()
    assert d["status"] == "pending"
    assert d["transaction_id"] is None
    assert d["scheduled_time"] == NOW
