"""
Tests for end-to-end private withdrawal planning (split, derive, schedule, score).
"""

from __future__ import annotations

import random

from backend_payshield.privacy.address_deriver import derive_address
from backend_payshield.privacy.amount_splitter import fragment_band
from backend_payshield.privacy.privacy_scorer import calculate_privacy_score
from backend_payshield.privacy.withdrawal_planner import plan_private_withdrawal
from backend_payshield.privacy.withdrawal_scheduler import SchedulerConfig

NOW = 1_700_000_000


def test_plan_conserves_total(seed):
    plan = plan_private_withdrawal(25.0, seed, rng=random.Random(8), now_ts=NOW)
    assert abs(sum(f.amount for f in plan.fragments) - 25.0) < 1e-4
    lo, hi = fragment_band(25.0)
    assert lo <= len(plan.fragments) <= hi


def test_plan_uses_fresh_addresses(seed):
    plan = plan_private_withdrawal(25.0, seed, rng=random.Random(8), now_ts=NOW, start_index=3)
    n = len(plan.fragments)
    assert [a.index for a in plan.addresses] == list(range(3, 3 + n))
    assert all(a.used for a in plan.addresses)
    assert len({a.public_address for a in plan.addresses}) == n
    assert plan.fragments[0].target_address == derive_address(seed, 3)
    assert plan.next_index == 3 + n


def test_consecutive_plans_do_not_reuse_addresses(seed):
    first = plan_private_withdrawal(5.0, seed, rng=random.Random(1), now_ts=NOW)
    second = plan_private_withdrawal(5.0, seed, rng=random.Random(2), now_ts=NOW, start_index=first.next_index)
    used = {a.public_address for a in first.addresses}
    assert used.isdisjoint({a.public_address for a in second.addresses})


def test_plan_score_and_window(seed):
    plan = plan_private_withdrawal(25.0, seed, rng=random.Random(8), now_ts=NOW, pool_size=400)
    n = len(plan.fragments)
    assert plan.privacy_score == calculate_privacy_score(n, n, 24, 400)
    times = [w.scheduled_time for w in plan.withdrawals]
    assert plan.window_start == min(times)
    assert plan.window_end == max(times)
    assert plan.created_at == NOW


def test_plan_custom_aging_changes_score(seed):
    short = plan_private_withdrawal(
        25.0, seed, rng=random.Random(8), now_ts=NOW, scheduler_config=SchedulerConfig(min_aging_seconds=0)
    )
    long = plan_private_withdrawal(
        25.0, seed, rng=random.Random(8), now_ts=NOW, scheduler_config=SchedulerConfig(min_aging_seconds=48 * 3600)
    )
    assert long.privacy_score > short.privacy_score


def test_plan_small_total_single_fragment(seed):
    plan = plan_private_withdrawal(0.05, seed, now_ts=NOW)
    assert [f.amount for f in plan.fragments] == [0.05]
    assert plan.next_index == 1


def test_plan_to_dict(seed):
    d = plan_private_withdrawal(3.0, seed, rng=random.Random(6), now_ts=NOW).to_dict()
    assert d["total"] == 3.0
    assert len(d["fragments"]) == len(d["withdrawals"]) == len(d["addresses"])
    assert all(w["status"] == "pending" for w in d["withdrawals"])
