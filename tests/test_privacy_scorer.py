"""
Tests for the privacy score.
"""

from __future__ import annotations

import pytest

from backend_payshield.privacy.privacy_scorer import PrivacySignals, calculate_privacy_score, score


def test_perfect_score():
    assert calculate_privacy_score(5, 5, 48, 1000) == 100


def test_single_split_scores_low():
    assert calculate_privacy_score(1, 0, 0, 0) < 50


def test_component_weights():
    # 60*0.30 + 100*0.25 + 50*0.25 + 50*0.20 = 65.5
    assert calculate_privacy_score(3, 3, 24, 500) == 66


def test_half_rounds_up():
    # 40*0.30 + 100*0.25 + 50*0.25 = 49.5
    assert calculate_privacy_score(2, 2, 24, 0) == 50


def test_reused_addresses_penalized():
    assert calculate_privacy_score(4, 2, 48, 1000) < calculate_privacy_score(4, 4, 48, 1000)


def test_caps_at_targets():
    assert calculate_privacy_score(50, 50, 480, 10**6) == 100


@pytest.mark.parametrize(
    "signals",
    [(0, 0, 0, 0), (-3, -3, -10, -5), (1000, 0, 1e6, 10**9), (3, 10, 0, 0), (0, -1, 0, 0)],
)
def test_always_in_range(signals):
    assert 0 <= calculate_privacy_score(*signals) <= 100


def test_monotonic_in_each_input():
    base = dict(split_count=3, unique_addresses=3, min_aging_hours=12, pool_size=200)
    prev = None
    for hours in range(0, 100, 4):
        s = calculate_privacy_score(**{**base, "min_aging_hours": hours})
        assert prev is None or s >= prev
        prev = s
    prev = None
    for pool in range(0, 1500, 50):
        s = calculate_privacy_score(**{**base, "pool_size": pool})
        assert prev is None or s >= prev
        prev = s
    prev = None
    for unique in range(0, 8):
        s = calculate_privacy_score(**{**base, "unique_addresses": unique})
        assert prev is None or s >= prev
        prev = s
    # split count with one fresh address per fragment
    prev = None
    for n in range(1, 10):
        s = calculate_privacy_score(**{**base, "split_count": n, "unique_addresses": n})
        assert prev is None or s >= prev
        prev = s


def test_score_from_signals():
    signals = PrivacySignals(split_count=5, unique_addresses=5, min_aging_hours=48, pool_size=1000)
    assert score(signals) == 100
