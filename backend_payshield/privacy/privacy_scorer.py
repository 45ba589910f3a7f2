"""
Privacy score: weighted composite of fragmentation, address uniqueness,
aging, and anonymity-pool size, rounded and clamped to 0-100.

split 30%: min(100, splits / 5 * 100)
address 25%: 100 when unique >= splits, else unique / splits * 100
aging 25%: min(100, hours / 48 * 100)
pool 20%: min(100, pool / 1000 * 100)
"""

from __future__ import annotations

import math
from dataclasses import dataclass

SPLIT_WEIGHT = 0.30
ADDRESS_WEIGHT = 0.25
AGING_WEIGHT = 0.25
POOL_WEIGHT = 0.20

TARGET_SPLITS = 5
TARGET_AGING_HOURS = 48
TARGET_POOL_SIZE = 1000


@dataclass(frozen=True)
class PrivacySignals:
    split_count: int
    unique_addresses: int
    min_aging_hours: float
    pool_size: int


def _capped(value: float, target: float) -> float:
    return max(0.0, min(100.0, value / target * 100))


def calculate_privacy_score(
    split_count: int,
    unique_addresses: int,
    min_aging_hours: float,
    pool_size: int,
) -> int:
    split_score = _capped(split_count, TARGET_SPLITS)
    if unique_addresses >= split_count or split_count <= 0:
        address_score = 100.0
    else:
        address_score = max(0.0, unique_addresses / split_count * 100)
    aging_score = _capped(min_aging_hours, TARGET_AGING_HOURS)
    pool_score = _capped(pool_size, TARGET_POOL_SIZE)
    total = (
        split_score * SPLIT_WEIGHT
        + address_score * ADDRESS_WEIGHT
        + aging_score * AGING_WEIGHT
        + pool_score * POOL_WEIGHT
    )
    # half-up rounding
    return int(max(0, min(100, math.floor(total + 0.5))))


def score(signals: PrivacySignals) -> int:
    """Score a PrivacySignals record."""
    return calculate_privacy_score(
        signals.split_count,
        signals.unique_addresses,
        signals.min_aging_hours,
        signals.pool_size,
    )
