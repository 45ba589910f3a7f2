"""
Amount splitter: partition a total into non-round fragments that sum to it.

One algorithm, two random sources:
- split_amount: fragment count drawn from a magnitude band, true randomness
  (random.SystemRandom) unless an rng is injected.
- split_amount_deterministic: explicit count and integer seed
  (random.Random(seed)); same (total, count, seed) gives the same output on
  every run and platform.

Weights are draw()**2 + 0.1 (biased toward unequal splits), each weighted
share gets +/-5% noise, is truncated to cents, and gets an odd
hundredths-of-a-cent offset. The residual goes to the last fragment.
Totals below MIN_FRAGMENTABLE_AMOUNT are returned as a single fragment.
Amounts are floats; above MAX_SPLIT_TOTAL a 4-decimal float no longer
conserves the total within CONSERVATION_TOLERANCE, so larger totals are rejected.
"""

from __future__ import annotations

import math
import random
from typing import Any

from backend_payshield.core.exceptions import ConservationViolationError, ValidationError
from backend_payshield.payshield_logging import get_logger

logger = get_logger(__name__)

MIN_FRAGMENTABLE_AMOUNT = 0.1
MAX_SPLIT_TOTAL = 1e10
AMOUNT_DECIMALS = 4
MIN_UNIT = 10 ** -AMOUNT_DECIMALS
CONSERVATION_TOLERANCE = 1e-4
NOISE_FRACTION = 0.1  # full width; +/-5% of the share
WEIGHT_FLOOR = 0.1
# Offsets in ten-thousandths, added after truncating to cents
OFFSET_MENU = (17, 23, 41, 67, 83, 91, 3, 7, 13, 29, 37, 43)
MAX_SPLIT_ATTEMPTS = 8
DEFAULT_DETERMINISTIC_SEED = 42

# (upper bound exclusive, (min_count, max_count)); totals >= last bound use LARGE_TOTAL_BAND
FRAGMENT_BANDS: tuple[tuple[float, tuple[int, int]], ...] = (
    (0.5, (2, 3)),
    (2.0, (3, 4)),
    (10.0, (3, 5)),
)
LARGE_TOTAL_BAND = (4, 7)

_SYSTEM_RANDOM = random.SystemRandom()


def fragment_band(total: float) -> tuple[int, int]:
    """Return the (min, max) fragment count band for a total."""
    for upper, band in FRAGMENT_BANDS:
        if total < upper:
            return band
    return LARGE_TOTAL_BAND


def _check_total(total: Any) -> float:
    if isinstance(total, bool):
        raise ValidationError("Invalid amount: expected a number")
    try:
        value = float(total)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid amount: {total!r} is not a number") from e
    if not math.isfinite(value) or value <= 0:
        raise ValidationError("Invalid amount: must be a positive finite number")
    if value > MAX_SPLIT_TOTAL:
        raise ValidationError(f"Invalid amount: totals above {MAX_SPLIT_TOTAL:.0e} cannot be split at 4-decimal precision")
    return value


def _check_count(total: float, count: int, name: str = "count") -> int:
    if isinstance(count, bool) or not isinstance(count, int):
        raise ValidationError(f"Invalid {name}: expected int")
    if count < 1:
        raise ValidationError(f"Invalid {name}: must be at least 1")
    if count * MIN_UNIT > total:
        raise ValidationError(f"Invalid {name}: {count} fragments cannot carry {total}")
    return count


def _draw_fragments(total: float, count: int, rng: random.Random) -> list[float]:
    weights = [rng.random() ** 2 + WEIGHT_FLOOR for _ in range(count)]
    weight_sum = sum(weights)
    amounts: list[float] = []
    for w in weights:
        share = w / weight_sum * total
        noisy = share + (rng.random() - 0.5) * NOISE_FRACTION * share
        offset = rng.choice(OFFSET_MENU) / 10_000
        amounts.append(math.floor(noisy * 100) / 100 + offset)
    amounts[-1] += total - sum(amounts)
    return [round(a, AMOUNT_DECIMALS) for a in amounts]


def _even_split(total: float, count: int) -> list[float]:
    """Noise-free fallback: equal shares floored to MIN_UNIT, residual last."""
    share = math.floor(round(total / count / MIN_UNIT, 6)) * MIN_UNIT
    amounts = [round(share, AMOUNT_DECIMALS)] * count
    amounts[-1] = round(amounts[-1] + total - sum(amounts), AMOUNT_DECIMALS)
    return amounts


def _verify_conservation(total: float, amounts: list[float]) -> None:
    fragment_sum = sum(amounts)
    if abs(fragment_sum - total) >= CONSERVATION_TOLERANCE:
        raise ConservationViolationError(total, fragment_sum)


def split_with_source(total: float, count: int, rng: random.Random) -> list[float]:
    """
    Split total into exactly `count` positive fragments using rng.

    Redraws (from the same rng) when the residual would leave the last
    fragment non-positive; after MAX_SPLIT_ATTEMPTS falls back to an even split.
    """
    value = _check_total(total)
    _check_count(value, count)
    for attempt in range(MAX_SPLIT_ATTEMPTS):
        amounts = _draw_fragments(value, count, rng)
        if all(a > 0 for a in amounts):
            break
        logger.debug("split_redraw", attempt=attempt + 1, count=count)
    else:
        logger.warning("split_fallback_even", count=count, attempts=MAX_SPLIT_ATTEMPTS)
        amounts = _even_split(value, count)
    _verify_conservation(value, amounts)
    return amounts


def split_amount(
    total: float,
    min_count: int | None = None,
    max_count: int | None = None,
    *,
    rng: random.Random | None = None,
) -> list[float]:
    """
    Split total into a random number of non-round fragments summing to total.

    Counts are taken from fragment_band(total) unless both min_count and
    max_count are given. Totals below MIN_FRAGMENTABLE_AMOUNT come back as [total].
    """
    value = _check_total(total)
    if value < MIN_FRAGMENTABLE_AMOUNT:
        return [total]
    source = rng or _SYSTEM_RANDOM
    if min_count is None or max_count is None:
        lo, hi = fragment_band(value)
    else:
        lo = _check_count(value, min_count, "min_count")
        hi = _check_count(value, max_count, "max_count")
        if lo > hi:
            raise ValidationError("Invalid fragment counts: min_count exceeds max_count")
    count = source.randint(lo, hi)
    return split_with_source(value, count, source)


def split_amount_deterministic(
    total: float,
    count: int,
    seed: int = DEFAULT_DETERMINISTIC_SEED,
) -> list[float]:
    """Reproducible split: same (total, count, seed) always yields the same list."""
    value = _check_total(total)
    if value < MIN_FRAGMENTABLE_AMOUNT:
        return [total]
    return split_with_source(value, count, random.Random(seed))
