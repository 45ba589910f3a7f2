"""
Data models for fragmentation and scheduled release.

DerivedAddress: one mixing address derived from (seed, index).
Fragment: one sub-amount routed to a derived address.
ScheduledWithdrawal: a fragment with a release time and a forward-only status.
WithdrawalPlan: the full result of planning a private withdrawal.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from backend_payshield.core.exceptions import InvalidTransitionError


class WithdrawalStatus(str, Enum):
    """Release status; only moves forward."""

    PENDING = "pending"
    READY = "ready"
    EXECUTED = "executed"


@dataclass
class DerivedAddress:
    """Mixing address for (seed, index). Seed is never stored here."""

    index: int
    public_address: str
    used: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"index": self.index, "public_address": self.public_address, "used": self.used}


@dataclass(frozen=True)
class Fragment:
    amount: float
    target_address: str


@dataclass
class ScheduledWithdrawal:
    """
    One fragment scheduled for release.

    scheduled_time: Unix seconds. Status moves pending -> ready when
    scheduled_time <= now (refresh), ready -> executed once the transfer
    network confirms delivery (mark_executed). Never backward.
    """

    id: str
    amount: float
    target_address: str
    scheduled_time: int
    address_index: int
    status: WithdrawalStatus = WithdrawalStatus.PENDING
    transaction_id: str | None = None

    def refresh(self, now_ts: int) -> WithdrawalStatus:
        """Promote pending -> ready once the release time has passed."""
        if self.status is WithdrawalStatus.PENDING and self.scheduled_time <= now_ts:
            self.status = WithdrawalStatus.READY
        return self.status

    def mark_executed(self, transaction_id: str | None = None) -> None:
        if self.status is not WithdrawalStatus.READY:
            raise InvalidTransitionError(
                f"Withdrawal {self.id} cannot be executed from status {self.status.value}"
            )
        self.status = WithdrawalStatus.EXECUTED
        self.transaction_id = transaction_id

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "amount": self.amount,
            "target_address": self.target_address,
            "scheduled_time": self.scheduled_time,
            "address_index": self.address_index,
            "status": self.status.value,
            "transaction_id": self.transaction_id,
        }


@dataclass
class WithdrawalPlan:
    """
    Result of plan_private_withdrawal.

    next_index: first derivation index not consumed by this plan; pass it as
    start_index to the next plan built from the same seed.
    """

    total: float
    fragments: list[Fragment]
    addresses: list[DerivedAddress]
    withdrawals: list[ScheduledWithdrawal]
    privacy_score: int
    next_index: int
    created_at: int
    window_start: int | None = None
    window_end: int | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "fragments": [{"amount": f.amount, "target_address": f.target_address} for f in self.fragments],
            "addresses": [a.to_dict() for a in self.addresses],
            "withdrawals": [w.to_dict() for w in self.withdrawals],
            "privacy_score": self.privacy_score,
            "next_index": self.next_index,
            "created_at": self.created_at,
            "window_start": self.window_start,
            "window_end": self.window_end,
        }
