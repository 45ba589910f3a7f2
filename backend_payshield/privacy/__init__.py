"""
Fragmentation engine: address derivation, amount splitting, release
scheduling, and privacy scoring for private withdrawals.
"""

from backend_payshield.privacy.address_deriver import (
    create_keypair_signer,
    derive,
    derive_address,
    derive_addresses,
    derive_keypair,
    export_secret_key,
)
from backend_payshield.privacy.amount_splitter import (
    fragment_band,
    split_amount,
    split_amount_deterministic,
    split_with_source,
)
from backend_payshield.privacy.models import (
    DerivedAddress,
    Fragment,
    ScheduledWithdrawal,
    WithdrawalPlan,
    WithdrawalStatus,
)
from backend_payshield.privacy.privacy_scorer import PrivacySignals, calculate_privacy_score, score
from backend_payshield.privacy.withdrawal_planner import plan_private_withdrawal
from backend_payshield.privacy.withdrawal_scheduler import (
    SchedulerConfig,
    refresh_statuses,
    schedule_withdrawals,
)

__all__ = [
    "DerivedAddress",
    "Fragment",
    "PrivacySignals",
    "ScheduledWithdrawal",
    "SchedulerConfig",
    "WithdrawalPlan",
    "WithdrawalStatus",
    "calculate_privacy_score",
    "create_keypair_signer",
    "derive",
    "derive_address",
    "derive_addresses",
    "derive_keypair",
    "export_secret_key",
    "fragment_band",
    "plan_private_withdrawal",
    "refresh_statuses",
    "schedule_withdrawals",
    "score",
    "split_amount",
    "split_amount_deterministic",
    "split_with_source",
]
