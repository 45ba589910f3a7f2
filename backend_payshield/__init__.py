"""
Backend PayShield: private payroll transfer engine.

Splits payouts into non-round fragments routed through freshly derived
addresses, schedules their release with decorrelated timing, scores the
resulting privacy posture, and gates transfers behind compliance screening
and proof-backed attestations.
"""

__version__ = "0.1.0"
