"""
Structured logging for Backend PayShield.

JSON logs with timestamp, event_type, and masked addresses.
Use get_logger() in all engine modules.
"""

from backend_payshield.payshield_logging.logger import bind_attestation, get_logger, mask_address

__all__ = ["bind_attestation", "get_logger", "mask_address"]
