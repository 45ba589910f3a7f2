"""
JSON event logs for the privacy engine.

Every record carries event_type, level, logger and an ISO timestamp; attestation
records also carry attestation_id. Addresses go through mask_address() and
witness values (age, balances) are stripped before rendering.
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, TextIO

import structlog

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_LEVEL_VALUE = getattr(logging, LOG_LEVEL, logging.INFO)

# json (default) or console
LOG_FORMAT = os.getenv("LOG_FORMAT", "json").strip().lower()

ADDRESS_MASK_PREFIX = 8

WITNESS_FIELDS = frozenset({"age", "balance", "balances", "witness", "private_inputs"})


def _stamp_event(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Move structlog's 'event' to event_type and add a UTC timestamp."""
    if "event" in event_dict and "event_type" not in event_dict:
        event_dict["event_type"] = event_dict.pop("event")
    event_dict.setdefault("timestamp", datetime.now(timezone.utc).isoformat())
    return event_dict


def _drop_witness_fields(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    for key in WITNESS_FIELDS.intersection(event_dict):
        del event_dict[key]
    return event_dict


def _renderer(fmt: str) -> Any:
    if fmt == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def configure_structlog(
    level: int = LOG_LEVEL_VALUE,
    fmt: str = LOG_FORMAT,
    stream: TextIO | None = None,
) -> None:
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.format_exc_info,
            _drop_witness_fields,
            _stamp_event,
            _renderer(fmt),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream or sys.stdout),
        cache_logger_on_first_use=True,
    )


if not structlog.is_configured():
    configure_structlog()


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Logger bound to its module name.

        logger = get_logger(__name__)
        logger.info("compliance_checked", address=mask_address(addr), risk_score=3)
    """
    return structlog.get_logger(name).bind(logger=name)


def mask_address(address: str | None) -> str:
    """First 8 chars of an address followed by '...'."""
    if not address:
        return "?"
    if len(address) <= ADDRESS_MASK_PREFIX:
        return address
    return address[:ADDRESS_MASK_PREFIX] + "..."


def bind_attestation(attestation_id: str) -> structlog.BoundLogger:
    return get_logger("backend_payshield.attestation").bind(attestation_id=attestation_id)
