"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pythonjsonlogger import jsonlogger

from installment_ledger.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: Optional[str] = None) -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level or settings.log_level)

    # Remove existing handlers
    logger.handlers.clear()

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_rebalance_warning(entry_id: Optional[str], code: str, installment_number: int, message: str) -> None:
    """Log an auto-correction the user must be told about"""
    logging.warning(
        "Rebalance warning",
        extra={
            "entry_id": entry_id,
            "step": "rebalance",
            "warning_code": code,
            "installment_number": installment_number,
            "detail": message,
        },
    )


def log_validation_outcome(entry_id: Optional[str], ok: bool, error_codes: list, warning_count: int) -> None:
    """Log structured validation outcome on submit"""
    logging.log(
        logging.INFO if ok else logging.WARNING,
        "Entry validated",
        extra={
            "entry_id": entry_id,
            "step": "validate",
            "outcome": "accepted" if ok else "rejected",
            "error_codes": error_codes,
            "warning_count": warning_count,
        },
    )


def log_payment(entry_id: Optional[str], installment_number: int, amount_cents: int, status: str) -> None:
    """Log a registered payment and the resulting settlement status"""
    logging.info(
        "Payment registered",
        extra={
            "entry_id": entry_id,
            "step": "payment",
            "installment_number": installment_number,
            "amount_cents": amount_cents,
            "status": status,
        },
    )
