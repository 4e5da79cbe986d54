"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger
from commission_schedule.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_reconciliation(
    sale_id: int,
    trigger: str,
    generated_count: int,
    preserved_paid_count: int,
    purged_count: int,
    duration_ms: float,
) -> None:
    """Log structured reconciliation outcome for a single sale"""
    logging.getLogger("commission_schedule.reconciler").info(
        "Schedule reconciled",
        extra={
            "sale_id": sale_id,
            "step": "reconcile_complete",
            "trigger": trigger,
            "generated_count": generated_count,
            "preserved_paid_count": preserved_paid_count,
            "purged_count": purged_count,
            "duration_ms": duration_ms,
        },
    )
