"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Optional
from pythonjsonlogger import jsonlogger
from receivables_exchange.config import settings


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

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_purchase(
    request_id: Optional[str],
    investor_id: str,
    security_id: str,
    total_value: Decimal,
    commission: Decimal,
    transaction_id: str,
    duration_ms: float,
) -> None:
    """Log structured purchase outcome for reconciliation"""
    logging.info(
        "Purchase completed",
        extra={
            "request_id": request_id,
            "user_id": investor_id,
            "security_id": security_id,
            "step": "purchase_complete",
            "total_value": str(total_value),
            "commission": str(commission),
            "transaction_id": transaction_id,
            "duration_ms": duration_ms,
        },
    )


def log_settlement(
    request_id: Optional[str],
    merchant_id: str,
    security_id: str,
    investor_id: Optional[str],
    amount: Decimal,
    duration_ms: float,
) -> None:
    """Log structured settlement outcome"""
    logging.info(
        "Settlement completed",
        extra={
            "request_id": request_id,
            "user_id": merchant_id,
            "security_id": security_id,
            "investor_id": investor_id,
            "step": "settlement_complete",
            "amount": str(amount),
            "duration_ms": duration_ms,
        },
    )


def log_watchlist_purchase(
    request_id: Optional[str],
    investor_id: str,
    purchased: int,
    skipped: int,
    duration_ms: float,
) -> None:
    """Log batch purchase outcome; skipped items are expected under contention"""
    logging.info(
        "Watchlist purchase completed",
        extra={
            "request_id": request_id,
            "user_id": investor_id,
            "step": "watchlist_purchase_complete",
            "purchased_count": purchased,
            "skipped_count": skipped,
            "duration_ms": duration_ms,
        },
    )
