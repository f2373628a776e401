"""Structured JSON logging for production observability"""

import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from pythonjsonlogger import jsonlogger
from riskmap.config import settings

# Set per HTTP request; tasks spawned while handling it inherit the value
request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name

        request_id = request_id_var.get()
        if request_id is not None:
            log_record.setdefault("request_id", request_id)


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


def log_figure_rebuilt(operation: str, age_weight: float, point_count: int, duration_ms: float) -> None:
    """Log a committed figure rebuild for analysis"""
    logging.getLogger("riskmap.controller").info(
        "Figure rebuilt",
        extra={
            "step": "figure_rebuilt",
            "operation": operation,
            "age_weight": age_weight,
            "point_count": point_count,
            "duration_ms": duration_ms,
        },
    )
