"""Structured JSON logging for the toolkit API"""
import json
import logging
import traceback
from datetime import datetime, timezone
from typing import Dict, Any, Optional

from studykit.config import settings

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(),
    ]
)

logger = logging.getLogger("studykit")


class StructuredLogger:
    """One JSON object per log line, tagged with the running environment"""

    @staticmethod
    def log_event(
        event_type: str,
        message: str,
        metadata: Optional[Dict[str, Any]] = None,
        level: str = "INFO"
    ):
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "service": "student-life-toolkit",
            "environment": settings.ENVIRONMENT,
            "event_type": event_type,
            "message": message,
            "level": level,
        }

        if metadata:
            log_data["metadata"] = metadata

        log_message = json.dumps(log_data, default=str)

        if level == "ERROR":
            logger.error(log_message)
        elif level == "WARNING":
            logger.warning(log_message)
        else:
            logger.info(log_message)

    @staticmethod
    def log_planner_event(
        event_type: str,
        message: str,
        task_date: str,
        task_id: Optional[int] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        """Planner events always carry the day and, when known, the task id"""
        data: Dict[str, Any] = {"date": task_date}
        if task_id is not None:
            data["task_id"] = task_id
        data.update(metadata or {})
        StructuredLogger.log_event(event_type, message, metadata=data)

    @staticmethod
    def log_error(
        error: Exception,
        context: Optional[Dict[str, Any]] = None,
    ):
        """Log an exception with its traceback and the store/request context"""
        StructuredLogger.log_event(
            event_type="error",
            message=str(error),
            metadata={
                "error_type": type(error).__name__,
                "status_code": getattr(error, "status_code", 500),
                "traceback": traceback.format_exc(),
                "context": context or {},
            },
            level="ERROR"
        )
