"""Error taxonomy shared by services and API routes"""
from contextlib import contextmanager
from typing import List, Optional

from pymongo.errors import PyMongoError

from studykit.utils.monitoring import StructuredLogger


class ToolkitError(Exception):
    """Base error carrying the HTTP status it maps to"""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"detail": self.message, "error": type(self).__name__}


class ValidationError(ToolkitError):
    status_code = 400


class NotFoundError(ToolkitError):
    status_code = 404


class AlreadyNotifiedError(ToolkitError):
    status_code = 400


class UpstreamQuotaError(ToolkitError):
    status_code = 429


class SuggestionError(ToolkitError):
    status_code = 502


class PersistenceError(ToolkitError):
    status_code = 500


class MailDeliveryError(ToolkitError):
    status_code = 500


class PlannerStepError(PersistenceError):
    """A multi-step planner mutation failed part way through"""

    def __init__(self, operation: str, failed_step: str, completed_steps: Optional[List[str]] = None):
        self.operation = operation
        self.failed_step = failed_step
        self.completed_steps = list(completed_steps or [])
        done = ", ".join(self.completed_steps) or "none"
        super().__init__(
            f"Planner {operation} failed at step '{failed_step}' (completed: {done})"
        )

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["operation"] = self.operation
        data["failed_step"] = self.failed_step
        data["completed_steps"] = self.completed_steps
        return data


@contextmanager
def persistence_errors(action: str):
    """Translate document store driver failures into PersistenceError"""
    try:
        yield
    except PyMongoError as e:
        StructuredLogger.log_error(e, context={"action": action})
        raise PersistenceError(f"Failed to {action}") from e
