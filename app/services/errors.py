from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass
class ServiceError(Exception):
    """Consistent service-layer exception with HTTP-friendly metadata."""

    status_code: int
    code: str
    message: str
    details: Dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:  # pragma: no cover - convenience for logging
        return f"{self.status_code} {self.code}: {self.message} | {self.details}"


class ConflictError(ServiceError):
    """Duplicate bookmark of the same program for the same user."""

    def __init__(self, message: str = "Resource already exists", details: Dict[str, Any] = None):
        super().__init__(409, "CONFLICT", message, details or {})


class NotFoundError(ServiceError):
    def __init__(self, resource: str = "Resource", details: Dict[str, Any] = None):
        super().__init__(404, "NOT_FOUND", f"{resource} not found", details or {})


class InvalidStatusTransitionError(ServiceError):
    """Saved aide status change outside the saved -> applied -> received/rejected graph."""

    def __init__(self, current: str, requested: str):
        super().__init__(
            422,
            "INVALID_STATUS_TRANSITION",
            f"Cannot move a saved aide from '{current}' to '{requested}'",
            {"from": current, "to": requested},
        )


class ExternalServiceError(ServiceError):
    def __init__(self, service: str, message: str):
        super().__init__(503, "EXTERNAL_SERVICE_ERROR", f"{service} error: {message}", {"service": service})
