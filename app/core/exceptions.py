from typing import Any, Dict


class WorkflowError(Exception):
    """Error de dominio con su código HTTP y datos extra para la respuesta."""

    status_code = 500

    def __init__(self, message: str, **extra: Any):
        super().__init__(message)
        self.message = message
        self.extra: Dict[str, Any] = extra

    def to_dict(self) -> Dict[str, Any]:
        return {"success": False, "detail": self.message, **self.extra}


class ValidationFailed(WorkflowError):
    status_code = 400


class NotFound(WorkflowError):
    status_code = 404


class Conflict(WorkflowError):
    status_code = 409


class StoreError(WorkflowError):
    status_code = 500
