"""
Selection engine error types.

Every error carries the HTTP status it maps to and a stable machine-readable
code, so the API layer renders them without looking at message text.
"""

from typing import Any, Dict


class SelectionEngineError(Exception):
    """Base class for all errors raised by the selection engine."""

    status_code: int = 500
    code: str = "internal_error"

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> Dict[str, Any]:
        return {"detail": self.message, "error": self.code}


class ValidationError(SelectionEngineError):
    """Missing or malformed input, e.g. an empty comment."""

    status_code = 400
    code = "validation_error"


class NotFoundError(SelectionEngineError):
    """Application, selection or course-scoped record is absent."""

    status_code = 404
    code = "not_found"


class ConflictError(SelectionEngineError):
    """Current state does not allow the operation; re-fetch before retrying."""

    status_code = 409
    code = "conflict"


class AlreadySelectedError(ConflictError):
    code = "already_selected"


class BoundaryError(SelectionEngineError):
    """Rank cannot move further in the requested direction."""

    status_code = 400
    code = "rank_boundary"


class AlreadyAtTopError(BoundaryError):
    code = "already_at_top"


class AlreadyAtBottomError(BoundaryError):
    code = "already_at_bottom"


class ForbiddenError(SelectionEngineError):
    status_code = 403
    code = "forbidden"


class InternalConsistencyError(SelectionEngineError):
    """Stored data violates an invariant the engine maintains."""

    status_code = 500
    code = "internal_consistency"


class RankGapError(InternalConsistencyError):
    """No selection holds the rank adjacent to the one being moved."""

    code = "rank_gap"


class InfrastructureError(SelectionEngineError):
    """Database unavailable or failing. Safe to retry with backoff."""

    status_code = 503
    code = "infrastructure_error"


class OperationTimeoutError(InfrastructureError):
    code = "operation_timeout"
