"""
Domain errors for submission transitions and publishing jobs.

Each error carries the HTTP status code the API layer responds with.
"""

from typing import Any, Dict, Optional


class PubflowError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = 500

    def __init__(
        self,
        detail: str,
        *,
        status_code: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(detail)
        self.detail = detail
        if status_code is not None:
            self.status_code = status_code
        self.context = context or {}


class AuthenticationRequired(PubflowError):
    status_code = 401


class PermissionDenied(PubflowError):
    status_code = 403


class InvalidTransition(PubflowError):
    """Target state not reachable from the current state."""

    status_code = 400


class InvalidPayload(PubflowError):
    status_code = 400


class NotFound(PubflowError):
    status_code = 404


class SubmissionNotFound(NotFound):
    pass


class JobNotFound(NotFound):
    pass


class WorkflowNotFound(NotFound, LookupError):
    pass


class ConflictError(PubflowError):
    """A concurrent writer changed the record first (optimistic concurrency)."""

    status_code = 409


class PreconditionFailed(PubflowError):
    """The request is well formed but the stored state forbids it."""

    status_code = 422


class StorageNotConfigured(PubflowError):
    """No storage backend available for a job-based transition."""

    status_code = 500


class JobFailed(PubflowError):
    """A storage step failed after the job record was created."""

    status_code = 500
