"""Domain exceptions shared by the feature services.

Each exception carries the HTTP status and the stable machine-readable code
that the API layer renders into the error envelope.
"""
from typing import Optional


class DocitError(Exception):
    """Base class for expected application failures"""

    status_code = 500
    code = "INTERNAL_SERVER_ERROR"

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code


class ValidationError(DocitError):
    status_code = 400
    code = "VALIDATION_ERROR"


class AuthenticationError(DocitError):
    status_code = 401
    code = "UNAUTHORIZED"


class NotFoundError(DocitError):
    """Resource is missing or the caller has no access to it.

    The two cases look the same to the caller.
    """

    status_code = 404
    code = "NOT_FOUND"


class ConflictError(DocitError):
    status_code = 409
    code = "CONFLICT"


class UpstreamError(DocitError):
    """An external collaborator (storage, AI, identity provider) failed"""

    status_code = 502
    code = "UPSTREAM_ERROR"
