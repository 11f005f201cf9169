"""
Domain Errors

Every failure a domain service can report belongs to one of five kinds.
Each kind carries the HTTP status the API layer answers with, so views
translate errors without knowing which service raised them.
"""


class DomainError(Exception):
    """Base class for expected, caller-visible domain failures"""

    status_code = 400
    code = 'error'

    def __init__(self, message: str = ''):
        super().__init__(message)
        self.message = message or self.__class__.__doc__ or self.code


class ValidationError(DomainError):
    """Malformed input: bad dates, missing fields, out-of-range values"""

    status_code = 400
    code = 'validation_error'


class ConflictError(DomainError):
    """The requested state change collides with current state"""

    status_code = 409
    code = 'conflict'


class UpstreamError(DomainError):
    """An external collaborator (the payment gateway) failed"""

    status_code = 502
    code = 'upstream_error'


class AuthorizationError(DomainError):
    """The actor has no rights over the booking or equipment"""

    status_code = 403
    code = 'forbidden'


class NotFoundError(DomainError):
    """The booking or equipment id is unknown"""

    status_code = 404
    code = 'not_found'
