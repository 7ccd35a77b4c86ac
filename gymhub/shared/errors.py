"""Business-rule errors raised by the service layer.

The HTTP layer maps each error to its status code; the services never retry,
since every one of these is a deterministic rejection.
"""


class GymError(Exception):
    """Base class for rejections that carry a human-readable reason"""

    status_code = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ValidationError(GymError):
    status_code = 400


class ForbiddenError(GymError):
    status_code = 403


class NotFoundError(GymError):
    status_code = 404


class ConflictError(GymError):
    status_code = 409
