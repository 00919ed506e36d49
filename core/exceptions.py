"""Typed failures raised by the services and mapped to HTTP codes in main.py."""


class SchedulingError(Exception):
    status_code = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFoundError(SchedulingError):
    status_code = 404


class ValidationError(SchedulingError):
    status_code = 400


class ConflictError(SchedulingError):
    status_code = 409


class InvalidStateError(SchedulingError):
    status_code = 400


class AuthorizationError(SchedulingError):
    status_code = 401


class ForbiddenError(SchedulingError):
    status_code = 403
