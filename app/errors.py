"""
Error taxonomy shared by the services and the API layer.
Each error carries the HTTP status the API answers with.
"""
from typing import Optional


class TaskboardError(Exception):
    status_code = 500
    default_message = "Server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(TaskboardError):
    status_code = 401
    default_message = "Token invalid"


class InvalidCredentials(TaskboardError):
    status_code = 401
    default_message = "Invalid email or password"


class Forbidden(TaskboardError):
    status_code = 403
    default_message = "Not allowed"


class NotFound(TaskboardError):
    status_code = 404
    default_message = "Not found"


class Conflict(TaskboardError):
    status_code = 400
    default_message = "Already exists"


class ValidationFailed(TaskboardError):
    status_code = 400
    default_message = "Invalid request"
