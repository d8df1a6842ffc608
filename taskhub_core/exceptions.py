"""
TaskHub exception types.

Every error carries a stable ``code`` that both transports send to clients.
"""


class TaskHubError(Exception):
    """Base exception for all TaskHub errors"""
    code = "internal_error"
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(TaskHubError):
    """Malformed or missing input"""
    code = "validation_error"
    default_message = "Invalid request"


class MissingFieldsError(ValidationError):
    code = "missing_fields"
    default_message = "Username and password are required"


class WeakPasswordError(ValidationError):
    code = "weak_password"
    default_message = "Password must be at least 6 characters"


class TitleRequiredError(ValidationError):
    code = "title_required"
    default_message = "Title is required"


class InvalidStatusError(ValidationError):
    code = "invalid_status"
    default_message = "Status must be one of: pending, in_progress, done"


class InvalidDueDateError(ValidationError):
    code = "invalid_due_date"
    default_message = "Due date must be an ISO date (YYYY-MM-DD)"


class FileTooLargeError(ValidationError):
    """A file in an upload batch exceeds the size ceiling"""
    code = "file_too_large"
    default_message = "Maximum file size is 5 MB"

    def __init__(self, message: str | None = None, filename: str | None = None):
        super().__init__(message)
        self.filename = filename


class UsernameTakenError(TaskHubError):
    code = "username_taken"
    default_message = "Username is already taken"


class AuthError(TaskHubError):
    """Base exception for authentication failures"""
    code = "unauthenticated"
    default_message = "Authentication required"


class UnauthenticatedError(AuthError):
    """No session token was presented"""
    code = "unauthenticated"
    default_message = "Authentication required"


class InvalidTokenError(AuthError):
    """Session token failed signature, expiry or claim checks"""
    code = "invalid_token"
    default_message = "Invalid or expired session"


class InvalidCredentialsError(AuthError):
    """Unknown username or wrong password; the two are never distinguished"""
    code = "invalid_credentials"
    default_message = "Invalid username or password"


class NotFoundError(TaskHubError):
    """Record is absent or owned by someone else"""
    code = "not_found"
    default_message = "Not found"
