from fastapi import status


class ServiceError(Exception):
    """Base exception for service layer errors."""

    def __init__(self, message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ValidationError(ServiceError):
    """Raised when input is rejected before any write is issued."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_400_BAD_REQUEST)


class NotFoundError(ServiceError):
    """Raised when a record is missing or not owned by the caller."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_404_NOT_FOUND)


class ConflictError(ServiceError):
    """Raised when a write collides with existing data."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_409_CONFLICT)


class ActivationCodeUsedError(ConflictError):
    """Raised when an activation code was already consumed by another registration."""

    def __init__(self, code: str) -> None:
        self.code = code
        super().__init__("Activation code already used")


class AccountExpiredError(ServiceError):
    """Raised when a teacher's authorization has lapsed or was never activated."""

    def __init__(self, message: str = "Account expired. Contact the administrator for a new activation code.") -> None:
        super().__init__(message, status.HTTP_403_FORBIDDEN)


class InvalidCredentialsError(ServiceError):
    def __init__(self, message: str = "Invalid username or password") -> None:
        super().__init__(message, status.HTTP_401_UNAUTHORIZED)


class CommitInProgressError(ConflictError):
    def __init__(self) -> None:
        super().__init__("A group assignment commit is already in progress")


class CommitError(ServiceError):
    """Raised when persisting a group assignment fails; nothing from the batch was kept."""

    def __init__(self, message: str = "Failed to save group assignment") -> None:
        super().__init__(message, status.HTTP_500_INTERNAL_SERVER_ERROR)
