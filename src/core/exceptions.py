"""Custom exception classes for the Fika quiz platform.

This module defines application-specific exceptions following Google Python
Style Guide.
"""


class QuizPlatformError(Exception):
    """Base exception for all quiz platform errors."""

    pass


class UserNotFoundError(QuizPlatformError):
    """Raised when a requested user cannot be found."""

    def __init__(self, user_id: str):
        """Initialize the exception.

        Args:
            user_id: The ID of the user that was not found.
        """
        self.user_id = user_id
        super().__init__(f"User '{user_id}' not found")


class InsufficientPointsError(QuizPlatformError):
    """Raised when a user cannot afford a module unlock."""

    def __init__(self, user_id: str, required: int):
        """Initialize the exception.

        Args:
            user_id: The ID of the user attempting the spend.
            required: Number of points the spend requires.
        """
        self.user_id = user_id
        self.required = required
        super().__init__("Insufficient Fika points")


class ModuleAlreadyUnlockedError(QuizPlatformError):
    """Raised when a concurrent request recorded the same unlock first."""

    def __init__(self, chapter: int, module: int):
        self.chapter = chapter
        self.module = module
        super().__init__(
            f"Module {module} of chapter {chapter} was unlocked by another request"
        )


class InvalidScoreError(QuizPlatformError):
    """Raised when a submitted score is outside the quiz's range."""

    pass


class ConfigurationError(QuizPlatformError):
    """Raised when there is a configuration error."""

    pass
