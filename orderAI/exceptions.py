"""Custom exception classes for the order runner."""


class AppException(Exception):
    """Base exception for application-specific errors."""

    pass


class AuthenticationError(AppException):
    """Raised when authentication fails."""

    pass


class ValidationError(AppException):
    """Raised when input validation fails."""

    pass


class InputFileError(ValidationError):
    """Raised when a plan or merchant config file cannot be loaded."""

    def __init__(self, message: str, path: str):
        super().__init__(f"{message} at {path}")
        self.path = path


class ConfigurationError(AppException):
    """Raised when a merchant config lacks a selector the run cannot do without."""

    def __init__(self, key: str):
        super().__init__(f'Missing selector for "{key}"')
        self.key = key


class DriverTimeoutError(AppException):
    """Raised when a UI target never reached the awaited state (visible, attached)."""

    def __init__(self, locator: str, timeout_ms: int, state: str = "visible"):
        super().__init__(f"Timeout after {timeout_ms}ms waiting for '{locator}' to be {state}")
        self.locator = locator
        self.timeout_ms = timeout_ms
        self.state = state


class PlanGenerationError(AppException):
    """Raised when plan generation fails."""

    pass


class RunnerError(AppException):
    """Raised when the order runner fails."""

    pass
