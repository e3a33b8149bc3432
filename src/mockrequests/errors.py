"""Exceptions raised by mockrequests."""


class MockRequestsError(Exception):
    """Base class for every error raised by this package."""
    pass


class ConfigurationError(MockRequestsError, ValueError):
    """Raised when handlers are misconfigured at construction time."""
    pass


class PortExhaustedError(MockRequestsError, OSError):
    """Raised when no free port was found within the allowed attempts."""

    def __init__(self, attempts: int, message: str):
        super().__init__(message)
        self.attempts = attempts


class RequestAssertionError(MockRequestsError, AssertionError):
    """A mocked request did not behave as the test expected."""
    pass


class RequestNotCalledError(RequestAssertionError):
    """Raised when a request was never called."""

    def __init__(self, url: str, message: str):
        super().__init__(message)
        self.url = url


class _CallCountError(RequestAssertionError):
    def __init__(self, url: str, expected_calls: int, actual_calls: int, message: str):
        super().__init__(message)
        self.url = url
        self.expected_calls = expected_calls
        self.actual_calls = actual_calls


class RequestCalledTooOftenError(_CallCountError):
    """Raised when a request was called more times than expected."""
    pass


class RequestCalledTooFewError(_CallCountError):
    """Raised when a request was called fewer times than expected."""
    pass


class NoMoreHandlersError(RequestAssertionError):
    """Raised when a sequenced handler receives more calls than it has handlers."""
    pass


class ContentMismatchError(RequestAssertionError):
    """Raised when a request body differs from the expected content."""

    def __init__(self, expected: str, actual: str):
        super().__init__(
            f"Expected content to be equivalent to {expected!r}, "
            f"but {actual!r} differs"
        )
        self.expected = expected
        self.actual = actual
