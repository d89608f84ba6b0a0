"""Custom exceptions for social signal lookups."""


class SignalProviderError(Exception):
    """Raised when a social provider lookup fails."""
    pass
