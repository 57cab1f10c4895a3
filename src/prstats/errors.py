"""Custom exception types for the GitHub PR stats generator."""


class PRStatsError(Exception):
    """Base exception for all recoverable PR stats errors."""


class ConfigurationError(PRStatsError):
    """Raised when runtime configuration values are missing or invalid."""


class InvalidConfigurationError(ConfigurationError):
    """Raised when a computation is invoked with structurally invalid parameters."""


class AuthenticationError(PRStatsError):
    """Raised when GitHub credentials are unavailable or rejected."""


class ApiError(PRStatsError):
    """Raised when a GitHub API request fails or returns an unexpected response."""


class DataValidationError(PRStatsError):
    """Raised when API payloads or derived records do not meet expected constraints."""


class InvalidIntervalError(DataValidationError):
    """Raised when an interval ends before it starts."""


class MalformedTimestampError(DataValidationError):
    """Raised when a timestamp cannot be parsed as ISO-8601."""
