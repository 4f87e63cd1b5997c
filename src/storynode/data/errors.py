"""Custom exceptions for story document loading and validation."""


class DataError(Exception):
    """Base exception for the data layer."""


class DataLoadError(DataError):
    """Raised when project files are missing or are not valid JSON."""


class DataValidationError(DataError):
    """Raised when a story document fails structural validation."""
