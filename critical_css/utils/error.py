"""Error utility for critical-css."""

class CriticalCSSError(Exception):
    """Base exception for critical-css."""
    pass

class ConfigurationError(CriticalCSSError):
    """Raised when configuration is invalid."""
    pass

class ResolutionError(CriticalCSSError):
    """Raised when a stylesheet reference cannot be resolved to text."""
    pass

class PathEscapeError(ResolutionError):
    """Raised when a local stylesheet path falls outside the configured root."""
    pass

class NetworkError(ResolutionError):
    """Raised when network operations fail."""
    pass

class UnsafeMediaQueryError(CriticalCSSError):
    """Raised when a media query is not safe to write into an attribute."""
    pass

class MalformedCSSError(CriticalCSSError):
    """Raised when a stylesheet cannot be parsed."""
    pass

class FileOperationError(CriticalCSSError):
    """Raised when file operations fail."""
    pass

# Exported exceptions
__all__ = [
    'CriticalCSSError',
    'ConfigurationError',
    'ResolutionError',
    'PathEscapeError',
    'NetworkError',
    'UnsafeMediaQueryError',
    'MalformedCSSError',
    'FileOperationError',
]
