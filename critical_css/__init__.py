"""Inline critical CSS into HTML documents and defer the rest."""

from .core import Inliner, InlineResult, inline_critical_css
from .utils.config import VERSION, Options
from .utils.error import (
    CriticalCSSError,
    ConfigurationError,
    ResolutionError,
    PathEscapeError,
    NetworkError,
    UnsafeMediaQueryError,
    MalformedCSSError,
    FileOperationError,
)

__version__ = VERSION

__all__ = [
    'Inliner',
    'InlineResult',
    'inline_critical_css',
    'Options',
    'CriticalCSSError',
    'ConfigurationError',
    'ResolutionError',
    'PathEscapeError',
    'NetworkError',
    'UnsafeMediaQueryError',
    'MalformedCSSError',
    'FileOperationError',
]
