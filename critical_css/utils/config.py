"""Configuration utility for critical-css."""

import os
import re
import logging
from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Mapping, Optional, Pattern, Union
from .error import ConfigurationError

# Project version
VERSION = "1.0.0"

# Preload strategies for stylesheets that are not fully inlined
PRELOAD_MODES = (False, 'media', 'swap', 'swap-low', 'swap-high', 'js')

# How @keyframes blocks are distributed
KEYFRAMES_MODES = ('critical', 'all', 'none')

# Log level names accepted by the `log_level` option
LOG_LEVELS = {
    'trace': 5,
    'debug': logging.DEBUG,
    'info': logging.INFO,
    'warn': logging.WARNING,
    'error': logging.ERROR,
    'silent': logging.CRITICAL + 10,
}

# Timeouts (in seconds)
REQUEST_TIMEOUT = 30

# User-Agent for requests
USER_AGENT = (
    'Mozilla/5.0 (compatible; critical-css/' + VERSION + '; '
    '+https://pypi.org/project/critical-css/)'
)

# Supported file extensions
CSS_EXTENSIONS = ['.css']

Rule = Union[str, Pattern]


def _camel_to_snake(name: str) -> str:
    return re.sub(r'(?<!^)(?=[A-Z])', '_', name).lower()


@dataclass
class Options:
    """Options controlling how critical CSS is inlined.

    A single instance is threaded through the inliner, the stylesheet
    loader and the preload transformer; nothing reads process-wide defaults.
    """
    path: str = field(default_factory=os.getcwd)
    public_path: str = ''
    preload: Union[bool, str] = 'media'
    noscript_fallback: bool = True
    prune_source: bool = False
    minimum_external_size: int = 0
    additional_stylesheets: List[str] = field(default_factory=list)
    external: bool = True
    remote: bool = False
    inline_threshold: int = 0
    compress: bool = True
    merge_stylesheets: bool = True
    reduce_inline_styles: bool = True
    keyframes: str = 'critical'
    inline_fonts: bool = False
    preload_fonts: bool = False
    allow_rules: List[Rule] = field(default_factory=list)
    exclude_rules: List[Rule] = field(default_factory=list)
    log_level: str = 'info'
    logger: Optional[logging.Logger] = None
    request_timeout: Optional[float] = REQUEST_TIMEOUT

    def __post_init__(self):
        if self.preload in (None, 'false', True):
            # `True` keeps the default strategy
            self.preload = 'media' if self.preload is True else False
        if self.preload not in PRELOAD_MODES:
            raise ConfigurationError(
                f"Invalid preload mode {self.preload!r}, expected one of {PRELOAD_MODES}"
            )
        if self.keyframes not in KEYFRAMES_MODES:
            raise ConfigurationError(
                f"Invalid keyframes mode {self.keyframes!r}, expected one of {KEYFRAMES_MODES}"
            )
        if self.log_level not in LOG_LEVELS:
            raise ConfigurationError(
                f"Invalid log level {self.log_level!r}, expected one of {sorted(LOG_LEVELS)}"
            )
        for name in ('minimum_external_size', 'inline_threshold'):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                raise ConfigurationError(f"{name} must be a non-negative integer, got {value!r}")
        if self.request_timeout is not None and self.request_timeout <= 0:
            raise ConfigurationError("Request timeout must be positive")
        if not self.path:
            raise ConfigurationError("path must not be empty")
        self.path = os.path.abspath(self.path)
        if isinstance(self.additional_stylesheets, str):
            self.additional_stylesheets = [self.additional_stylesheets]
        self.allow_rules = self._compile_rules(self.allow_rules)
        self.exclude_rules = self._compile_rules(self.exclude_rules)

    @staticmethod
    def _compile_rules(rules) -> List[Rule]:
        if isinstance(rules, (str, re.Pattern)):
            rules = [rules]
        compiled = []
        for rule in rules or []:
            if isinstance(rule, (str, re.Pattern)):
                compiled.append(rule)
            else:
                raise ConfigurationError(f"Rules must be strings or compiled patterns, got {rule!r}")
        return compiled

    @property
    def level(self) -> int:
        """Numeric logging level for `log_level`."""
        return LOG_LEVELS[self.log_level]

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> 'Options':
        """Build options from a mapping using snake_case or camelCase keys.

        Args:
            data: Option values, e.g. loaded from a JSON config file

        Returns:
            Options instance

        Raises:
            ConfigurationError: If an unknown option is given
        """
        known = {f.name for f in fields(cls)}
        kwargs: Dict[str, Any] = {}
        for key, value in data.items():
            name = _camel_to_snake(key)
            if name not in known:
                raise ConfigurationError(f"Unknown option: {key}")
            kwargs[name] = value
        return cls(**kwargs)


# Exported config
__all__ = [
    'VERSION', 'PRELOAD_MODES', 'KEYFRAMES_MODES', 'LOG_LEVELS',
    'REQUEST_TIMEOUT', 'USER_AGENT',
    'CSS_EXTENSIONS',
    'Options',
]
