"""Base resolver class for critical-css."""

import logging
from typing import Dict, Any, List
from abc import ABC, abstractmethod

class ContentResolver(ABC):
    """Base class for stylesheet content resolvers.

    A resolver is the only component that touches storage: it reads local
    stylesheets, fetches remote ones and writes pruned stylesheets back.
    Paths passed in are already absolute and checked against the root.
    """

    def __init__(self):
        """Initialize base resolver."""
        self.logger = logging.getLogger(self.__class__.__name__)
        self.stats: Dict[str, int] = {
            'reads': 0,
            'fetches': 0,
            'writes': 0,
            'errors': 0,
        }

    @abstractmethod
    async def read(self, path: str) -> str:
        """Read a local stylesheet.

        Args:
            path: Absolute path of the stylesheet

        Returns:
            Stylesheet text

        Raises:
            ResolutionError: If the stylesheet cannot be read
        """

    @abstractmethod
    async def fetch(self, url: str) -> str:
        """Fetch a remote stylesheet.

        Args:
            url: Absolute http(s) URL

        Returns:
            Stylesheet text

        Raises:
            NetworkError: If the request fails or is not successful
        """

    @abstractmethod
    async def write(self, path: str, text: str) -> None:
        """Write a stylesheet back to storage.

        Args:
            path: Absolute path of the stylesheet
            text: New content

        Raises:
            FileOperationError: If the write fails
        """

    @abstractmethod
    def match_assets(self, pattern: str) -> List[str]:
        """Find stylesheet assets matching a glob pattern.

        Args:
            pattern: Glob pattern relative to the root

        Returns:
            Matching asset names relative to the root, sorted
        """

    def get_stats(self) -> Dict[str, Any]:
        """Get resolver statistics."""
        return dict(self.stats)

    def log_warning(self, message: str) -> None:
        """Log warning message.

        Args:
            message: Warning message
        """
        self.logger.warning(message)

    def log_debug(self, message: str) -> None:
        """Log debug message.

        Args:
            message: Debug message
        """
        self.logger.debug(message)

    def cleanup(self) -> None:
        """Release resources held by the resolver."""
        pass

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.cleanup()

# Exported class
__all__ = ['ContentResolver']
