"""Resolver factory for critical-css."""

from typing import MutableMapping, Optional
from .base import ContentResolver
from .filesystem import FileSystemResolver
from .memory import MemoryResolver
from ..utils.config import Options

def build_resolver(options: Options,
                   assets: Optional[MutableMapping[str, str]] = None) -> ContentResolver:
    """Create the resolver matching a set of options.

    Args:
        options: Inliner options; `path` and `request_timeout` are used
        assets: Optional in-memory assets; when given, the disk is only a
            fallback

    Returns:
        ContentResolver instance
    """
    disk = FileSystemResolver(options.path, request_timeout=options.request_timeout)
    if assets is None:
        return disk
    return MemoryResolver(options.path, assets, fallback=disk)

# Exported functions
__all__ = ['build_resolver']
