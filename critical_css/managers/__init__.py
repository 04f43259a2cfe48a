"""Stylesheet resolvers for critical-css."""

from .base import ContentResolver
from .filesystem import FileSystemResolver
from .memory import MemoryResolver
from .network import NetworkManager
from .factory import build_resolver

# Exported classes
__all__ = [
    'ContentResolver',
    'FileSystemResolver',
    'MemoryResolver',
    'NetworkManager',
    'build_resolver'
]
