"""File system resolver for critical-css."""

import os
from pathlib import Path
from typing import List, Optional
from .base import ContentResolver
from .network import NetworkManager
from ..utils.config import CSS_EXTENSIONS, REQUEST_TIMEOUT
from ..utils.error import FileOperationError, NetworkError, ResolutionError
from ..utils.file import read_text_file, write_text_file
from ..utils.path import is_path_in_directory, relative_asset_name

class FileSystemResolver(ContentResolver):
    """Resolve stylesheets from disk and remote URLs from the network."""

    def __init__(self, root: str, network: Optional[NetworkManager] = None,
                 request_timeout: Optional[float] = REQUEST_TIMEOUT):
        """Initialize file system resolver.

        Args:
            root: Directory assets are resolved against
            network: Network manager used for remote stylesheets
            request_timeout: Timeout for the default network manager
        """
        super().__init__()
        self.root = os.path.abspath(root)
        self._network = network
        self._request_timeout = request_timeout

    @property
    def network(self) -> NetworkManager:
        # created lazily, most runs never fetch anything
        if self._network is None:
            self._network = NetworkManager(request_timeout=self._request_timeout)
        return self._network

    async def read(self, path: str) -> str:
        self.stats['reads'] += 1
        try:
            return await read_text_file(path)
        except FileNotFoundError:
            self.stats['errors'] += 1
            raise ResolutionError(f"Stylesheet not found: {path}")
        except FileOperationError as e:
            self.stats['errors'] += 1
            raise ResolutionError(str(e))

    async def fetch(self, url: str) -> str:
        self.stats['fetches'] += 1
        try:
            return await self.network.fetch_text(url)
        except NetworkError:
            self.stats['errors'] += 1
            raise

    async def write(self, path: str, text: str) -> None:
        self.stats['writes'] += 1
        await write_text_file(path, text)
        self.log_debug(f"Wrote {len(text)} characters to {path}")

    def match_assets(self, pattern: str) -> List[str]:
        pattern = pattern.lstrip('/')
        if not pattern:
            return []
        names = []
        for match in Path(self.root).glob(pattern):
            if not match.is_file() or match.suffix.lower() not in CSS_EXTENSIONS:
                continue
            if not is_path_in_directory(str(match), self.root):
                continue
            names.append(relative_asset_name(str(match), self.root))
        return sorted(names)

    def cleanup(self) -> None:
        if self._network is not None:
            self._network.cleanup()

# Exported class
__all__ = ['FileSystemResolver']
