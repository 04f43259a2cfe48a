"""In-memory resolver for critical-css."""

import os
import fnmatch
from typing import Dict, List, MutableMapping, Optional
from .base import ContentResolver
from ..utils.error import NetworkError, ResolutionError
from ..utils.path import relative_asset_name

class MemoryResolver(ContentResolver):
    """Resolve stylesheets from a mapping of asset names to CSS.

    Used when stylesheets only exist in memory, e.g. the output of a build
    step that has not been written yet. Writes update the mapping, so
    pruned stylesheets replace the original assets.
    """

    def __init__(self, root: str, assets: Optional[MutableMapping[str, str]] = None,
                 fallback: Optional[ContentResolver] = None):
        """Initialize memory resolver.

        Args:
            root: Directory asset names are relative to
            assets: Mapping of asset name to stylesheet text
            fallback: Resolver used for assets missing from the mapping
        """
        super().__init__()
        self.root = os.path.abspath(root)
        self.assets: MutableMapping[str, str] = assets if assets is not None else {}
        self.fallback = fallback

    def _name(self, path: str) -> str:
        return relative_asset_name(path, self.root)

    async def read(self, path: str) -> str:
        self.stats['reads'] += 1
        name = self._name(path)
        if name in self.assets:
            return self.assets[name]
        if self.fallback is None:
            self.stats['errors'] += 1
            raise ResolutionError(f"Asset not found: {name}")
        text = await self.fallback.read(path)
        self.log_warning(
            f"{name} was not found in the build assets and was read from disk, "
            f"its source will not be pruned"
        )
        return text

    async def fetch(self, url: str) -> str:
        self.stats['fetches'] += 1
        if self.fallback is None:
            self.stats['errors'] += 1
            raise NetworkError(f"No network access to fetch {url}")
        return await self.fallback.fetch(url)

    async def write(self, path: str, text: str) -> None:
        self.stats['writes'] += 1
        name = self._name(path)
        if name not in self.assets:
            self.log_warning(f"Not writing {name}, it is not a build asset")
            return
        self.assets[name] = text

    def match_assets(self, pattern: str) -> List[str]:
        pattern = pattern.lstrip('/')
        names = {name for name in self.assets if fnmatch.fnmatchcase(name, pattern)}
        if self.fallback is not None:
            names.update(self.fallback.match_assets(pattern))
        return sorted(names)

    def get_stats(self) -> Dict[str, int]:
        stats = super().get_stats()
        stats['assets'] = len(self.assets)
        return stats

    def cleanup(self) -> None:
        if self.fallback is not None:
            self.fallback.cleanup()

# Exported class
__all__ = ['MemoryResolver']
