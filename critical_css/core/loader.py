"""Stylesheet acquisition for critical-css."""

import logging
from dataclasses import dataclass
from typing import List, Optional, Union
from bs4 import Tag
from ..managers.base import ContentResolver
from ..utils.concurrency import gather_ordered
from ..utils.config import LOG_LEVELS, Options
from ..utils.error import CriticalCSSError, PathEscapeError, ResolutionError
from ..utils.path import (
    asset_name_for,
    is_data_url,
    is_remote_href,
    normalize_remote_url,
    resolve_local_path,
)

@dataclass
class StylesheetReference:
    """A stylesheet the document depends on.

    `origin` is `external` for `<link>` elements, `inline` for `<style>`
    elements and `additional` for configured extra stylesheets.
    """
    origin: str
    index: int
    node: Optional[Tag] = None
    href: Optional[str] = None
    text: Optional[str] = None
    resolved: bool = False
    source_path: Optional[str] = None
    asset_name: Optional[str] = None
    media: Optional[str] = None
    style: Optional[Tag] = None
    remote: bool = False
    skipped: bool = False

    @property
    def can_prune(self) -> bool:
        return self.origin in ('external', 'additional') and self.resolved


class StylesheetLoader:
    """Resolves stylesheet references concurrently, keeping their order."""

    def __init__(self, options: Options, resolver: ContentResolver,
                 logger: Optional[Union[logging.Logger, logging.LoggerAdapter]] = None):
        self.options = options
        self.resolver = resolver
        self.logger = logger or logging.getLogger(__name__)

    async def load_all(self, references: List[StylesheetReference]) -> List[StylesheetReference]:
        """Resolve every reference.

        All reads and fetches are started before any of them is awaited;
        the result is ordered like the input no matter which finished first.

        Args:
            references: References to resolve

        Returns:
            The same references, with `text` set where resolution succeeded
        """
        return await gather_ordered(self.load, references)

    async def load(self, ref: StylesheetReference) -> StylesheetReference:
        """Resolve a single reference. Failures are logged, never raised."""
        if ref.resolved or ref.origin == 'inline':
            return ref
        try:
            if ref.asset_name is not None and ref.href is None:
                await self._load_local(ref, ref.asset_name)
            elif is_data_url(ref.href):
                self.logger.debug("Skipping data URL stylesheet")
            elif is_remote_href(ref.href):
                await self._load_remote(ref)
            else:
                await self._load_local(ref, asset_name_for(ref.href, self.options.public_path))
        except PathEscapeError:
            self.logger.warning(f"Refusing to read stylesheet outside of base path: {ref.href or ref.asset_name}")
        except ResolutionError as e:
            self.logger.warning(f"Unable to locate stylesheet {ref.href or ref.asset_name}: {e}")
        except CriticalCSSError as e:
            self.logger.warning(f"Failed to load stylesheet {ref.href or ref.asset_name}: {e}")
        except Exception as e:
            self.logger.warning(
                f"Unexpected error loading stylesheet {ref.href or ref.asset_name}: {e!r}"
            )
        return ref

    async def _load_local(self, ref: StylesheetReference, asset_name: str) -> None:
        path = resolve_local_path(self.options.path, asset_name)
        self.logger.log(LOG_LEVELS['trace'], f"Loading stylesheet {path}")
        ref.text = await self.resolver.read(path)
        ref.source_path = path
        ref.asset_name = asset_name
        ref.resolved = True

    async def _load_remote(self, ref: StylesheetReference) -> None:
        if not self.options.remote:
            self.logger.debug(f"Ignoring remote stylesheet {ref.href}")
            return
        url = normalize_remote_url(ref.href)
        if url is None:
            self.logger.warning(f"Ignoring stylesheet with invalid URL: {ref.href}")
            return
        ref.text = await self.resolver.fetch(url)
        ref.remote = True
        ref.resolved = True


# Exported classes
__all__ = ['StylesheetReference', 'StylesheetLoader']
