"""Deferred stylesheet loading for critical-css.

Once the critical part of a stylesheet is inlined, the full stylesheet
is still loaded, but without blocking rendering. Each preload mode is a
different way of doing that with plain HTML attributes.
"""

import logging
from typing import Callable, Optional, Union
from bs4 import BeautifulSoup, Tag
from .validator import check_media_query, is_safe_media_query
from ..utils.config import PRELOAD_MODES
from ..utils.error import ConfigurationError, UnsafeMediaQueryError
from ..utils.html import clone_tag

# Loads a stylesheet from the data attributes of the current script
JS_LOADER = (
    "function $loadcss(u,m,l){(l=document.createElement('link')).rel='stylesheet';"
    "l.href=u;document.head.appendChild(l)}"
    "$loadcss(document.currentScript.dataset.href,document.currentScript.dataset.media)"
)

SWAP_ONLOAD = "this.title='';this.rel='stylesheet'"


class PreloadTransformer:
    """Rewrites stylesheet links so they load without blocking render."""

    def __init__(self, mode: Union[bool, str] = 'media', noscript_fallback: bool = True,
                 validator: Optional[Callable[[str], bool]] = None,
                 logger: Optional[Union[logging.Logger, logging.LoggerAdapter]] = None):
        if mode not in PRELOAD_MODES:
            raise ConfigurationError(f"Invalid preload mode {mode!r}")
        self.mode = mode
        self.noscript_fallback = noscript_fallback
        self.validator = validator or is_safe_media_query
        self.logger = logger or logging.getLogger(__name__)

    @staticmethod
    def is_deferred(link: Tag) -> bool:
        """Check if a link already uses the print media trick."""
        return (link.get('media') or '').strip().lower() == 'print' and bool(link.get('onload'))

    def safe_media(self, media: Optional[str]) -> Optional[str]:
        """Return media if it is safe to echo into attributes, else None."""
        if not media or not media.strip():
            return None
        try:
            return check_media_query(media, self.validator)
        except UnsafeMediaQueryError as e:
            self.logger.warning(f"Ignoring media of stylesheet link: {e}")
            return None

    def apply(self, link: Tag, document: BeautifulSoup, media: Optional[str] = None) -> None:
        """Rewrite a stylesheet link in place.

        Args:
            link: `<link rel="stylesheet">` element still in the document
            document: Document the link belongs to
            media: Media query of the link; read from the link when None
        """
        if self.mode is False:
            return
        if self.is_deferred(link):
            self.logger.debug(f"Stylesheet {link.get('href')} is already deferred")
            return

        raw_media = media if media is not None else link.get('media')
        safe = self.safe_media(raw_media)
        unsafe = bool(raw_media and raw_media.strip()) and safe is None

        noscript = None
        if self.noscript_fallback and self.mode != 'js':
            noscript = document.new_tag('noscript')
            noscript.append(clone_tag(document, link, drop=['onload', 'media'] if unsafe else ['onload']))

        if self.mode == 'media':
            link['media'] = 'print'
            link['onload'] = f"this.media='{safe or 'all'}'"
        elif self.mode == 'swap':
            link['rel'] = 'preload'
            link['onload'] = "this.rel='stylesheet'"
            link['as'] = 'style'
        elif self.mode == 'swap-low':
            link['rel'] = 'alternate stylesheet'
            link['title'] = 'styles'
            link['onload'] = SWAP_ONLOAD
        elif self.mode == 'swap-high':
            link['rel'] = 'alternate stylesheet preload'
            link['title'] = 'styles'
            link['as'] = 'style'
            link['onload'] = SWAP_ONLOAD
        elif self.mode == 'js':
            link['rel'] = 'preload'
            link['as'] = 'style'
            script = document.new_tag('script', attrs={
                'data-href': link.get('href'),
                'data-media': safe or 'all',
            })
            script.string = JS_LOADER
            link.insert_after(script)

        if noscript is not None:
            link.insert_after(noscript)


# Exported classes
__all__ = ['PreloadTransformer', 'JS_LOADER']
