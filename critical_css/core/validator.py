"""Media query validation for critical-css.

Media text taken from a stylesheet link ends up inside generated
attributes and inline script, so only a small, known-safe subset of
media query syntax is accepted.
"""

import re
import logging
import tinycss2
from ..utils.error import UnsafeMediaQueryError

logger = logging.getLogger(__name__)

MEDIA_TYPES = {'all', 'print', 'screen', 'speech'}
MEDIA_KEYWORDS = {'and', 'not'}
MEDIA_FEATURES = {
    prefix + feature
    for feature in (
        'width', 'aspect-ratio', 'color', 'color-index', 'grid', 'height',
        'monochrome', 'orientation', 'resolution', 'scan',
    )
    for prefix in ('', 'min-', 'max-')
}

# Rejected before tokenizing
_FORBIDDEN_RE = re.compile(r'[\\\'"<>;{}&`]')

def _is_safe_value(tokens) -> bool:
    for token in tokens:
        if token.type in ('whitespace', 'number', 'percentage', 'dimension', 'ident'):
            continue
        if token.type == 'literal' and token.value == '/':
            continue
        return False
    return True

def _is_safe_feature(tokens) -> bool:
    significant = [t for t in tokens if t.type != 'whitespace']
    if not significant:
        return False
    if significant[0].type == '() block':
        return _is_safe_condition(tokens)
    if significant[0].type != 'ident' or significant[0].lower_value not in MEDIA_FEATURES:
        return False
    rest = significant[1:]
    if not rest:
        return True
    if rest[0].type != 'literal' or rest[0].value != ':' or len(rest) < 2:
        return False
    return _is_safe_value(rest[1:])

def _is_safe_condition(tokens) -> bool:
    for token in tokens:
        if token.type == 'whitespace':
            continue
        if token.type == 'ident':
            if token.lower_value not in MEDIA_TYPES | MEDIA_KEYWORDS:
                return False
        elif token.type == 'literal' and token.value == ',':
            continue
        elif token.type == '() block':
            if not _is_safe_feature(token.content):
                return False
        else:
            return False
    return True

def is_safe_media_query(query: str) -> bool:
    """Check if a media query is safe to write into HTML attributes.

    Args:
        query: Media query text, e.g. `screen and (min-width: 640px)`

    Returns:
        True if every part of the query is a known media type, keyword or
        feature
    """
    if query is None:
        return False
    if not query.strip():
        return True
    if _FORBIDDEN_RE.search(query):
        logger.debug(f"Media query contains forbidden characters: {query!r}")
        return False
    tokens = tinycss2.parse_component_value_list(query, skip_comments=False)
    if not _is_safe_condition(tokens):
        logger.debug(f"Media query rejected: {query!r}")
        return False
    return True


def check_media_query(query: str, validator=None) -> str:
    """Return a media query, stripped, if it is safe to write into HTML.

    Args:
        query: Media query text
        validator: Predicate used instead of :func:`is_safe_media_query`

    Returns:
        The stripped query

    Raises:
        UnsafeMediaQueryError: If the query is rejected
    """
    if not (validator or is_safe_media_query)(query):
        raise UnsafeMediaQueryError(f"Unsafe media query: {query!r}")
    return query.strip()


# Exported functions
__all__ = [
    'MEDIA_TYPES',
    'MEDIA_KEYWORDS',
    'MEDIA_FEATURES',
    'is_safe_media_query',
    'check_media_query',
]
