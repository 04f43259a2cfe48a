"""Path and href handling functionality."""

import os
import re
from typing import Optional
from urllib.parse import urlparse
import validators
from .error import PathEscapeError

_REMOTE_RE = re.compile(r'^(?:[a-z][a-z0-9+.-]*:)?//', re.IGNORECASE)

def is_remote_href(href: str) -> bool:
    """Check if an href points at another host.

    Args:
        href: Value of a link's href attribute

    Returns:
        True for absolute and protocol-relative URLs
    """
    return bool(_REMOTE_RE.match(href.strip()))

def is_data_url(href: str) -> bool:
    """Check if href is a data URL"""
    return href.strip().lower().startswith('data:')

def normalize_remote_url(href: str) -> Optional[str]:
    """Normalize a remote href for fetching.

    Protocol-relative URLs are fetched over https.

    Args:
        href: Remote href

    Returns:
        Fetchable URL, or None if the URL is not valid http(s)
    """
    url = href.strip()
    if url.startswith('//'):
        url = f"https:{url}"
    if urlparse(url).scheme not in ('http', 'https'):
        return None
    if validators.url(url) is not True:
        return None
    return url

def strip_query(href: str) -> str:
    """Drop query string and fragment from an href."""
    return re.split(r'[?#]', href, maxsplit=1)[0]

def asset_name_for(href: str, public_path: str = '') -> str:
    """Map an href onto a path relative to the output root.

    The leading slash and the public path prefix are removed, so that
    `/static/app.css` with public path `/static/` becomes `app.css`.

    Args:
        href: Local href
        public_path: URL prefix assets are served under

    Returns:
        Relative asset name
    """
    name = strip_query(href).lstrip('/')
    prefix = re.sub(r'^/|/$', '', public_path or '')
    if prefix and name.startswith(prefix + '/'):
        name = name[len(prefix) + 1:].lstrip('/')
    return name

def is_path_in_directory(path: str, directory: str) -> bool:
    """Check if path is within directory.

    Args:
        path: Path to check
        directory: Directory to check against

    Returns:
        True if path is within directory
    """
    path = os.path.normpath(os.path.abspath(path))
    directory = os.path.normpath(os.path.abspath(directory))
    try:
        return os.path.commonpath([path, directory]) == directory
    except ValueError:
        # different drives
        return False

def resolve_local_path(root: str, asset_name: str) -> str:
    """Resolve an asset name below root.

    Args:
        root: Directory local stylesheets are read from
        asset_name: Path relative to root

    Returns:
        Absolute, normalized path

    Raises:
        PathEscapeError: If the result lies outside root
    """
    filename = os.path.normpath(os.path.join(root, asset_name))
    if not is_path_in_directory(filename, root):
        raise PathEscapeError(f"{asset_name} resolves outside of {root}")
    return filename

def relative_asset_name(path: str, root: str) -> str:
    """Get the asset name of a path below root, using forward slashes."""
    return os.path.relpath(path, root).replace(os.sep, '/')

# Exported functions
__all__ = [
    'is_remote_href',
    'is_data_url',
    'normalize_remote_url',
    'strip_query',
    'asset_name_for',
    'is_path_in_directory',
    'resolve_local_path',
    'relative_asset_name',
]
