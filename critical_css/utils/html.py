"""HTML document handling functionality."""

from typing import List, Optional
from bs4 import BeautifulSoup, Comment, Doctype, NavigableString, Tag
from bs4.dammit import EntitySubstitution
from bs4.formatter import HTMLFormatter

class DocumentFormatter(HTMLFormatter):
    """Like bs4's "minimal" formatter, but keeps attributes in document
    order and writes void elements as `<link ...>` instead of `<link .../>`.
    """

    def attributes(self, tag):
        if tag.attrs is None:
            return []
        return list(tag.attrs.items())

HTML_FORMATTER = DocumentFormatter(
    entity_substitution=EntitySubstitution.substitute_xml,
    void_element_close_prefix='',
)

def parse_html(html: str) -> BeautifulSoup:
    """Parse HTML content.

    `rel` and `class` are kept as plain strings so attribute values are
    written back exactly as they were read.

    Args:
        html: HTML content to parse

    Returns:
        BeautifulSoup object
    """
    return BeautifulSoup(html, 'html.parser', multi_valued_attributes=None)

class HtmlDoctype(Doctype):
    """Doctype written without the newline bs4 appends after it."""
    SUFFIX = '>'

def serialize_html(soup: BeautifulSoup) -> str:
    """Serialize a document without decoding or re-encoding entities.

    Doctypes and `<meta charset>` values are written as they were read.
    """
    for node in list(soup.contents):
        if isinstance(node, Doctype) and not isinstance(node, HtmlDoctype):
            node.replace_with(HtmlDoctype(str(node)))
    return soup.decode(eventual_encoding=None, formatter=HTML_FORMATTER)

def get_head(soup: BeautifulSoup) -> Tag:
    """Return the <head> element, falling back to the document itself."""
    return soup.head or soup.html or soup

def in_noscript(tag: Tag) -> bool:
    """Check if a tag sits inside a <noscript> element."""
    return tag.find_parent('noscript') is not None

def is_stylesheet_link(tag: Tag) -> bool:
    """Check if a <link> loads a stylesheet."""
    rel = (tag.get('rel') or '').lower().split()
    return 'stylesheet' in rel and bool(tag.get('href'))

def find_stylesheet_links(soup: BeautifulSoup) -> List[Tag]:
    """Find stylesheet links in document order, skipping noscript fallbacks."""
    return [
        link for link in soup.find_all('link')
        if is_stylesheet_link(link) and not in_noscript(link)
    ]

def find_style_elements(soup: BeautifulSoup) -> List[Tag]:
    """Find <style> elements in document order, skipping noscript content."""
    return [style for style in soup.find_all('style') if not in_noscript(style)]

def set_text(tag: Tag, text: str) -> None:
    """Replace the text content of a tag."""
    tag.string = text

def get_text(tag: Tag) -> str:
    """Return the raw text content of a tag, whatever string class holds it."""
    return ''.join(
        str(node) for node in tag.descendants
        if isinstance(node, NavigableString) and not isinstance(node, Comment)
    )

def clone_tag(soup: BeautifulSoup, tag: Tag, drop: Optional[List[str]] = None) -> Tag:
    """Create a shallow copy of an element with the same attributes.

    Args:
        soup: Document used to create the element
        tag: Element to copy
        drop: Attribute names to leave out

    Returns:
        New, detached element
    """
    attrs = {k: v for k, v in tag.attrs.items() if k not in (drop or [])}
    return soup.new_tag(tag.name, attrs=attrs)

# Exported functions
__all__ = [
    'DocumentFormatter',
    'HTML_FORMATTER',
    'HtmlDoctype',
    'parse_html',
    'serialize_html',
    'get_head',
    'in_noscript',
    'is_stylesheet_link',
    'find_stylesheet_links',
    'find_style_elements',
    'set_text',
    'get_text',
    'clone_tag',
]
