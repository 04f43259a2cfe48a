"""Critical CSS inlining for HTML documents.

The :class:`Inliner` finds the stylesheets a document uses, keeps the
rules that match content of the document in inline `<style>` elements
and defers loading of the rest.
"""

import re
import time
import asyncio
import dataclasses
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Optional, Set
from bs4 import BeautifulSoup, Tag
from .loader import StylesheetLoader, StylesheetReference
from .partition import partition, partition_mirrored
from .preload import PreloadTransformer
from .selector import SelectorEvaluator
from .serializer import serialize_stylesheet
from .stylesheet import RuleNode, parse_stylesheet
from .validator import check_media_query, is_safe_media_query
from ..managers.base import ContentResolver
from ..managers.factory import build_resolver
from ..utils.config import Options
from ..utils.error import FileOperationError, MalformedCSSError, UnsafeMediaQueryError
from ..utils.html import (
    find_style_elements,
    find_stylesheet_links,
    get_head,
    get_text,
    parse_html,
    serialize_html,
    set_text,
)
from ..utils.logging import resolve_logger

_URL_RE = re.compile(r'url\s*\(\s*([\'"]?)(.+?)\1\s*\)')
_FONT_SHORTHAND_RE = re.compile(r'^.*?\d[\w.%]*(?:\s*/\s*[\w.%-]+)?\s+(.+)$')


@dataclass
class InlineResult:
    """Outcome of processing one document."""
    html: str
    deletable_assets: List[str] = field(default_factory=list)
    pruned_assets: List[str] = field(default_factory=list)
    stats: List[Dict[str, Any]] = field(default_factory=list)


def _unquote(value: str) -> str:
    return value.strip().strip('\'"').strip().lower()

def font_families(name: str, value: str) -> Set[str]:
    """Extract family names from a `font` or `font-family` value."""
    if name == 'font':
        match = _FONT_SHORTHAND_RE.match(value)
        if not match:
            return set()
        value = match.group(1)
    return {_unquote(family) for family in value.split(',') if _unquote(family)}

def animation_names(value: str) -> Set[str]:
    """Collect every word of an `animation` or `animation-name` value."""
    return {word for word in re.split(r'[\s,]+', value) if word}


class _SheetContext:
    """Names referenced by the critical rules of one stylesheet."""

    def __init__(self):
        self.animations: Set[str] = set()
        self.fonts: Set[str] = set()
        self.font_urls: List[str] = []


class Inliner:
    """Inline critical CSS into HTML documents.

    Options are given either as an :class:`Options` instance or as keyword
    arguments; keyword arguments override the fields of a given instance.
    The resolver, preload transformer and media validator can be replaced,
    e.g. to read stylesheets from memory.
    """

    def __init__(self, options: Optional[Options] = None,
                 resolver: Optional[ContentResolver] = None,
                 transformer: Optional[PreloadTransformer] = None,
                 validator: Optional[Callable[[str], bool]] = None,
                 **overrides: Any):
        if options is None:
            options = Options(**overrides)
        elif overrides:
            options = dataclasses.replace(options, **overrides)
        self.options = options
        self.logger = resolve_logger(options.logger, options.log_level)
        self.validator = validator or is_safe_media_query
        self.resolver = resolver or build_resolver(options)
        self.transformer = transformer or PreloadTransformer(
            options.preload, options.noscript_fallback, self.validator, self.logger
        )
        self.loader = StylesheetLoader(options, self.resolver, self.logger)

    async def process(self, html: str) -> str:
        """Inline critical CSS into a document.

        Args:
            html: HTML document

        Returns:
            Transformed HTML document
        """
        result = await self.process_document(html)
        return result.html

    async def process_document(self, html: str) -> InlineResult:
        """Inline critical CSS and report what happened to each stylesheet.

        Args:
            html: HTML document

        Returns:
            InlineResult with the transformed document
        """
        start = time.perf_counter()
        soup = parse_html(html)
        result = InlineResult(html='')
        created: Set[int] = set()

        references = self._additional_references() + self._link_references(soup)
        await self.loader.load_all(references)

        by_style: Dict[int, StylesheetReference] = {}
        for ref in references:
            if not ref.resolved:
                continue
            style = self._embed(ref, soup)
            by_style[id(style)] = ref
            created.add(id(style))

        evaluator = SelectorEvaluator(
            soup, self.options.allow_rules, self.options.exclude_rules, self.logger
        )
        preloaded_fonts: Set[str] = set()
        for index, style in enumerate(find_style_elements(soup)):
            ref = by_style.get(id(style))
            if ref is None:
                if not self.options.reduce_inline_styles:
                    continue
                ref = StylesheetReference('inline', index, node=style, text=get_text(style),
                                          resolved=True, style=style)
            if ref.origin != 'inline' and self._inline_whole_if_small(ref, result):
                continue
            context = await self._process_sheet(ref, evaluator, result)
            if context is not None and self.options.preload_fonts:
                self._preload_fonts(soup, context, preloaded_fonts)

        for ref in references:
            if ref.origin == 'external' and ref.resolved and ref.node is not None \
                    and not ref.skipped:
                self.transformer.apply(ref.node, soup, ref.media)

        if self.options.merge_stylesheets:
            self._merge_styles(soup, created)

        result.html = serialize_html(soup)
        soup.decompose()
        elapsed = (time.perf_counter() - start) * 1000
        self.logger.info(f"Time {elapsed:.2f}ms")
        return result

    def _additional_references(self) -> List[StylesheetReference]:
        names: List[str] = []
        for pattern in self.options.additional_stylesheets:
            matches = self.resolver.match_assets(pattern)
            if not matches:
                self.logger.warning(f"No stylesheet matches {pattern!r}")
            for name in matches:
                if name not in names:
                    names.append(name)
        return [
            StylesheetReference('additional', index, asset_name=name)
            for index, name in enumerate(names)
        ]

    def _link_references(self, soup: BeautifulSoup) -> List[StylesheetReference]:
        if not self.options.external:
            return []
        return [
            StylesheetReference('external', index, node=link, href=link.get('href'),
                                media=link.get('media'))
            for index, link in enumerate(find_stylesheet_links(soup))
        ]

    def _embed(self, ref: StylesheetReference, soup: BeautifulSoup) -> Tag:
        style = soup.new_tag('style')
        set_text(style, ref.text)
        if ref.origin == 'external':
            ref.node.insert_before(style)
        else:
            get_head(soup).append(style)
        ref.style = style
        return style

    def _name(self, ref: StylesheetReference) -> str:
        return ref.asset_name or ref.href or f"<style> #{ref.index}"

    def _wrap_media(self, css: str, ref: StylesheetReference) -> str:
        media = (ref.media or '').strip() if ref.origin == 'external' else ''
        # print is only the placeholder of a link that loads itself lazily
        if ref.node is not None and PreloadTransformer.is_deferred(ref.node):
            return css
        if not css or not media or media.lower() == 'all':
            return css
        try:
            media = check_media_query(media, self.validator)
        except UnsafeMediaQueryError as e:
            self.logger.warning(f"Not wrapping {self._name(ref)} in its media query: {e}")
            return css
        return f"@media {media}{{{css}}}"

    def _serialize_whole(self, ref: StylesheetReference) -> Optional[str]:
        try:
            root = parse_stylesheet(ref.text)
        except MalformedCSSError as e:
            self.logger.warning(f"Skipping malformed stylesheet {self._name(ref)}: {e}")
            return None
        return self._wrap_media(serialize_stylesheet(root, self.options.compress), ref)

    def _remove_link(self, ref: StylesheetReference, result: InlineResult) -> None:
        if ref.origin == 'external' and ref.node is not None:
            ref.node.decompose()
            ref.node = None
        if ref.asset_name and ref.asset_name not in result.deletable_assets:
            result.deletable_assets.append(ref.asset_name)

    def _inline_whole_if_small(self, ref: StylesheetReference, result: InlineResult) -> bool:
        threshold = self.options.inline_threshold
        size = len(ref.text.encode('utf-8'))
        if not threshold or size >= threshold:
            return False
        css = self._serialize_whole(ref)
        if css is None:
            return False
        self._set_style(ref, css)
        self._remove_link(ref, result)
        self.logger.info(f"Inlined all of {self._name(ref)} ({size} < {threshold} bytes)")
        return True

    def _set_style(self, ref: StylesheetReference, css: str) -> None:
        if css:
            set_text(ref.style, css)
        else:
            ref.style.decompose()
            ref.style = None

    def _critical_rules(self, node: RuleNode, evaluator: SelectorEvaluator) -> Iterator[RuleNode]:
        for child in node.children or []:
            if child.has_nested_rules:
                yield from self._critical_rules(child, evaluator)
            elif child.kind == 'rule' and any(evaluator.is_used(s) for s in child.selectors):
                yield child

    def _scan(self, root: RuleNode, evaluator: SelectorEvaluator) -> _SheetContext:
        context = _SheetContext()
        for rule in self._critical_rules(root, evaluator):
            for decl in rule.declarations or []:
                name = decl.name.lower()
                if name in ('animation', 'animation-name'):
                    context.animations |= animation_names(decl.value)
                elif name in ('font', 'font-family'):
                    context.fonts |= font_families(name, decl.value)
        return context

    def _predicate(self, evaluator: SelectorEvaluator, context: _SheetContext):
        keyframes_mode = self.options.keyframes
        inline_fonts = self.options.inline_fonts

        def predicate(node: RuleNode) -> Optional[bool]:
            if node.kind == 'comment':
                return False
            if node.kind == 'rule':
                node.selectors = evaluator.filter(node.selectors)
                return bool(node.selectors)

            text = node.at_text
            if evaluator.is_excluded(text):
                return False
            if evaluator.is_allowed(text):
                return True

            if node.kind == 'keyframes':
                if keyframes_mode == 'none':
                    return False
                if keyframes_mode == 'all':
                    return True
                return node.params.strip().strip('\'"') in context.animations

            if node.name.lower() == 'font-face':
                family = src = None
                for decl in node.declarations or []:
                    if decl.name.lower() == 'font-family':
                        family = _unquote(decl.value)
                    elif decl.name.lower() == 'src':
                        match = _URL_RE.search(decl.value)
                        src = match.group(2).strip() if match else None
                used = family is not None and family in context.fonts
                if used and src:
                    context.font_urls.append(src)
                return used and inline_fonts

            if node.has_nested_rules:
                return None
            return True

        return predicate

    async def _process_sheet(self, ref: StylesheetReference, evaluator: SelectorEvaluator,
                             result: InlineResult) -> Optional[_SheetContext]:
        name = self._name(ref)
        try:
            root = parse_stylesheet(ref.text)
        except MalformedCSSError as e:
            self.logger.warning(f"Skipping malformed stylesheet {name}: {e}")
            if ref.origin != 'inline':
                ref.style.decompose()
                ref.style = None
                ref.skipped = True
            return None

        mirror = root.clone() if self.options.prune_source and ref.can_prune else None
        context = self._scan(root, evaluator)
        predicate = self._predicate(evaluator, context)
        if mirror is not None:
            partition_mirrored(root, mirror, predicate)
        else:
            partition(root, predicate)

        css = self._wrap_media(serialize_stylesheet(root, self.options.compress), ref)
        if mirror is not None:
            css = await self._prune_source(ref, mirror, css, result)

        before = len(ref.text.encode('utf-8'))
        after = len(css.encode('utf-8'))
        percent = round(after / before * 100) if before else 0
        result.stats.append({
            'name': name,
            'origin': ref.origin,
            'original_size': before,
            'critical_size': after,
        })
        if ref.origin != 'inline' or css:
            self.logger.info(
                f"Inlined {after} bytes ({percent}% of original {before} bytes) of {name}"
            )
        self._set_style(ref, css)
        return context

    async def _prune_source(self, ref: StylesheetReference, mirror: RuleNode, css: str,
                            result: InlineResult) -> str:
        rest = serialize_stylesheet(mirror, self.options.compress)
        minimum = self.options.minimum_external_size
        if not rest.strip() or len(rest.encode('utf-8')) < minimum:
            whole = self._serialize_whole(ref)
            if whole is not None:
                self.logger.info(f"Inlined all of {self._name(ref)}, its remainder is too small to keep")
                self._remove_link(ref, result)
                return whole
        if ref.remote or not ref.source_path:
            self.logger.warning(f"Cannot prune source of remote stylesheet {self._name(ref)}")
            return css
        try:
            await self.resolver.write(ref.source_path, rest)
        except FileOperationError as e:
            self.logger.warning(f"Failed to prune source of {self._name(ref)}: {e}")
            return css
        result.pruned_assets.append(ref.asset_name)
        return css

    def _preload_fonts(self, soup: BeautifulSoup, context: _SheetContext, seen: Set[str]) -> None:
        head = get_head(soup)
        for url in context.font_urls:
            if url in seen:
                continue
            seen.add(url)
            head.append(soup.new_tag('link', attrs={
                'rel': 'preload',
                'as': 'font',
                'crossorigin': 'anonymous',
                'href': url,
            }))

    def _merge_styles(self, soup: BeautifulSoup, created: Set[int]) -> None:
        styles = [
            style for style in find_style_elements(soup)
            if not style.attrs and (self.options.reduce_inline_styles or id(style) in created)
        ]
        if len(styles) < 2:
            return
        first = styles[0]
        set_text(first, ''.join(get_text(style) for style in styles))
        for style in styles[1:]:
            style.decompose()

    def close(self) -> None:
        """Release resolver resources."""
        self.resolver.cleanup()

    def __enter__(self) -> 'Inliner':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def inline_critical_css(html: str, **options: Any) -> str:
    """Inline critical CSS into a document synchronously.

    Args:
        html: HTML document
        **options: Fields of :class:`Options`

    Returns:
        Transformed HTML document
    """
    with Inliner(**options) as inliner:
        return asyncio.run(inliner.process(html))

# Exported classes
__all__ = ['Inliner', 'InlineResult', 'inline_critical_css', 'font_families', 'animation_names']
