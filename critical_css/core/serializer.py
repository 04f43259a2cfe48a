"""Stylesheet serialization for critical-css.

Output is written into `<style>` elements, so any text that would close
the element early is dropped instead of being escaped.
"""

import re
import logging
from typing import List
from .stylesheet import Declaration, RuleNode

logger = logging.getLogger(__name__)

_STYLE_CLOSE_RE = re.compile(r'</style', re.IGNORECASE)

def contains_style_close(text: str) -> bool:
    """Check if text could terminate a <style> element."""
    return bool(text) and _STYLE_CLOSE_RE.search(text) is not None

def _declaration(decl: Declaration, compress: bool) -> str:
    sep = ':' if compress else ': '
    text = f"{decl.name}{sep}{decl.value}"
    if decl.important:
        text += ' !important'
    return text

def _is_unsafe(node: RuleNode) -> bool:
    if node.kind == 'comment':
        return contains_style_close(node.text)
    if node.selectors is not None and any(contains_style_close(s) for s in node.selectors):
        return True
    return contains_style_close(node.params)

def _safe_declarations(node: RuleNode) -> List[Declaration]:
    kept = []
    for decl in node.declarations or []:
        if contains_style_close(decl.value) or contains_style_close(decl.name):
            logger.warning(f"Dropping declaration {decl.name!r} containing a closing style tag")
            continue
        kept.append(decl)
    return kept

def _prelude(node: RuleNode, compress: bool) -> str:
    if node.selectors is not None:
        return (',' if compress else ', ').join(node.selectors)
    return f"@{node.name} {node.params}".rstrip() if node.params else f"@{node.name}"

def _compressed(node: RuleNode, out: List[str]) -> None:
    if node.kind == 'comment' or _is_unsafe(node):
        return
    prelude = _prelude(node, True)
    if node.children is not None:
        out.append(prelude + '{')
        for child in node.children:
            _compressed(child, out)
        out.append('}')
    elif node.declarations is not None:
        body = ';'.join(_declaration(d, True) for d in _safe_declarations(node))
        out.append(prelude + '{' + body + '}')
    else:
        out.append(prelude + ';')

def _pretty(node: RuleNode, out: List[str], depth: int) -> None:
    if _is_unsafe(node):
        logger.warning(f"Dropping {node!r} containing a closing style tag")
        return
    indent = '  ' * depth
    if node.kind == 'comment':
        out.append(f"{indent}/*{node.text}*/")
        return
    prelude = _prelude(node, False)
    if node.children is not None:
        out.append(f"{indent}{prelude} {{")
        for child in node.children:
            _pretty(child, out, depth + 1)
        out.append(f"{indent}}}")
    elif node.declarations is not None:
        out.append(f"{indent}{prelude} {{")
        for decl in _safe_declarations(node):
            out.append(f"{indent}  {_declaration(decl, False)};")
        out.append(f"{indent}}}")
    else:
        out.append(f"{indent}{prelude};")

def serialize_stylesheet(root: RuleNode, compress: bool = True) -> str:
    """Serialize a stylesheet tree.

    Args:
        root: Root node, or any node whose subtree should be written
        compress: Drop comments and insignificant whitespace

    Returns:
        CSS text safe to place inside a <style> element
    """
    nodes = root.children if root.kind == 'root' else [root]
    out: List[str] = []
    if compress:
        for node in nodes or []:
            _compressed(node, out)
        return ''.join(out)
    for node in nodes or []:
        _pretty(node, out, 0)
    return '\n'.join(out)

# Exported functions
__all__ = ['serialize_stylesheet', 'contains_style_close']
