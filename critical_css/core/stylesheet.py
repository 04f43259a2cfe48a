"""Mutable stylesheet model for critical-css.

Stylesheets are parsed with tinycss2 and wrapped into a tree of
:class:`RuleNode` objects which the partitioner can mark, narrow and
prune in place.
"""

import copy
import itertools
import logging
from dataclasses import dataclass, field
from typing import Iterator, List, Optional
import tinycss2
from tinycss2.ast import WhitespaceToken
from ..utils.error import MalformedCSSError

logger = logging.getLogger(__name__)

# At-rules whose block holds a nested rule list
GROUP_AT_RULES = {
    'media', 'supports', 'layer', 'container', 'document', '-moz-document',
    'scope', 'starting-style',
}

_SPACE = WhitespaceToken(0, 0, ' ')
_uids = itertools.count(1)


@dataclass
class Declaration:
    """A single `name: value` pair."""
    name: str
    value: str
    important: bool = False


@dataclass
class RuleNode:
    """A node of a parsed stylesheet.

    `kind` is one of `root`, `rule`, `media`, `supports`, `keyframes`,
    `atrule` or `comment`. Style rules carry `selectors` and
    `declarations`; group rules carry `children`; statement at-rules
    like `@import` or `@layer a, b;` carry neither.
    """
    kind: str
    name: str = ''
    params: str = ''
    selectors: Optional[List[str]] = None
    declarations: Optional[List[Declaration]] = None
    children: Optional[List['RuleNode']] = None
    text: str = ''
    uid: int = field(default_factory=lambda: next(_uids))
    removed: bool = False

    @property
    def has_nested_rules(self) -> bool:
        """True for containers the partitioner descends into."""
        return self.children is not None and self.kind not in ('root', 'keyframes')

    @property
    def at_text(self) -> str:
        """`@name params` text used to match at-rules against rule lists."""
        if not self.name:
            return ''
        return f"@{self.name} {self.params}".strip()

    def clone(self) -> 'RuleNode':
        """Deep copy of the subtree, keeping every uid."""
        return copy.deepcopy(self)

    def walk(self) -> Iterator['RuleNode']:
        """Yield every descendant in document order."""
        for child in self.children or []:
            yield child
            yield from child.walk()

    def __repr__(self) -> str:
        label = ','.join(self.selectors) if self.selectors is not None else self.at_text
        return f"<RuleNode {self.kind} {label!r} uid={self.uid}>"


def serialize_tokens(tokens) -> str:
    """Serialize component values with comments dropped and whitespace collapsed."""
    cleaned = []
    for token in tokens:
        if token.type == 'comment':
            continue
        if token.type == 'whitespace':
            if cleaned and cleaned[-1] is _SPACE:
                continue
            cleaned.append(_SPACE)
        else:
            cleaned.append(token)
    return tinycss2.serialize(cleaned).strip()

def split_selectors(prelude) -> List[str]:
    """Split a rule prelude on its top-level commas."""
    groups: List[list] = [[]]
    for token in prelude:
        if token.type == 'literal' and token.value == ',':
            groups.append([])
        else:
            groups[-1].append(token)
    return [text for text in (serialize_tokens(group) for group in groups) if text]

def _at_rule_kind(name: str) -> str:
    if name == 'media':
        return 'media'
    if name == 'supports':
        return 'supports'
    if name.endswith('keyframes'):
        return 'keyframes'
    return 'atrule'

def _parse_declarations(content) -> List[Declaration]:
    declarations = []
    for item in tinycss2.parse_declaration_list(content, skip_comments=True, skip_whitespace=True):
        if item.type == 'declaration':
            declarations.append(Declaration(item.name, serialize_tokens(item.value), item.important))
        elif item.type == 'error':
            logger.debug(f"Dropping invalid declaration at line {item.source_line}: {item.message}")
        else:
            logger.debug(f"Dropping nested {item.type} at line {item.source_line}")
    return declarations

def _convert(item) -> RuleNode:
    if item.type == 'comment':
        return RuleNode('comment', text=item.value)

    if item.type == 'qualified-rule':
        return RuleNode(
            'rule',
            selectors=split_selectors(item.prelude),
            declarations=_parse_declarations(item.content),
        )

    name = item.lower_at_keyword
    kind = _at_rule_kind(name)
    node = RuleNode(kind, name=item.at_keyword, params=serialize_tokens(item.prelude))
    if item.content is None:
        return node
    if kind == 'keyframes' or name in GROUP_AT_RULES:
        node.children = _convert_list(tinycss2.parse_rule_list(item.content, skip_whitespace=True))
    else:
        node.declarations = _parse_declarations(item.content)
    return node

def _convert_list(items) -> List[RuleNode]:
    nodes = []
    for item in items:
        if item.type == 'error':
            raise MalformedCSSError(
                f"{item.message} (line {item.source_line}, column {item.source_column})"
            )
        nodes.append(_convert(item))
    return nodes

def parse_stylesheet(css: str) -> RuleNode:
    """Parse stylesheet text into a RuleNode tree.

    Args:
        css: Stylesheet text

    Returns:
        Root node

    Raises:
        MalformedCSSError: If the stylesheet cannot be parsed
    """
    items = tinycss2.parse_stylesheet(css, skip_comments=False, skip_whitespace=True)
    return RuleNode('root', children=_convert_list(items))

# Exported functions
__all__ = [
    'GROUP_AT_RULES',
    'Declaration',
    'RuleNode',
    'parse_stylesheet',
    'serialize_tokens',
    'split_selectors',
]
