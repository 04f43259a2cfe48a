"""Selector usage evaluation for critical-css."""

import re
import logging
from typing import Dict, List, Optional, Union
import soupsieve
from bs4 import BeautifulSoup
from ..utils.config import Rule

# Quoted strings and attribute blocks, copied through untouched
_QUOTED = r'"(?:\\.|[^"\\])*"|\'(?:\\.|[^\'\\])*\''
_PROTECTED = rf'(?P<keep>{_QUOTED}|\[(?:{_QUOTED}|[^\]"\'])*\])'
# Pseudo-elements, including functional ones like ::part(x), and the
# legacy single-colon forms
_PSEUDO_ELEMENT_RE = re.compile(
    _PROTECTED
    + r'|::[\w-]+(?:\([^)]*\))?|(?<![\\:]):(?:before|after|first-line|first-letter)(?![\w(-])',
    re.IGNORECASE,
)
# Pseudo-classes without arguments (:hover, :focus, :first-child...)
_PSEUDO_CLASS_RE = re.compile(_PROTECTED + r'|(?<![\\:]):[a-zA-Z-][\w-]*(?![\w(-])')
_EMPTY_FUNCTION_RE = re.compile(
    r':(?:is|where|not|has|matches|-webkit-any|-moz-any)\(\s*\)', re.IGNORECASE
)
# Selector list arguments that match when any alternative does
_ANY_FUNCTION_RE = re.compile(
    r':(?:is|where|matches|-webkit-any|-moz-any)\(([^()]*)\)', re.IGNORECASE
)
_TRAILING_COMBINATOR_RE = re.compile(r'[>+~]\s*$')

def rule_matches(rule: Rule, text: str) -> bool:
    """Check a selector or at-rule text against an allow/exclude entry."""
    if isinstance(rule, str):
        return rule == text
    return rule.search(text) is not None

def matches_any(rules: List[Rule], text: str) -> bool:
    return any(rule_matches(rule, text) for rule in rules)

def _strip_outside_quotes(pattern, text: str) -> str:
    return pattern.sub(lambda m: m.group('keep') or '', text)

def _drop_satisfied(match) -> str:
    # an alternative emptied above matches in some runtime state
    if any(not part.strip() for part in match.group(1).split(',')):
        return ''
    return match.group(0)

def normalize_selector(selector: str) -> str:
    """Remove the parts of a selector that depend on runtime state.

    Args:
        selector: Selector as written in the stylesheet

    Returns:
        Selector that can be matched against a static document,
        possibly empty
    """
    sel = _strip_outside_quotes(_PSEUDO_ELEMENT_RE, selector)
    sel = _strip_outside_quotes(_PSEUDO_CLASS_RE, sel)

    # Repair argument lists emptied above
    previous = None
    while previous != sel:
        previous = sel
        sel = _ANY_FUNCTION_RE.sub(_drop_satisfied, sel)
        sel = re.sub(r'\(\s*,\s*', '(', sel)
        sel = re.sub(r'\s*,\s*\)', ')', sel)
        sel = re.sub(r',\s*,', ',', sel)
        sel = _EMPTY_FUNCTION_RE.sub('', sel)

    sel = sel.strip().strip(',').strip()
    if _TRAILING_COMBINATOR_RE.search(sel):
        sel += ' *'
    if sel.startswith(('>', '+', '~')):
        sel = '* ' + sel
    return sel


class SelectorEvaluator:
    """Answers whether a selector matches anything in a document.

    Results are cached per selector string for the lifetime of the
    evaluator, which must not outlive mutations of the document.
    """

    def __init__(self, document: BeautifulSoup, allow_rules: Optional[List[Rule]] = None,
                 exclude_rules: Optional[List[Rule]] = None,
                 logger: Optional[Union[logging.Logger, logging.LoggerAdapter]] = None):
        self.document = document
        self.allow_rules = allow_rules or []
        self.exclude_rules = exclude_rules or []
        self.logger = logger or logging.getLogger(__name__)
        self._cache: Dict[str, bool] = {}

    def is_excluded(self, text: str) -> bool:
        return matches_any(self.exclude_rules, text)

    def is_allowed(self, text: str) -> bool:
        return matches_any(self.allow_rules, text)

    def is_used(self, selector: str) -> bool:
        """Check if a selector is needed to render the document.

        Args:
            selector: A single selector (not a list)

        Returns:
            True if the selector matches, is allowed, or cannot be evaluated
        """
        if self.is_excluded(selector):
            return False
        if self.is_allowed(selector):
            return True
        cached = self._cache.get(selector)
        if cached is None:
            cached = self._cache[selector] = self._matches(selector)
        return cached

    def _matches(self, selector: str) -> bool:
        normalized = normalize_selector(selector)
        if not normalized:
            return True
        try:
            return self.document.select_one(normalized) is not None
        except (soupsieve.SelectorSyntaxError, NotImplementedError, ValueError) as e:
            self.logger.debug(f"Keeping selector {selector!r} that could not be evaluated: {e}")
            return True

    def filter(self, selectors: List[str]) -> List[str]:
        """Keep the used members of a selector list, in order."""
        return [sel for sel in selectors if self.is_used(sel)]

    def clear(self) -> None:
        self._cache.clear()


# Exported functions
__all__ = ['SelectorEvaluator', 'normalize_selector', 'rule_matches', 'matches_any']
