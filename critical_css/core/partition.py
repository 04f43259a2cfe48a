"""Critical / non-critical stylesheet partitioning.

Partitioning runs in two passes. The mark pass asks a predicate about
every rule, narrowing selector lists and flagging removals without
touching the tree shape; the compact pass then physically removes what
was flagged. When a mirror tree is given (a clone of the input taken
before marking), everything dropped from the critical tree is kept on
the mirror and everything kept is dropped from it, so the two trees
together hold exactly the original rules.
"""

import logging
from typing import Callable, Dict, List, Optional, Tuple
from .stylesheet import RuleNode

logger = logging.getLogger(__name__)

# Predicate result: False removes the node, anything else keeps it
Predicate = Callable[[RuleNode], Optional[bool]]

# Containers that are dropped once no rule is left inside them.
# @layer is absent because a layer block's position defines layer order.
CONDITIONAL_KINDS = {'media', 'supports'}
CONDITIONAL_AT_RULES = {'container', 'document', '-moz-document', 'scope', 'starting-style'}


class MirrorTable:
    """Pairs the nodes of two identically shaped trees by uid."""

    def __init__(self, root: RuleNode, mirror_root: RuleNode):
        self._pairs: Dict[int, RuleNode] = {}
        self._link(root, mirror_root)

    def _link(self, node: RuleNode, twin: RuleNode) -> None:
        if node.kind != twin.kind or len(node.children or []) != len(twin.children or []):
            raise ValueError(f"Mirror tree does not match at {node!r}")
        self._pairs[node.uid] = twin
        for child, twin_child in zip(node.children or [], twin.children or []):
            self._link(child, twin_child)

    def twin(self, node: RuleNode) -> Optional[RuleNode]:
        return self._pairs.get(node.uid)

    def __len__(self) -> int:
        return len(self._pairs)


def is_conditional(node: RuleNode) -> bool:
    return node.kind in CONDITIONAL_KINDS or (
        node.kind == 'atrule' and node.name.lower() in CONDITIONAL_AT_RULES
    )


class TreePartitioner:
    """Marks and compacts a stylesheet tree, optionally with a mirror."""

    def __init__(self, predicate: Predicate, mirror: Optional[MirrorTable] = None):
        self.predicate = predicate
        self.mirror = mirror
        # selectors as they were before the predicate narrowed them
        self._original: Dict[int, List[str]] = {}

    def mark(self, node: RuleNode) -> None:
        """Run the predicate over every descendant of node."""
        for child in node.children or []:
            if child.has_nested_rules:
                self.mark(child)
            self._visit(child)

    def _visit(self, node: RuleNode) -> None:
        before = list(node.selectors) if node.selectors is not None else None
        if before is not None:
            self._original[node.uid] = before

        if self.predicate(node) is False:
            node.removed = True
            if self.mirror:
                self._restore_twin(node)
            return

        twin = self.mirror.twin(node) if self.mirror else None
        if twin is None:
            return
        if before is not None:
            kept = set(node.selectors or [])
            twin.selectors = [sel for sel in before if sel not in kept]
        elif not node.has_nested_rules:
            twin.removed = True

    def _restore_twin(self, node: RuleNode) -> None:
        # The node leaves the critical tree entirely, so its twin keeps
        # all of it, including anything narrowed while descending.
        twin = self.mirror.twin(node)
        if twin is None:
            return
        stack = [(node, twin)]
        while stack:
            current, current_twin = stack.pop()
            current_twin.removed = False
            original = self._original.get(current.uid)
            if original is not None:
                current_twin.selectors = list(original)
            for child in current.children or []:
                child_twin = self.mirror.twin(child)
                if child_twin is not None:
                    stack.append((child, child_twin))

    def compact(self, node: RuleNode) -> None:
        """Remove marked nodes and containers left without rules."""
        if node.children is None:
            return
        kept = []
        for child in node.children:
            if child.removed:
                continue
            if child.selectors is not None and not child.selectors:
                continue
            if child.has_nested_rules:
                self.compact(child)
                if is_conditional(child) and not any(c.kind != 'comment' for c in child.children):
                    continue
            kept.append(child)
        node.children = kept


def partition(root: RuleNode, predicate: Predicate) -> RuleNode:
    """Filter a stylesheet tree in place.

    Args:
        root: Tree to filter
        predicate: Called for every node; may narrow `node.selectors`
            and returns False to drop the node

    Returns:
        The filtered root
    """
    partitioner = TreePartitioner(predicate)
    partitioner.mark(root)
    partitioner.compact(root)
    return root

def partition_mirrored(root: RuleNode, mirror_root: RuleNode,
                       predicate: Predicate) -> Tuple[RuleNode, RuleNode]:
    """Split a stylesheet into critical and non-critical trees.

    Args:
        root: Tree that keeps what the predicate accepts
        mirror_root: Clone of root that keeps everything else
        predicate: See :func:`partition`

    Returns:
        (critical, non-critical) roots

    Raises:
        ValueError: If the trees are not shaped alike
    """
    partitioner = TreePartitioner(predicate, MirrorTable(root, mirror_root))
    partitioner.mark(root)
    partitioner.compact(root)
    partitioner.compact(mirror_root)
    return root, mirror_root

# Exported functions
__all__ = [
    'MirrorTable',
    'TreePartitioner',
    'partition',
    'partition_mirrored',
    'is_conditional',
]
