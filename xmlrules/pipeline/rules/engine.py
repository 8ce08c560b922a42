"""Rule engine for dispatching handlers over XML trees."""

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import BinaryIO, Union

from xmlrules.models.node import NodeKind, XmlNode
from xmlrules.pipeline.parse import parse_bytes, parse_file, parse_stream

from .models import Rule, RuleKind

logger = logging.getLogger(__name__)

# Children of any other kind carry no rules of their own; their text already
# reaches the parent through text_content.
_VISITED_KINDS = (NodeKind.ELEMENT, NodeKind.COMMENT)


class RuleEngine:
    """Walks a tree once, firing the handler of every rule that matches.

    Rules are tested at every visited node in registration order. Nodes deeper
    than the deepest rule are never inspected.
    """

    def __init__(self, rules: Iterable[Rule]):
        """Initialize the rule engine with a list of rules."""
        self.rules: tuple[Rule, ...] = tuple(rules)
        self.max_depth = max((rule.depth for rule in self.rules), default=0)
        self._comment_rules = tuple(rule for rule in self.rules if rule.kind is RuleKind.COMMENT)
        logger.debug("Rule engine built with %d rule(s), max depth %d", len(self.rules), self.max_depth)

    def run(self, root: XmlNode) -> None:
        """Run every rule against the tree rooted at ``root`` (depth 0).

        Exceptions raised by handlers propagate and abort the pass.
        """
        self._visit(root, 0)

    def parse(self, source: Union[str, Path, bytes, BinaryIO]) -> None:
        """Parse an XML document and run the rules over its root element.

        Args:
            source: A file path, the raw document bytes or a binary file object
        """
        if isinstance(source, bytes):
            root = parse_bytes(source)
        elif isinstance(source, (str, Path)):
            root = parse_file(Path(source))
        else:
            root = parse_stream(source)
        self.run(root)

    def _visit(self, node: XmlNode, level: int) -> None:
        if level > self.max_depth:
            return

        if node.kind is NodeKind.COMMENT:
            self._dispatch_comment(node, level)
        else:
            self._dispatch_element(node, level)

        for child in node.children:
            if child.kind in _VISITED_KINDS:
                self._visit(child, level + 1)

    def _dispatch_comment(self, node: XmlNode, level: int) -> None:
        for rule in self._comment_rules:
            if rule.depth == level:
                rule.handler(node, node.text_content)

    def _dispatch_element(self, node: XmlNode, level: int) -> None:
        for rule in self.rules:
            if rule.kind is RuleKind.ELEMENT and rule.matches_element(level, node.name):
                rule.handler(node, node.attributes)  # type: ignore[arg-type]
            elif rule.kind is RuleKind.CONTENT and rule.matches_element(level, node.name):
                rule.handler(node, node.text_content)  # type: ignore[arg-type]
