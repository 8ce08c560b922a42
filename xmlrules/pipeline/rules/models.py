"""Data models for the rules system."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional, Union

from xmlrules.models.node import XmlNode

# Handlers receive the matched node plus its attributes (element rules) or its
# text content (content and comment rules).
ElementHandler = Callable[[XmlNode, Mapping[str, str]], None]
TextHandler = Callable[[XmlNode, str], None]
Handler = Union[ElementHandler, TextHandler]


class RuleKind(Enum):
    """What a rule matches."""

    ELEMENT = "element"  # An element, handed its attributes
    CONTENT = "content"  # An element, handed its text content
    COMMENT = "comment"  # A comment, handed its text


class InvalidRuleError(Exception):
    """Raised when a rule's kind and name disagree."""

    pass


def check_name(kind: RuleKind, name: Optional[str]) -> None:
    """Raise ``InvalidRuleError`` unless ``name`` fits a rule of ``kind``."""
    if kind is RuleKind.COMMENT:
        if name is not None:
            raise InvalidRuleError("Comment rules cannot be declared with a name")
    elif name is None:
        raise InvalidRuleError(f"{kind.value.capitalize()} rules must be declared with a name")


def format_rule(kind: RuleKind, depth: int, name: Optional[str]) -> str:
    """Render a rule in its ``kind:depth[:name]`` form."""
    if name is None:
        return f"{kind.value}:{depth}"
    return f"{kind.value}:{depth}:{name}"


@dataclass(frozen=True)
class Rule:
    """A depth-scoped matcher bound to a handler.

    Comment rules are declared without a name; element and content rules must
    name the element they match. The handler is always passed by keyword.
    """

    kind: RuleKind
    depth: int
    name: Optional[str] = None
    handler: Handler = field(kw_only=True)

    def __post_init__(self) -> None:
        check_name(self.kind, self.name)

    @classmethod
    def element(cls, depth: int, name: str, handler: ElementHandler) -> "Rule":
        """Create a rule handed the attributes of matching elements."""
        return cls(RuleKind.ELEMENT, depth, name, handler=handler)

    @classmethod
    def content(cls, depth: int, name: str, handler: TextHandler) -> "Rule":
        """Create a rule handed the text content of matching elements."""
        return cls(RuleKind.CONTENT, depth, name, handler=handler)

    @classmethod
    def comment(cls, depth: int, handler: TextHandler) -> "Rule":
        """Create a rule handed the text of comments."""
        return cls(RuleKind.COMMENT, depth, handler=handler)

    def matches_element(self, level: int, node_name: str) -> bool:
        """Check if this rule applies to a non-comment node."""
        return self.depth == level and self.name == node_name

    def __str__(self) -> str:
        return format_rule(self.kind, self.depth, self.name)
