"""Read-only node abstraction the rule engine walks over.

Any parser can feed the engine as long as its nodes satisfy ``XmlNode``.
``xmlrules.pipeline.parse.LxmlNode`` adapts lxml trees; ``SimpleNode`` is a
plain in-memory tree for callers that build documents by hand.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Protocol, runtime_checkable


class NodeKind(Enum):
    """Kinds of node the engine distinguishes."""

    ELEMENT = "element"
    TEXT = "text"
    COMMENT = "comment"
    OTHER = "other"  # Processing instructions, entity references, ...


@runtime_checkable
class XmlNode(Protocol):
    """A single node of a parsed XML tree."""

    @property
    def kind(self) -> NodeKind: ...

    @property
    def name(self) -> str: ...

    @property
    def attributes(self) -> Mapping[str, str]: ...

    @property
    def text_content(self) -> str: ...

    @property
    def children(self) -> Sequence["XmlNode"]: ...


@dataclass
class SimpleNode:
    """An in-memory node satisfying ``XmlNode``.

    ``text`` is the node's own text. For elements ``text_content`` joins it with
    the text of every element and text descendant, the same way a DOM does.
    """

    kind: NodeKind
    name: str = ""
    attributes: dict[str, str] = field(default_factory=dict)
    text: str = ""
    children: list["SimpleNode"] = field(default_factory=list)

    @classmethod
    def element(cls, name: str, attributes: Optional[dict[str, str]] = None, *children: "SimpleNode") -> "SimpleNode":
        """Create an element node with the given children."""
        return cls(NodeKind.ELEMENT, name, dict(attributes or {}), "", list(children))

    @classmethod
    def text_node(cls, text: str) -> "SimpleNode":
        """Create a text node."""
        return cls(NodeKind.TEXT, "#text", text=text)

    @classmethod
    def comment(cls, text: str) -> "SimpleNode":
        """Create a comment node."""
        return cls(NodeKind.COMMENT, "#comment", text=text)

    @property
    def text_content(self) -> str:
        if self.kind is not NodeKind.ELEMENT:
            return self.text
        parts = []
        stack = [self]
        while stack:
            node = stack.pop()
            parts.append(node.text)
            stack.extend(
                child for child in reversed(node.children) if child.kind in (NodeKind.ELEMENT, NodeKind.TEXT)
            )
        return "".join(parts)


def attribute_value(node: XmlNode, name: str) -> Optional[str]:
    """Return the value of attribute ``name`` on ``node``.

    A missing attribute and an attribute set to the empty string both return
    ``None``, so callers cannot tell the two apart.
    """
    value = node.attributes.get(name)
    if not value:
        return None
    return value
