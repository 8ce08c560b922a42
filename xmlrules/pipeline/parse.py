"""Parse stage: load XML documents with lxml and adapt them to ``XmlNode``."""

import logging
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import BinaryIO

from lxml import etree

from xmlrules.config import ParseSettings, get_settings
from xmlrules.models.node import NodeKind, XmlNode

logger = logging.getLogger(__name__)

XML_NAMESPACE = "http://www.w3.org/XML/1998/namespace"


def _split_clark(name: str) -> tuple[str | None, str]:
    """Split a ``{namespace}local`` name into its parts."""
    if name.startswith("{"):
        namespace, local = name[1:].split("}", 1)
        return namespace, local
    return None, name


def _qualified_name(name: str, nsmap: Mapping[str | None, str]) -> str:
    """Turn a Clark-notation name into the ``prefix:local`` form used in the source."""
    namespace, local = _split_clark(name)
    if namespace is None:
        return local
    if namespace == XML_NAMESPACE:
        return f"xml:{local}"
    for prefix, uri in nsmap.items():
        if uri == namespace and prefix is not None:
            return f"{prefix}:{local}"
    return local


class LxmlText:
    """A run of character data between lxml nodes."""

    def __init__(self, text: str):
        self._text = text

    @property
    def kind(self) -> NodeKind:
        return NodeKind.TEXT

    @property
    def name(self) -> str:
        return "#text"

    @property
    def attributes(self) -> Mapping[str, str]:
        return {}

    @property
    def text_content(self) -> str:
        return self._text

    @property
    def children(self) -> Sequence[XmlNode]:
        return ()

    def __repr__(self) -> str:
        return f"LxmlText({self._text!r})"


class LxmlNode:
    """Read-only ``XmlNode`` view over an lxml element, comment or processing instruction.

    Names and attribute names keep their namespace prefix (``ant:target``) and
    ``text_content`` follows the DOM: it joins every descendant text run but
    leaves out comment and processing instruction bodies. The wrapped lxml
    object stays reachable through ``element`` for handlers that need to
    look at siblings or parents.
    """

    def __init__(self, element: etree._Element):
        self.element = element

    @property
    def kind(self) -> NodeKind:
        tag = self.element.tag
        if tag is etree.Comment:
            return NodeKind.COMMENT
        if tag is etree.PI or tag is etree.Entity:
            return NodeKind.OTHER
        return NodeKind.ELEMENT

    @property
    def name(self) -> str:
        tag = self.element.tag
        if tag is etree.Comment:
            return "#comment"
        if tag is etree.PI:
            return self.element.target
        if tag is etree.Entity:
            return self.element.name
        namespace, local = _split_clark(tag)
        prefix = self.element.prefix
        if namespace is None or prefix is None:
            return local
        return f"{prefix}:{local}"

    @property
    def attributes(self) -> Mapping[str, str]:
        if self.kind is not NodeKind.ELEMENT:
            return {}
        nsmap = self.element.nsmap
        attributes = _namespace_declarations(self.element)
        for key, value in self.element.attrib.items():
            attributes[_qualified_name(key, nsmap)] = value
        return attributes

    @property
    def text_content(self) -> str:
        if self.kind is not NodeKind.ELEMENT:
            return self.element.text or ""
        return "".join(self.element.itertext())

    @property
    def children(self) -> Sequence[XmlNode]:
        if self.kind is not NodeKind.ELEMENT:
            return ()
        nodes: list[XmlNode] = []
        if self.element.text:
            nodes.append(LxmlText(self.element.text))
        for child in self.element:
            nodes.append(LxmlNode(child))
            if child.tail:
                nodes.append(LxmlText(child.tail))
        return nodes

    def __repr__(self) -> str:
        return f"LxmlNode({self.kind.value} {self.name!r})"


def _namespace_declarations(element: etree._Element) -> dict[str, str]:
    """Return the ``xmlns`` attributes written on ``element`` itself."""
    parent = element.getparent()
    inherited = parent.nsmap if parent is not None else {}
    declarations = {}
    for prefix, uri in element.nsmap.items():
        if inherited.get(prefix) != uri:
            declarations["xmlns" if prefix is None else f"xmlns:{prefix}"] = uri
    return declarations


def build_parser(settings: ParseSettings | None = None) -> etree.XMLParser:
    """Create an lxml parser from settings."""
    settings = settings or get_settings().parse
    return etree.XMLParser(
        remove_blank_text=settings.remove_blank_text,
        resolve_entities=settings.resolve_entities,
        huge_tree=settings.huge_tree,
        strip_cdata=settings.strip_cdata,
        no_network=True,
    )


def parse_bytes(source: bytes, settings: ParseSettings | None = None, origin: str = "<bytes>") -> LxmlNode:
    """
    Parse an XML document from bytes.

    Args:
        source: The raw document, in the encoding its declaration names
        settings: Parser settings (defaults to the global settings)
        origin: Where the document came from, used in error messages

    Returns:
        The document's root element

    Raises:
        RuntimeError: If the document is not well-formed
    """
    try:
        root = etree.fromstring(source, build_parser(settings))
    except etree.XMLSyntaxError as e:
        raise RuntimeError(f"Failed to parse {origin}: {e}") from e
    return LxmlNode(root)


def parse_string(source: str, settings: ParseSettings | None = None) -> LxmlNode:
    """Parse an XML document held in a string.

    The text is encoded as UTF-8 before parsing, so any encoding declaration
    it carries must agree with that.
    """
    return parse_bytes(source.encode("utf-8"), settings, origin="<string>")


def parse_stream(stream: BinaryIO, settings: ParseSettings | None = None) -> LxmlNode:
    """Parse an XML document from a binary file object."""
    origin = getattr(stream, "name", "<stream>")
    return parse_bytes(stream.read(), settings, origin=str(origin))


def read_source_file(file_path: Path) -> bytes:
    """Read an XML document from file."""
    try:
        return file_path.read_bytes()
    except Exception as e:
        raise ValueError(f"Failed to read file {file_path}: {e}") from e


def parse_file(file_path: Path, settings: ParseSettings | None = None) -> LxmlNode:
    """
    Parse a single XML file.

    Args:
        file_path: Path to the XML document
        settings: Parser settings (defaults to the global settings)

    Returns:
        The document's root element

    Raises:
        ValueError: If the file cannot be read
        RuntimeError: If the document is not well-formed
    """
    logger.debug(f"Parsing file: {file_path}")

    source = read_source_file(file_path)
    root = parse_bytes(source, settings, origin=str(file_path))

    logger.debug(f"Successfully parsed {file_path} (root <{root.name}>)")
    return root
