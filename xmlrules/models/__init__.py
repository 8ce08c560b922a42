"""Data models for xmlrules."""

from xmlrules.models.match import Match, MatchResult
from xmlrules.models.node import NodeKind, SimpleNode, XmlNode, attribute_value

__all__ = ["Match", "MatchResult", "NodeKind", "SimpleNode", "XmlNode", "attribute_value"]
