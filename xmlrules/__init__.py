"""Depth-scoped rule dispatch over parsed XML trees."""

from xmlrules.models.node import NodeKind, SimpleNode, XmlNode, attribute_value
from xmlrules.pipeline.parse import LxmlNode, parse_bytes, parse_file, parse_string
from xmlrules.pipeline.rules import InvalidRuleError, Rule, RuleEngine, RuleKind

__all__ = [
    "InvalidRuleError",
    "LxmlNode",
    "NodeKind",
    "Rule",
    "RuleEngine",
    "RuleKind",
    "SimpleNode",
    "XmlNode",
    "attribute_value",
    "parse_bytes",
    "parse_file",
    "parse_string",
]
