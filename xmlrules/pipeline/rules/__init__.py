"""Rules system for depth-scoped handler dispatch over XML trees."""

from .engine import RuleEngine
from .models import ElementHandler, Handler, InvalidRuleError, Rule, RuleKind, TextHandler
from .parser import (
    RuleDeclaration,
    RuleParseError,
    RulesFile,
    parse_rule,
    parse_rules,
    parse_rules_file,
    parse_yaml_rules_file,
)

__all__ = [
    "ElementHandler",
    "Handler",
    "InvalidRuleError",
    "Rule",
    "RuleDeclaration",
    "RuleEngine",
    "RuleKind",
    "RuleParseError",
    "RulesFile",
    "TextHandler",
    "parse_rule",
    "parse_rules",
    "parse_rules_file",
    "parse_yaml_rules_file",
]
