"""Factory for building rule engines from settings."""

import logging
from pathlib import Path
from typing import Callable

from xmlrules.config import PipelineSettings
from xmlrules.pipeline.rules import (
    Handler,
    RuleDeclaration,
    RuleEngine,
    parse_rule,
    parse_rules_file,
    parse_yaml_rules_file,
)

logger = logging.getLogger(__name__)


def _load_rules_file(path: Path, ruleset: str) -> list[RuleDeclaration]:
    """Load the declarations of the configured rules file.

    YAML files (``.yaml``/``.yml``) contribute ``ruleset``; any other
    file is read as one DSL rule per line.
    """
    if path.suffix.lower() in (".yaml", ".yml"):
        declarations = parse_yaml_rules_file(str(path), ruleset)
        origin = f"ruleset '{ruleset}' of {path}"
    else:
        declarations = parse_rules_file(str(path))
        origin = str(path)
    logger.info("Loaded %d rule(s) from %s", len(declarations), origin)
    return declarations


def _log_active_rules(rules: list[RuleDeclaration]) -> None:
    """Log the active rules for debugging."""
    if not rules:
        logger.warning("No rules configured - no handlers will fire")
        return

    logger.debug("Active rules:")
    for rule in rules:
        logger.debug("  %s (%s)", rule.label, rule)


def load_declarations(settings: PipelineSettings) -> list[RuleDeclaration]:
    """Collect rule declarations from settings.

    Rules from the rules file come first, followed by inline rules, which
    fixes the order their handlers fire in.

    Raises:
        FileNotFoundError: If the rules file doesn't exist
        RuleParseError: If any rule is malformed
    """
    rules: list[RuleDeclaration] = []
    if settings.rules.rules_file:
        rules.extend(_load_rules_file(Path(settings.rules.rules_file), settings.rules.ruleset))
    rules.extend(parse_rule(rule_string) for rule_string in settings.rules.rules)

    _log_active_rules(rules)
    return rules


def build_rule_engine(
    declarations: list[RuleDeclaration],
    make_handler: Callable[[RuleDeclaration], Handler],
) -> RuleEngine:
    """Build a rule engine, asking ``make_handler`` for each declaration's handler.

    Args:
        declarations: Rules in firing order
        make_handler: Returns the handler to bind to a declaration

    Returns:
        Configured RuleEngine instance
    """
    return RuleEngine(declaration.bind(make_handler(declaration)) for declaration in declarations)
