"""Parser for rule declarations (DSL strings, rule files and YAML rulesets)."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import yaml  # type: ignore[import-untyped]
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from .models import Handler, InvalidRuleError, Rule, RuleKind, check_name, format_rule


class RuleParseError(ValueError):
    """Raised when a rule cannot be parsed."""

    pass


@dataclass(frozen=True)
class RuleDeclaration:
    """A rule read from text, waiting for a handler.

    Declarations check that kind and tag agree as soon as they are built, so
    a malformed rules file fails before any document is parsed.
    """

    kind: RuleKind
    depth: int
    tag: Optional[str] = None
    label: str = ""

    def __post_init__(self) -> None:
        label = self.label or str(self)
        if self.tag is not None and not self.tag:
            raise RuleParseError(f"Empty tag in rule '{label}'")
        try:
            check_name(self.kind, self.tag)
        except InvalidRuleError as e:
            raise RuleParseError(f"Invalid rule '{label}': {e}") from e

    def bind(self, handler: Handler) -> Rule:
        """Attach a handler, producing a rule the engine can run."""
        return Rule(self.kind, self.depth, self.tag, handler=handler)

    def __str__(self) -> str:
        return format_rule(self.kind, self.depth, self.tag)


def _parse_kind(kind_str: str) -> RuleKind:
    """Parse kind string into RuleKind enum."""
    try:
        return RuleKind(kind_str.lower())
    except ValueError:
        valid_kinds = [kind.value for kind in RuleKind]
        raise RuleParseError(
            f"Invalid kind '{kind_str}'. Valid kinds: {', '.join(valid_kinds)}"
        )


def _parse_depth(depth: Any) -> int:
    """Parse a depth given as text or as a YAML scalar."""
    if isinstance(depth, bool):
        raise RuleParseError(f"Invalid depth {depth!r}: expected a non-negative integer")
    try:
        value = int(str(depth).strip())
    except ValueError:
        raise RuleParseError(f"Invalid depth {depth!r}: expected a non-negative integer")
    if value < 0:
        raise RuleParseError(f"Invalid depth {value}: depth cannot be negative")
    return value


def parse_rule(rule_string: str) -> RuleDeclaration:
    """
    Parse a rule string into a RuleDeclaration.

    Format: <element|content|comment> : <depth> [: <tag>]

    Examples:
        element:0:project
        content:1:description
        comment:1

    Args:
        rule_string: The rule string to parse

    Returns:
        A RuleDeclaration labelled with its normalized rule string

    Raises:
        RuleParseError: If the rule string is invalid
    """
    rule_string = rule_string.strip()
    if not rule_string:
        raise RuleParseError("Empty rule string")

    # Tags may carry a namespace prefix, so only split off kind and depth
    parts = [part.strip() for part in rule_string.split(":", 2)]
    if len(parts) < 2:
        raise RuleParseError(
            f"Invalid rule format: expected 'kind:depth[:tag]' but got '{rule_string}'"
        )

    kind = _parse_kind(parts[0])
    depth = _parse_depth(parts[1])
    tag = parts[2] if len(parts) == 3 else None
    return RuleDeclaration(kind, depth, tag, label=format_rule(kind, depth, tag))


def parse_rules(rules_string: str) -> list[RuleDeclaration]:
    """
    Parse multiple rules from a comma-separated string.

    Args:
        rules_string: Comma-separated rule strings

    Returns:
        List of RuleDeclaration objects

    Raises:
        RuleParseError: If any rule string is invalid
    """
    if not rules_string.strip():
        return []

    rules: list[RuleDeclaration] = []
    for part in rules_string.split(","):
        part = part.strip()
        if not part:
            continue
        try:
            rules.append(parse_rule(part))
        except RuleParseError as e:
            raise RuleParseError(f"Error parsing rule '{part}': {e}") from e
    return rules


def parse_rules_file(file_path: str) -> list[RuleDeclaration]:
    """Parse a plain rules file holding one rule per line.

    Blank lines and lines starting with ``#`` are skipped. Errors name the
    file and line of the offending rule.

    Raises:
        RuleParseError: If any rule string is invalid
        FileNotFoundError: If the file doesn't exist
    """
    declarations: list[RuleDeclaration] = []
    for line_num, line in enumerate(Path(file_path).read_text().splitlines(), 1):
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        try:
            declarations.append(parse_rule(line))
        except RuleParseError as e:
            raise RuleParseError(f"{file_path}, line {line_num}: {e}") from e
    return declarations


class RuleEntry(BaseModel):
    """One rule of a YAML ruleset."""

    kind: RuleKind
    depth: int
    tag: Optional[str] = None
    label: Optional[str] = None

    @field_validator("kind", mode="before")
    @classmethod
    def kind_from_text(cls, value: Any) -> RuleKind:
        return _parse_kind(str(value))

    @field_validator("depth", mode="before")
    @classmethod
    def depth_from_scalar(cls, value: Any) -> int:
        return _parse_depth(value)

    @field_validator("tag", "label", mode="before")
    @classmethod
    def scalar_as_text(cls, value: Any) -> Optional[str]:
        # YAML reads tags such as "1" or "true" as numbers and booleans
        return None if value is None else str(value)

    def declaration(self) -> RuleDeclaration:
        """Build the declaration, labelled with its DSL form unless a label is given."""
        label = self.label or format_rule(self.kind, self.depth, self.tag)
        return RuleDeclaration(self.kind, self.depth, self.tag, label=label)


class Ruleset(BaseModel):
    """A named list of rules, optionally extending another ruleset."""

    extends: Optional[str] = None
    rules: list[RuleEntry] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def empty_ruleset(cls, data: Any) -> Any:
        return {} if data is None else data

    @field_validator("rules", mode="before")
    @classmethod
    def empty_rules(cls, value: Any) -> Any:
        return [] if value is None else value


class RulesFile(BaseModel):
    """The contents of a YAML rules file."""

    rulesets: dict[str, Ruleset]

    def resolve(self, name: str) -> list[RuleDeclaration]:
        """Return the declarations of ruleset ``name``, inherited rules first.

        Raises:
            RuleParseError: If a ruleset is missing, a rule is malformed or
                ``extends`` forms a cycle
        """
        if name not in self.rulesets:
            available = ", ".join(self.rulesets)
            raise RuleParseError(f"Ruleset '{name}' not found. Available rulesets: {available}")

        chain: list[str] = []
        current: Optional[str] = name
        while current is not None:
            if current in chain:
                raise RuleParseError(f"Circular dependency detected in ruleset '{current}'")
            if current not in self.rulesets:
                raise RuleParseError(f"Ruleset '{current}' not found (referenced by '{chain[-1]}')")
            chain.append(current)
            current = self.rulesets[current].extends

        declarations: list[RuleDeclaration] = []
        for ruleset_name in reversed(chain):
            for entry in self.rulesets[ruleset_name].rules:
                try:
                    declarations.append(entry.declaration())
                except RuleParseError as e:
                    raise RuleParseError(f"Ruleset '{ruleset_name}': {e}") from e
        return declarations


def _describe_errors(error: ValidationError) -> str:
    """Summarize a validation error as ``location: message`` pairs."""
    described = []
    for detail in error.errors():
        location = ".".join(str(part) for part in detail["loc"])
        described.append(f"{location}: {detail['msg']}" if location else detail["msg"])
    return "; ".join(described)


def parse_yaml_rules_file(file_path: str, ruleset_name: str = "default") -> list[RuleDeclaration]:
    """
    Parse rules from a YAML file with ruleset support.

    Args:
        file_path: Path to the YAML rules file
        ruleset_name: Name of the ruleset to load (default: "default")

    Returns:
        List of RuleDeclaration objects from the specified ruleset

    Raises:
        RuleParseError: If the YAML is invalid or rules are malformed
        FileNotFoundError: If the file doesn't exist
    """
    with open(file_path, "r") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise RuleParseError(f"Invalid YAML in {file_path}: {e}") from e

    try:
        rules_file = RulesFile.model_validate(data)
    except ValidationError as e:
        raise RuleParseError(f"Invalid rules file {file_path}: {_describe_errors(e)}") from e
    return rules_file.resolve(ruleset_name)
