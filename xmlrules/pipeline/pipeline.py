"""Top-level pipeline orchestration.

Parse -> Load rules -> Run engine, recording every handler invocation as a
``Match``.
"""

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Union

from xmlrules.config import PipelineSettings, get_settings
from xmlrules.models.match import Match, MatchResult
from xmlrules.models.node import XmlNode
from xmlrules.pipeline.parse import parse_file
from xmlrules.pipeline.rules import Handler, RuleDeclaration, RuleEngine
from xmlrules.pipeline.rules_factory import build_rule_engine, load_declarations

logger = logging.getLogger(__name__)


class MatchRecorder:
    """Hands out handlers that record what they are called with."""

    def __init__(self) -> None:
        self.matches: list[Match] = []

    def handler_for(self, declaration: RuleDeclaration) -> Handler:
        """Return a handler recording matches of ``declaration``."""

        def record(node: XmlNode, value: Union[Mapping[str, str], str]) -> None:
            self.matches.append(
                Match(
                    label=declaration.label,
                    kind=declaration.kind.value,
                    depth=declaration.depth,
                    node_name=node.name,
                    value=value if isinstance(value, str) else dict(value),
                )
            )

        return record


def _run_parse_stage(target_path: Path, settings: PipelineSettings) -> XmlNode:
    """Run parsing stage."""
    logger.info("Stage 1/3: Parsing %s...", target_path)
    return parse_file(target_path, settings.parse)


def _run_rules_stage(settings: PipelineSettings, recorder: MatchRecorder) -> RuleEngine:
    """Run rule loading stage."""
    logger.info("Stage 2/3: Loading rules...")
    declarations = load_declarations(settings)
    engine = build_rule_engine(declarations, recorder.handler_for)
    logger.info("Loaded %d rule(s), max depth %d", len(engine.rules), engine.max_depth)
    return engine


def _run_match_stage(engine: RuleEngine, root: XmlNode, recorder: MatchRecorder) -> None:
    """Run the engine over the parsed document."""
    logger.info("Stage 3/3: Matching...")
    engine.run(root)
    logger.info("Recorded %d match(es)", len(recorder.matches))


def run_pipeline(target_path: Path, settings: PipelineSettings | None = None) -> MatchResult:
    """Run the full pipeline on a single XML document.

    Args:
        target_path: Path to the XML document
        settings: Pipeline settings (defaults to the global settings)

    Returns:
        MatchResult with the recorded matches in firing order

    Raises:
        ValueError: If the document cannot be read
        RuntimeError: If the document is not well-formed
        FileNotFoundError: If the rules file doesn't exist
        RuleParseError: If any rule is malformed
    """
    settings = settings or get_settings()
    recorder = MatchRecorder()

    root = _run_parse_stage(target_path, settings)
    engine = _run_rules_stage(settings, recorder)
    _run_match_stage(engine, root, recorder)

    return MatchResult(
        path=target_path,
        max_depth=engine.max_depth,
        rule_count=len(engine.rules),
        matches=recorder.matches,
    )
