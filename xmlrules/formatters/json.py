"""JSON formatter for xmlrules results."""

import json
from typing import Any

from xmlrules.models.match import Match, MatchResult


def _match_to_dict(match: Match) -> dict[str, Any]:
    """Convert a Match to a dictionary."""
    return {
        "label": match.label,
        "kind": match.kind,
        "depth": match.depth,
        "node": match.node_name,
        "value": match.value,
    }


def format_as_json(result: MatchResult, *, pretty: bool = True) -> str:
    """Format a pass over a document as JSON.

    Args:
        result: The matches recorded for one document
        pretty: If True, format with indentation for readability

    Returns:
        JSON-formatted string
    """
    data = {
        "file_path": str(result.path) if result.path else None,
        "rule_count": result.rule_count,
        "max_depth": result.max_depth,
        "total_matches": result.match_count,
        "matches": [_match_to_dict(match) for match in result.matches],
    }

    if pretty:
        return json.dumps(data, indent=2)
    return json.dumps(data)
