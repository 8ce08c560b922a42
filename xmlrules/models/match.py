"""Models for recorded rule matches."""

from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, Field


class Match(BaseModel):
    """A single handler invocation recorded by the pipeline."""

    label: str = Field(description="Label of the rule that fired")
    kind: str = Field(description="Rule kind (element, content or comment)")
    depth: int = Field(ge=0, description="Depth of the matched node (root is 0)")
    node_name: str = Field(description="Name of the matched node")
    value: Union[dict[str, str], str] = Field(
        description="Attributes for element rules, text for content and comment rules"
    )

    def __str__(self) -> str:
        """Format as human-readable string."""
        return f"{self.label}: <{self.node_name}> at depth {self.depth}"


class MatchResult(BaseModel):
    """All matches produced by one pass over a document."""

    path: Optional[Path] = Field(default=None, description="Path of the processed document")
    max_depth: int = Field(ge=0, description="Deepest level any rule could match")
    rule_count: int = Field(ge=0, description="Number of rules evaluated at every node")
    matches: list[Match] = Field(default_factory=list, description="Matches in firing order")

    @property
    def match_count(self) -> int:
        """Return the number of recorded matches."""
        return len(self.matches)

    def by_label(self, label: str) -> list[Match]:
        """Return the matches recorded for the rule with the given label."""
        return [match for match in self.matches if match.label == label]
