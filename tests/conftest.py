from pathlib import Path

import pytest

from xmlrules.config import PipelineSettings, get_settings, set_settings
from xmlrules.models.node import SimpleNode, XmlNode

fixtures_dir = Path(__file__).parent / "fixtures"
build_xml = fixtures_dir / "xml" / "build.xml"
namespaced_xml = fixtures_dir / "xml" / "namespaced.xml"
ant_rules_yaml = fixtures_dir / "rules" / "ant.yaml"
ant_rules_file = fixtures_dir / "rules" / "ant.rules"


class CallLog:
    """Collects handler calls as (label, node name, value) tuples."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str, object]] = []

    def handler(self, label: str):
        """Return a handler that records calls under ``label``."""

        def record(node: XmlNode, value: object) -> None:
            self.calls.append((label, node.name, value))

        return record

    def labels(self) -> list[str]:
        return [label for label, _, _ in self.calls]


@pytest.fixture
def call_log() -> CallLog:
    return CallLog()


@pytest.fixture
def sample_tree() -> SimpleNode:
    """
    <r a="1">
        <!--c1-->
        <child b="2"/>
    </r>
    """
    return SimpleNode.element(
        "r",
        {"a": "1"},
        SimpleNode.comment("c1"),
        SimpleNode.element("child", {"b": "2"}),
    )


@pytest.fixture(autouse=True)
def fresh_settings():
    """Give every test default settings, restoring the previous ones afterwards."""
    original_settings = get_settings()
    set_settings(PipelineSettings())

    yield

    set_settings(original_settings)
