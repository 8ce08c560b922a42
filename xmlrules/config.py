"""Configuration for xmlrules using pydantic-settings."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ParseSettings(BaseSettings):
    """Settings handed to the lxml parser."""

    model_config = SettingsConfigDict(
        env_prefix="XMLRULES_PARSE_",
    )

    remove_blank_text: bool = Field(
        default=False,
        description="Drop whitespace-only text between elements",
    )

    resolve_entities: bool = Field(
        default=False,
        description="Expand external entity references (off to avoid XXE)",
    )

    huge_tree: bool = Field(
        default=False,
        description="Lift libxml2's depth and text size limits for very large documents",
    )

    strip_cdata: bool = Field(
        default=True,
        description="Merge CDATA sections into the surrounding text",
    )


class RulesSettings(BaseSettings):
    """Settings for loading rules."""

    model_config = SettingsConfigDict(
        env_prefix="XMLRULES_RULES_",
    )

    rules_file: str | None = Field(
        default=None,
        description="Path to a rules file (YAML rulesets or one DSL rule per line)",
    )

    ruleset: str = Field(
        default="default",
        description="Ruleset to load from a YAML rules file",
    )

    rules: list[str] = Field(
        default_factory=list,
        description="Inline rule declarations such as 'element:0:project'",
    )


class OutputSettings(BaseSettings):
    """Settings for presenting matches."""

    model_config = SettingsConfigDict(
        env_prefix="XMLRULES_OUTPUT_",
    )

    max_value_length: int = Field(
        default=80,
        ge=10,
        description="Truncate matched text longer than this in console output",
    )


class PipelineSettings(BaseSettings):
    """Global settings for the entire pipeline."""

    model_config = SettingsConfigDict(
        env_prefix="XMLRULES_",
    )

    parse: ParseSettings = Field(default_factory=ParseSettings)
    rules: RulesSettings = Field(default_factory=RulesSettings)
    output: OutputSettings = Field(default_factory=OutputSettings)


# Global settings instance that can be accessed throughout the application
_settings: PipelineSettings | None = None


def get_settings() -> PipelineSettings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = PipelineSettings()
    return _settings


def set_settings(settings: PipelineSettings) -> None:
    """Set the global settings instance."""
    global _settings
    _settings = settings
