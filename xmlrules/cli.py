"""CLI interface for xmlrules."""

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from xmlrules.config import PipelineSettings, RulesSettings, get_settings, set_settings
from xmlrules.formatters import format_as_json
from xmlrules.models.match import Match, MatchResult
from xmlrules.pipeline.pipeline import run_pipeline
from xmlrules.pipeline.rules import RuleParseError
from xmlrules.pipeline.rules_factory import load_declarations

console = Console()


def setup_logging(log_level: str) -> None:
    """Configure logging with rich handler."""
    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def _truncate(text: str, limit: int) -> str:
    """Shorten text for display, collapsing whitespace runs."""
    text = " ".join(text.split())
    if len(text) > limit:
        return text[: limit - 3] + "..."
    return text


def _format_value(match: Match, limit: int) -> str:
    """Render a match's value for the console."""
    if isinstance(match.value, dict):
        rendered = " ".join(f'{key}="{value}"' for key, value in match.value.items())
        return escape(_truncate(rendered, limit)) if rendered else "[dim](no attributes)[/dim]"
    return escape(_truncate(match.value, limit))


def display_matches(result: MatchResult) -> None:
    """Display recorded matches as a table."""
    console.print(
        f"\n[bold cyan]{result.path}[/bold cyan] "
        f"[dim]({result.rule_count} rule(s), max depth {result.max_depth})[/dim]"
    )

    if not result.matches:
        console.print("\n[yellow]No rules matched.[/yellow]\n")
        return

    limit = get_settings().output.max_value_length
    table = Table(show_header=True, header_style="bold")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Rule", style="cyan")
    table.add_column("Depth", justify="right")
    table.add_column("Node")
    table.add_column("Value")

    for i, match in enumerate(result.matches, 1):
        table.add_row(str(i), escape(match.label), str(match.depth), match.node_name, _format_value(match, limit))

    console.print(table)
    console.print(f"[bold green]{result.match_count} match(es)[/bold green]\n")


def _print_rules(settings: PipelineSettings) -> None:
    """Print the rules that would be applied."""
    declarations = load_declarations(settings)
    console.print(f"\n[bold blue]Rules ({len(declarations)}):[/bold blue]\n")
    for declaration in declarations:
        console.print(f"  [cyan]•[/cyan] {escape(declaration.label)} [dim]{declaration}[/dim]")
    console.print()


def _write_output(text: str, output_path: Path | None) -> None:
    """Write output text to file or stdout."""
    if output_path:
        output_path.write_text(text)
    else:
        print(text)


def _configure_settings(rules_file: Path | None, ruleset: str | None, rules: tuple[str, ...]) -> PipelineSettings:
    """Configure pipeline settings."""
    base = get_settings()
    settings = PipelineSettings(
        parse=base.parse,
        rules=RulesSettings(
            rules_file=str(rules_file) if rules_file else base.rules.rules_file,
            ruleset=ruleset or base.rules.ruleset,
            rules=[*base.rules.rules, *rules],
        ),
        output=base.output,
    )
    set_settings(settings)
    return settings


@click.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--rules",
    "rules_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Rules file: YAML rulesets (.yaml/.yml) or one 'kind:depth[:tag]' rule per line",
)
@click.option(
    "--ruleset",
    type=str,
    default=None,
    help="Ruleset to load from a YAML rules file (default: XMLRULES_RULES_RULESET or 'default')",
)
@click.option(
    "--rule",
    "rules",
    multiple=True,
    help="Inline rule such as 'element:0:project', 'content:1:description' or 'comment:1' (repeatable)",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["console", "json"], case_sensitive=False),
    default="console",
    help="Output format (default: console)",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    default=None,
    help="Output file path (default: stdout)",
)
@click.option(
    "--list-rules",
    is_flag=True,
    default=False,
    help="List the configured rules and exit",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default="WARNING",
    help="Set the logging level",
)
def main(
    path: Path,
    rules_file: Path | None,
    ruleset: str | None,
    rules: tuple[str, ...],
    output_format: str,
    output: Path | None,
    list_rules: bool,
    log_level: str,
) -> None:
    """Run depth-scoped XML rules over the document at PATH and report every match."""
    setup_logging(log_level.upper())
    settings = _configure_settings(rules_file, ruleset, rules)

    if not settings.rules.rules_file and not settings.rules.rules:
        console.print("[bold red]Error:[/bold red] No rules given (use --rules or --rule)")
        sys.exit(2)

    try:
        if list_rules:
            _print_rules(settings)
            return
        result = run_pipeline(path, settings)
    except (RuleParseError, FileNotFoundError) as e:
        console.print(f"[bold red]Error:[/bold red] Failed to load rules: {escape(str(e))}")
        sys.exit(1)
    except (ValueError, RuntimeError) as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        sys.exit(1)

    if output_format.lower() == "json":
        _write_output(format_as_json(result, pretty=True), output)
    else:
        display_matches(result)


if __name__ == "__main__":
    main()
