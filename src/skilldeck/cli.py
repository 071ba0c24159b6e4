"""
Main CLI for skilldeck using Click.

Every command takes an optional corpus PATH (default: workspace.root from
configuration, which defaults to the current directory). Reports go to
stdout; the human trace and technical logs go to stderr.
"""

import json
import sys
from pathlib import Path
from typing import Any

import click
from pydantic import ValidationError

from . import __version__
from .config import AppConfig, load_config
from .corpus import Corpus, CorpusLoader, SkillScaffolder, find_skill, match_skills
from .errors import SkilldeckError
from .lint import REPORT_FORMATS, RULES_BY_ID, Linter, ReportRenderer, infer_report_format
from .logging import configure_logging

# Exit codes
EXIT_SUCCESS = 0
EXIT_FAILED = 1
EXIT_CONFIG_ERROR = 3


def _load_app_config(
    config_path: Path | None,
    cli_args: dict[str, Any],
    quiet: bool = False,
    json_output: bool = False,
) -> AppConfig:
    """Load configuration and configure logging, exiting on bad config."""
    try:
        config = load_config(config_path=config_path, cli_args=cli_args)
    except (FileNotFoundError, SkilldeckError, ValidationError) as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(EXIT_CONFIG_ERROR)
    configure_logging(config.logging, json_output=json_output, quiet=quiet)
    return config


def _load_corpus(config: AppConfig) -> Corpus:
    try:
        return CorpusLoader(config.workspace.root, config).load()
    except SkilldeckError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_CONFIG_ERROR)


def _write_report_file(report_file: str, content: str) -> str | None:
    """Write the report to the given file, creating directories if needed.

    Returns:
        Path where the file was saved, or None if writing failed.
    """
    target = Path(report_file)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content + "\n", encoding="utf-8")
        return str(target)
    except OSError as e:
        click.echo(f"Could not save report: {e}", err=True)
        return None


_path_argument = click.argument(
    "path", required=False, type=click.Path(file_okay=False, path_type=Path)
)
_config_option = click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Path to the YAML configuration file (default: .skilldeck.yaml in the corpus)",
)


@click.group()
@click.version_option(version=__version__, prog_name="skilldeck")
def main() -> None:
    """skilldeck - Load and lint AI-assistant skill and plugin corpora.

    A corpus is a directory of Markdown skills with YAML frontmatter,
    grouped into plugins and listed in .claude-plugin/marketplace.json.
    """
    pass


@main.command()
@_path_argument
@_config_option
@click.option(
    "--format",
    "fmt",
    type=click.Choice(REPORT_FORMATS),
    default=None,
    help="Report format (default: inferred from --output, else text)",
)
@click.option("-o", "--output", "report_file", type=click.Path(), default=None, help="Write the report to a file")
@click.option("--disable", multiple=True, help="Disable a rule (repeatable)")
@click.option("--strict", is_flag=True, help="Treat warnings as errors")
@click.option("--no-links", is_flag=True, help="Skip link checking")
@click.option("-v", "--verbose", count=True, help="Technical log verbosity (-v, -vv)")
@click.option("--log-file", type=click.Path(), default=None, help="Write JSON logs to this file")
@click.option("--quiet", is_flag=True, help="Only print the report")
def lint(
    path: Path | None,
    config_path: Path | None,
    fmt: str | None,
    report_file: str | None,
    disable: tuple[str, ...],
    strict: bool,
    no_links: bool,
    verbose: int,
    log_file: str | None,
    quiet: bool,
) -> None:
    """Check a corpus against the plugin host's static contract.

    Exits 0 when no errors are found, 1 when there are errors and 3 on
    configuration problems.

    Example:

        skilldeck lint ./my-marketplace --format github
    """
    if fmt is None:
        fmt = infer_report_format(report_file) if report_file else "text"

    cli_args = {
        "root": str(path) if path else None,
        "disable": list(disable),
        "strict": strict,
        "no_links": no_links,
        "verbose": verbose or None,
        "log_file": log_file,
    }
    machine = fmt in ("json", "github") and not report_file
    config = _load_app_config(config_path, cli_args, quiet=quiet, json_output=machine)
    corpus = _load_corpus(config)

    try:
        linter = Linter(config.lint)
    except SkilldeckError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(EXIT_CONFIG_ERROR)

    report = linter.lint(corpus)
    rendered = ReportRenderer(report).render(fmt)

    if report_file:
        saved = _write_report_file(report_file, rendered)
        if saved and not quiet:
            click.echo(f"Report saved to: {saved}", err=True)
    else:
        click.echo(rendered)

    sys.exit(EXIT_SUCCESS if report.passed else EXIT_FAILED)


@main.command("list")
@_path_argument
@_config_option
@click.option("--json", "as_json", is_flag=True, help="Output JSON")
def list_cmd(path: Path | None, config_path: Path | None, as_json: bool) -> None:
    """List plugins and their skills."""
    config = _load_app_config(
        config_path, {"root": str(path) if path else None}, json_output=as_json
    )
    corpus = _load_corpus(config)

    if as_json:
        data = {
            "marketplace": corpus.marketplace.name if corpus.marketplace else None,
            "plugins": [
                {
                    "name": p.name,
                    "version": p.version,
                    "description": p.description,
                    "skills": [{"name": s.name, "description": s.description} for s in p.skills],
                }
                for p in corpus.plugins
            ],
            "skills": [{"name": s.name, "description": s.description} for s in corpus.loose_skills],
        }
        click.echo(json.dumps(data, indent=2, ensure_ascii=False))
        return

    if corpus.marketplace:
        click.echo(f"Marketplace: {corpus.marketplace.name or '(unnamed)'}")
    if not corpus.plugins and not corpus.loose_skills:
        click.echo("  No skills found.")
        return
    for plugin in corpus.plugins:
        version = f" v{plugin.version}" if plugin.version else ""
        click.echo(f"\n{plugin.name}{version}")
        for skill in plugin.skills:
            click.echo(f"  {skill.name:30s} {_first_line(skill.description)}")
    if corpus.loose_skills:
        click.echo("\n(no plugin)")
        for skill in corpus.loose_skills:
            click.echo(f"  {skill.name:30s} {_first_line(skill.description)}")


def _first_line(text: str, width: int = 70) -> str:
    line = text.splitlines()[0] if text else ""
    return line if len(line) <= width else line[: width - 3] + "..."


@main.command()
@click.argument("name")
@_path_argument
@_config_option
@click.option("--body/--no-body", default=True, help="Print the skill body")
def show(name: str, path: Path | None, config_path: Path | None, body: bool) -> None:
    """Print a skill's frontmatter and body. NAME may be plugin:skill."""
    config = _load_app_config(config_path, {"root": str(path) if path else None}, quiet=True)
    corpus = _load_corpus(config)

    skill = find_skill(corpus, name)
    if skill is None:
        click.echo(f"Skill '{name}' not found", err=True)
        sys.exit(EXIT_FAILED)

    click.echo(f"# {skill.qualified_name}")
    click.echo(f"path: {skill.path}")
    for key, value in skill.metadata.items():
        click.echo(f"{key}: {value}")
    if skill.references:
        click.echo("references:")
        for ref in skill.references:
            click.echo(f"  - {ref.path.relative_to(skill.directory).as_posix()}")
    if body:
        click.echo("")
        click.echo(skill.body.strip("\n"))


@main.command()
@click.argument("query")
@_path_argument
@_config_option
@click.option("--limit", default=5, type=int, show_default=True, help="Maximum results")
def search(query: str, path: Path | None, config_path: Path | None, limit: int) -> None:
    """Find skills whose name or description matches QUERY."""
    config = _load_app_config(config_path, {"root": str(path) if path else None}, quiet=True)
    corpus = _load_corpus(config)

    results = match_skills(corpus, query, limit=limit)
    if not results:
        click.echo("  No matching skills.")
        sys.exit(EXIT_FAILED)
    for skill, score in results:
        click.echo(f"  {score:3d}  {skill.qualified_name:35s} {_first_line(skill.description, 60)}")


@main.command()
def rules() -> None:
    """List the available lint rules."""
    for rule in RULES_BY_ID.values():
        click.echo(f"  {rule.id:22s} {rule.severity:8s} {rule.description}")


@main.command("new-skill")
@click.argument("name")
@_path_argument
@click.option("--description", default=None, help="Frontmatter description")
@click.option("--plugin", default=None, help="Create the skill inside this plugin directory")
def new_skill(name: str, path: Path | None, description: str | None, plugin: str | None) -> None:
    """Create a skill from the template."""
    configure_logging(AppConfig().logging)
    scaffolder = SkillScaffolder(path or Path("."))
    try:
        skill_dir = scaffolder.create_skill(name, description=description, plugin=plugin)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_FAILED)
    click.echo(f"Skill created at {skill_dir}")


@main.command("new-plugin")
@click.argument("name")
@_path_argument
@click.option("--description", default="", help="Plugin description")
@click.option("--version", "version", default="0.1.0", show_default=True, help="Plugin version")
@click.option("--owner", default=None, help="Marketplace owner name when creating the manifest")
def new_plugin(name: str, path: Path | None, description: str, version: str, owner: str | None) -> None:
    """Create a plugin and register it in the marketplace manifest."""
    configure_logging(AppConfig().logging)
    scaffolder = SkillScaffolder(path or Path("."))
    try:
        plugin_dir = scaffolder.create_plugin(name, description=description, version=version, owner=owner)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_FAILED)
    except SkilldeckError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_CONFIG_ERROR)
    click.echo(f"Plugin created at {plugin_dir}")


@main.command("remove-skill")
@click.argument("name")
@_path_argument
@click.option("--plugin", default=None, help="Plugin directory containing the skill")
def remove_skill(name: str, path: Path | None, plugin: str | None) -> None:
    """Delete a skill directory."""
    configure_logging(AppConfig().logging)
    scaffolder = SkillScaffolder(path or Path("."))
    try:
        removed = scaffolder.remove_skill(name, plugin=plugin)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_FAILED)
    if removed:
        click.echo(f"Skill '{name}' removed")
    else:
        click.echo(f"Skill '{name}' not found", err=True)
        sys.exit(EXIT_FAILED)


@main.command("validate-config")
@_config_option
def validate_config(config_path: Path | None) -> None:
    """Validate a YAML configuration file."""
    try:
        app_config = load_config(config_path=config_path)
        configure_logging(app_config.logging, quiet=True)
        Linter(app_config.lint)
    except FileNotFoundError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_CONFIG_ERROR)
    except (SkilldeckError, ValidationError) as e:
        click.echo(f"Invalid configuration: {e}", err=True)
        sys.exit(EXIT_FAILED)

    lint_cfg = app_config.lint
    click.echo("Valid configuration")
    click.echo(f"  Corpus root: {app_config.workspace.root}")
    click.echo(f"  Name max length: {lint_cfg.name_max_length}")
    click.echo(f"  Description max length: {lint_cfg.description_max_length}")
    click.echo(f"  Disabled rules: {', '.join(lint_cfg.disabled_rules) or '(none)'}")


if __name__ == "__main__":
    main()
