"""CLI entrypoint for git-ruler."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Annotated

import typer

from git_ruler import __version__
from git_ruler.config import RulerConfig, load_config
from git_ruler.git import GitError, GitRepository
from git_ruler.output import format_score, render_human, render_json
from git_ruler.rules import UnknownRule, list_rule_info
from git_ruler.scoring import run_rules
from git_ruler.workspace import ensure_setup

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"

app = typer.Typer(
    name="git-ruler",
    no_args_is_help=True,
    help="Check a git repository's history and working tree against a list of rules.",
)


def version_callback(value: bool) -> None:
    """Print version and exit when --version is provided."""
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@app.callback()
def main_callback(
    version: Annotated[
        bool,
        typer.Option("--version", help="Show version and exit.", callback=version_callback),
    ] = False,
) -> None:
    """Root command callback."""
    _ = version


@app.command("check")
def check_command(
    repo: Annotated[Path, typer.Option("--repo", "-r", help="Repository path.")] = Path("."),
    config_file: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to rules file (JSON or TOML). Relative paths resolve against --repo.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show error details and debug logging."),
    ] = False,
    format: Annotated[str, typer.Option(help="Output format: human|json.")] = "human",
    strict: Annotated[
        bool, typer.Option("--strict", help="Exit nonzero if any rule failed.")
    ] = False,
) -> None:
    """Evaluate every rule against the repository and report the results."""
    _configure_logging(verbose)
    output_format = _output_format_or_raise(format)

    ruler_config = _load_config_or_raise(repo, config_file)
    git_repo = _open_repository_or_raise(repo)

    try:
        ensure_setup(git_repo.worktree, ruler_config.setup_files)
    except OSError as exc:
        typer.echo("Couldn't create setup files", err=True)
        if verbose:
            typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc

    report = run_rules(ruler_config.rules, git_repo)

    if output_format == "json":
        typer.echo(
            render_json(
                report,
                repo=str(git_repo.worktree),
                config_source=ruler_config.source,
                verbose=verbose,
            )
        )
    else:
        typer.echo(render_human(report, verbose=verbose))

    if strict and report.failed:
        raise typer.Exit(code=1)


@app.command("rules")
def rules_command(
    format: Annotated[str, typer.Option(help="Output format: human|json.")] = "human",
) -> None:
    """List the rule kinds a rules file may use."""
    output_format = _output_format_or_raise(format)
    rule_info = list_rule_info()

    if output_format == "json":
        payload = {
            "rules": [
                {
                    "rule": item.kind,
                    "name": item.name,
                    "description": item.description,
                    "parameters": list(item.parameters),
                }
                for item in rule_info
            ]
        }
        typer.echo(json.dumps(payload, sort_keys=True))
        return

    lines = ["Available rules:"]
    for item in rule_info:
        parameters = ", ".join(item.parameters) or "no parameters"
        lines.append(f"- {item.kind} ({parameters}) - {item.description}")
    typer.echo("\n".join(lines))


@app.command("config-validate")
def config_validate_command(
    repo: Annotated[Path, typer.Option("--repo", "-r", help="Repository path.")] = Path("."),
    config_file: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to rules file to validate. Relative paths resolve against --repo.",
        ),
    ] = None,
    format: Annotated[str, typer.Option(help="Output format: human|json.")] = "human",
) -> None:
    """Validate a rules file and summarize what it checks."""
    output_format = _output_format_or_raise(format)
    ruler_config = _load_config_or_raise(repo, config_file)
    unknown = [rule.name for rule in ruler_config.rules if isinstance(rule, UnknownRule)]

    payload = ruler_config.to_dict()
    payload["ok"] = not unknown
    payload["unknown_rules"] = unknown
    if output_format == "json":
        typer.echo(json.dumps(payload, sort_keys=True))
        return

    lines = [
        "Config is valid." if not unknown else "Config loaded with unknown rules.",
        f"- source: {payload['source']}",
        f"- rules: {payload['rule_count']}",
        f"- available score: {format_score(payload['total_available_score'])}",
        f"- setup files: {payload['setup_files']}",
    ]
    if unknown:
        lines.append(f"- unknown rules: {unknown}")
    typer.echo("\n".join(lines))


def main() -> None:
    """Console script entrypoint."""
    app()


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level, format=LOG_FORMAT)
    else:
        root.setLevel(level)


def _output_format_or_raise(value: str) -> str:
    output_format = value.lower()
    if output_format not in {"human", "json"}:
        raise typer.BadParameter("format must be one of: human, json", param_hint="--format")
    return output_format


def _load_config_or_raise(repo: Path, config_file: Path | None = None) -> RulerConfig:
    try:
        return load_config(repo, config_path=config_file)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="config") from exc


def _open_repository_or_raise(repo: Path) -> GitRepository:
    try:
        return GitRepository(repo)
    except GitError as exc:
        raise typer.BadParameter(str(exc), param_hint="--repo") from exc
