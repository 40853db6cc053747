"""CLI entry point - Click commands for deploygate."""

from __future__ import annotations

import dataclasses
import logging
import sys

import click

from deploygate import __version__
from deploygate.cli._loader import load_environment
from deploygate.cli._output import (
    format_json,
    format_rules_json,
    format_rules_text,
    format_text,
)
from deploygate.core._types import RuleKind, Severity, Status
from deploygate.core.config import NO_RULESET, ConfigurationError, PreflightConfig, load_config
from deploygate.core.validator import validate
from deploygate.rules import ALL_RULES, BUILTIN_RULESETS


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(__version__, "-V", "--version", message="deploygate %(version)s")
def cli() -> None:
    """deploygate - preflight checks before build and deploy."""


@cli.command()
@click.argument(
    "directory",
    default=".",
    type=click.Path(file_okay=False),
)
@click.option(
    "--config",
    "config_path",
    default=None,
    type=click.Path(exists=False),
    help="Path to .deploygate.toml or pyproject.toml config file.",
)
@click.option(
    "--ruleset",
    type=click.Choice([*BUILTIN_RULESETS, NO_RULESET]),
    default=None,
    help="Built-in rule set (overrides config file ruleset).",
)
@click.option("--env-file", default=None, help="Dotenv file, relative to DIRECTORY.")
@click.option(
    "--os-environ",
    is_flag=True,
    help="Also read keys from the process environment (the env file wins).",
)
@click.option("--exclude-rules", default="", help="Comma-separated rule IDs to exclude.")
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format.",
)
@click.option("--no-color", is_flag=True, envvar="NO_COLOR", help="Disable ANSI colors.")
@click.option("--strict", is_flag=True, help="Exit 1 on warnings as well.")
@click.option("-v", "--verbose", is_flag=True, help="Log every check to stderr.")
def check(
    directory: str,
    config_path: str | None,
    ruleset: str | None,
    env_file: str | None,
    os_environ: bool,
    exclude_rules: str,
    fmt: str,
    no_color: bool,
    strict: bool,
    verbose: bool,
) -> None:
    """Run preflight checks against DIRECTORY (default: current directory).

    Exits 1 when a blocking check failed (or any check, with --strict),
    2 when the configuration itself is invalid.
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    try:
        config: PreflightConfig = load_config(config_path, start=directory)

        overrides: dict[str, object] = {}
        if ruleset is not None:
            overrides["ruleset"] = ruleset
        if env_file is not None:
            overrides["env_file"] = env_file
        if excluded := {r.strip() for r in exclude_rules.split(",") if r.strip()}:
            # CLI exclusions are additive to the config file's.
            overrides["exclude_rules"] = config.exclude_rules | excluded
        if overrides:
            config = dataclasses.replace(config, **overrides)  # type: ignore[arg-type]

        environment = load_environment(
            directory, env_file=config.env_file, use_os_environ=os_environ
        )
        report = validate(config.rule_set(), environment, config=config)
    except ConfigurationError as exc:
        click.echo(f"Error: invalid configuration: {exc}", err=True)
        sys.exit(2)

    if fmt == "json":
        click.echo(format_json(report, directory=directory))
    else:
        click.echo(format_text(report, directory=directory, no_color=no_color))

    if report.status == Status.BLOCKED:
        sys.exit(1)
    if strict and report.status == Status.PASS_WITH_WARNINGS:
        sys.exit(1)


@cli.command()
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format.",
)
@click.option("--no-color", is_flag=True, envvar="NO_COLOR", help="Disable ANSI colors.")
@click.option(
    "--ruleset",
    default=None,
    type=click.Choice(list(BUILTIN_RULESETS)),
    help="Only list rules of this built-in rule set, in evaluation order.",
)
@click.option(
    "--severity",
    "sev",
    default=None,
    type=click.Choice([str(s) for s in Severity]),
    help="Filter by severity.",
)
@click.option(
    "--kind",
    default=None,
    type=click.Choice([str(k) for k in RuleKind]),
    help="Filter by rule kind.",
)
def rules(fmt: str, no_color: bool, ruleset: str | None, sev: str | None, kind: str | None) -> None:
    """List built-in rules."""
    source = list(BUILTIN_RULESETS[ruleset]) if ruleset is not None else list(ALL_RULES)
    filtered = source
    if sev is not None:
        filtered = [r for r in filtered if r.severity == Severity(sev)]
    if kind is not None:
        filtered = [r for r in filtered if r.kind == RuleKind(kind)]

    total = len(source) if (sev is not None or kind is not None) else None

    if fmt == "json":
        click.echo(format_rules_json(filtered))
    else:
        click.echo(format_rules_text(filtered, no_color=no_color, total=total))
