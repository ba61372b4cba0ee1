# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""
Main CLI entry point for ecs-cron.

Dumb trigger: parses args, loads parameters, compiles the plan, renders it.
No resource logic here - all of it lives in the builders.
"""

import json
import logging
from dataclasses import MISSING, fields
from pathlib import Path
from typing import List, Optional

import typer
import yaml

from ecs_cron import __version__
from ecs_cron.compiler import TOPIC_OUTPUT, compile_params
from ecs_cron.config import default_event_log, load_params_file, merge_params
from ecs_cron.errors import CompileError, ParamError
from ecs_cron.event_client import CompileEventLog
from ecs_cron.render import FORMATS, render_plan
from ecs_cron.schemas import JobParams
from ecs_cron.schemas.params import string_fields


app = typer.Typer(
    name="ecs-cron",
    help="Compile a scheduled ECS job into a CloudFormation plan",
    no_args_is_help=True,
)

logger = logging.getLogger(__name__)


@app.callback()
def main_callback(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Configure logging for every command."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = {"verbose": verbose}


def parse_overrides(args: Optional[List[str]]) -> dict:
    """Parse key=value overrides, typed by the input they target.

    String inputs keep the raw text, so image_tag=20240101 stays a tag.
    Optional string inputs also accept null. Every other value is read as
    a YAML scalar or flow collection: 2048, true, [subnet-a], {"command": [...]}.
    """
    if not args:
        return {}
    text_fields = set(string_fields())
    nullable = {f.name for f in fields(JobParams) if f.type is Optional[str]}
    result = {}
    for arg in args:
        if "=" not in arg:
            raise ParamError(f"Expected key=value, got: {arg}")
        key, value = arg.split("=", 1)
        if key in nullable and value.lower() in ("null", "none"):
            result[key] = None
        elif key in text_fields:
            result[key] = value
        else:
            try:
                result[key] = yaml.safe_load(value) if value else value
            except yaml.YAMLError:
                result[key] = value
    return result


def _split_args(params_file: Optional[str], args: Optional[List[str]]):
    """A first argument containing '=' is an override, not a file."""
    if params_file and "=" in params_file:
        return None, [params_file] + list(args or [])
    return params_file, args


def _load(params_file: Optional[str], args: Optional[List[str]]) -> dict:
    params_file, args = _split_args(params_file, args)
    data = merge_params(load_params_file(params_file), parse_overrides(args))
    logger.debug(f"Loaded parameters: {sorted(data)}")
    return data


@app.command()
def plan(
    params_file: Optional[str] = typer.Argument(None, help="Parameters YAML file"),
    args: Optional[List[str]] = typer.Argument(None, help="key=value parameter overrides"),
    format: str = typer.Option("json", "--format", "-f", help=f"Output format: {', '.join(FORMATS)}"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the plan to a file"),
    event_log: Optional[Path] = typer.Option(None, "--event-log", help="Append a JSONL compile event"),
):
    """Compile parameters into a plan and render it."""
    if format not in FORMATS:
        typer.echo(f"Error: unknown format '{format}'", err=True)
        raise typer.Exit(1)

    event_path = event_log or default_event_log()
    events = CompileEventLog(event_path) if event_path else None

    try:
        compiled = compile_params(_load(params_file, args))
    except FileNotFoundError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    except CompileError as e:
        if events:
            events.log_failure(e)
        label = "Parameter error" if isinstance(e, ParamError) else "Compile error"
        typer.echo(f"{label}: {e}", err=True)
        raise typer.Exit(1)

    rendered = render_plan(compiled, format_type=format)
    if output:
        output.write_text(rendered + "\n")
        typer.echo(f"Wrote plan for {compiled.job_name} to {output}", err=True)
    else:
        typer.echo(rendered)

    if events:
        events.log_compile(compiled)


@app.command()
def validate(
    params_file: Optional[str] = typer.Argument(None, help="Parameters YAML file"),
    args: Optional[List[str]] = typer.Argument(None, help="key=value parameter overrides"),
):
    """Validate parameters by compiling them without rendering."""
    try:
        compiled = compile_params(_load(params_file, args))
    except FileNotFoundError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    except CompileError as e:
        typer.echo(f"Validation failed: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"Parameters for {compiled.job_name} are valid")
    typer.echo(f"Resources: {len(compiled)}")
    typer.echo(f"Outputs: {', '.join(compiled.outputs) or TOPIC_OUTPUT}")


@app.command()
def inputs():
    """List input parameters and their defaults."""
    for f in fields(JobParams):
        if f.default is not MISSING:
            default = json.dumps(f.default)
        elif f.default_factory is not MISSING:
            default = json.dumps(f.default_factory())
        else:
            default = "(required)"
        typer.echo(f"{f.name}: {default}")


@app.command()
def version():
    """Show version information."""
    typer.echo(f"ecs-cron version {__version__}")


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
