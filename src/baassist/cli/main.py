"""CLI interface for the business-analyst assistant."""

import json
import os
import sys
from pathlib import Path
from typing import Any, Optional

import click
import yaml

from baassist.cli.formatters import OutputFormatter
from baassist.core.config import BOUNDS_POLICIES, USER_CONFIG_PATH, Config
from baassist.core.errors import BAAssistError
from baassist.core.jira import create_jira_tickets
from baassist.core.logging import configure_logging
from baassist.core.normalizer import normalize
from baassist.core.validator import validate
from baassist.schemas.requests import TaskKind
from baassist.schemas.shapes import RootKind, shape_for

TASK_KIND_CHOICES = [kind.route for kind in TaskKind] + [kind.value for kind in TaskKind]


def _read_source(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


def _load_json(source: str, param_hint: str) -> Any:
    try:
        return json.loads(_read_source(source))
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"invalid JSON: {e}", param_hint=param_hint)


def _parse_fields(fields: tuple[str, ...]) -> dict[str, Any]:
    """Parse ``name=value`` pairs; values that parse as JSON are decoded."""
    parsed: dict[str, Any] = {}
    for item in fields:
        if "=" not in item:
            raise click.BadParameter(f"expected name=value, got '{item}'", param_hint="--field")
        name, value = item.split("=", 1)
        try:
            parsed[name] = json.loads(value)
        except json.JSONDecodeError:
            parsed[name] = value
    return parsed


def _emit(formatter: OutputFormatter, data: Any, output: Optional[str]) -> None:
    if output:
        content = json.dumps(data, indent=2, ensure_ascii=False)
        Path(output).write_text(content + "\n", encoding="utf-8")
        formatter.print_success(f"Output written to: {output}")
    else:
        formatter.print_json(data)


def _fail(formatter: OutputFormatter, error: BAAssistError) -> None:
    formatter.print_error_body(error.to_response().to_body())
    sys.exit(1)


@click.group()
@click.version_option(package_name="baassist")
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    help="Logging level (default: from config, INFO)",
)
@click.option("--json-logs", is_flag=True, default=False, help="Emit JSON log lines")
@click.option("--log-file", type=click.Path(), default=None, help="Also write logs to this file")
@click.option("--color", is_flag=True, default=False, help="Force colored output")
@click.option(
    "--config",
    "config_file",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Path to configuration file (YAML or JSON)",
)
@click.pass_context
def main(
    ctx,
    log_level: Optional[str],
    json_logs: bool,
    log_file: Optional[str],
    color: bool,
    config_file: Optional[str],
):
    """
    Business-analyst assistant.

    Turns free-text business requirements into requirement documents,
    market research and estimated, assigned task lists using a hosted LLM.

    Supported completion providers:
      - Groq (default, requires GROQ_API_KEY)
      - OpenRouter (requires OPENROUTER_API_KEY)
      - OpenAI (requires OPENAI_API_KEY)
      - Ollama (local, requires running Ollama server)
    """
    ctx.ensure_object(dict)
    ctx.obj["config_file"] = Path(config_file) if config_file else None
    ctx.obj["formatter"] = OutputFormatter(force_color=color)
    base = Config.load(config_file=ctx.obj["config_file"])
    configure_logging(
        level=log_level or base.log_level,
        json_output=json_logs or base.json_logs,
        log_file=log_file or base.log_file,
    )


@main.command()
@click.argument("task_kind", type=click.Choice(TASK_KIND_CHOICES))
@click.option(
    "--input",
    "-i",
    "input_source",
    default=None,
    help="JSON object of named inputs: a file path or '-' for stdin",
)
@click.option("--field", "fields", multiple=True, help="Named input as name=value (repeatable)")
@click.option("--output", "-o", type=click.Path(writable=True), default=None, help="Output file (default: stdout)")
@click.option(
    "--provider",
    "-p",
    type=click.Choice(["auto", "groq", "openrouter", "openai", "ollama"], case_sensitive=False),
    default=None,
    help="Completion provider (default: auto-detect)",
)
@click.option("--model", "-m", default=None, help="Model name (provider-specific)")
@click.option("--temperature", "-t", type=float, default=None, help="Sampling temperature (default: 0.1)")
@click.option("--max-retries", type=int, default=None, help="Retries on transient provider errors (default: 2)")
@click.option(
    "--bounds-policy",
    type=click.Choice(BOUNDS_POLICIES),
    default=None,
    help="Out-of-range confidence/estimatedHours handling (default: clamp)",
)
@click.option("--base-url", default=None, help="Provider endpoint override")
@click.option("--api-key", default=None, help="Provider API key (or use the provider's env var)")
@click.pass_context
def run(
    ctx,
    task_kind: str,
    input_source: Optional[str],
    fields: tuple[str, ...],
    output: Optional[str],
    provider: Optional[str],
    model: Optional[str],
    temperature: Optional[float],
    max_retries: Optional[int],
    bounds_policy: Optional[str],
    base_url: Optional[str],
    api_key: Optional[str],
):
    """
    Run one generation task and print the validated JSON.

    TASK_KIND is a route name (generate-documents, conduct-research,
    breakdown-tasks, assign-tasks) or a kind (DocumentSet, ...).

    Examples:

      # Documents from a requirements file
      baassist run generate-documents --field requirements="$(cat reqs.txt)"

      # Assignment from a JSON file with "tasks" and "teamMembers"
      baassist run assign-tasks --input team.json -o assigned.json
    """
    from baassist.core.dispatcher import RouteDispatcher
    from baassist.core.provider_factory import create_client_from_config
    from baassist.schemas.requests import GenerationRequest

    inputs: dict[str, Any] = {}
    if input_source:
        loaded = _load_json(input_source, "--input")
        if not isinstance(loaded, dict):
            raise click.BadParameter("input must be a JSON object", param_hint="--input")
        inputs.update(loaded)
    inputs.update(_parse_fields(fields))

    cli_config = {
        "provider": provider,
        "model": model,
        "temperature": temperature,
        "max_retries": max_retries,
        "bounds_policy": bounds_policy,
        "base_url": base_url,
        "api_key": api_key,
    }
    formatter = ctx.obj["formatter"]
    config_obj = Config.load(cli_config, config_file=ctx.obj["config_file"])

    try:
        client = create_client_from_config(config_obj)
    except ValueError as e:
        formatter.print_error(str(e))
        sys.exit(1)

    dispatcher = RouteDispatcher(client, bounds_policy=config_obj.bounds_policy)
    try:
        document = dispatcher.dispatch(
            GenerationRequest(task_kind=TaskKind.from_route(task_kind), inputs=inputs)
        )
    except BAAssistError as e:
        _fail(formatter, e)
    finally:
        dispatcher.close()

    _emit(formatter, document.data, output)


@main.command()
@click.argument("task_kind", type=click.Choice(TASK_KIND_CHOICES))
@click.argument("completion_file", type=click.Path(exists=False))
@click.option(
    "--bounds-policy",
    type=click.Choice(BOUNDS_POLICIES),
    default="clamp",
    help="Out-of-range confidence/estimatedHours handling (default: clamp)",
)
@click.option("--show-normalized", is_flag=True, default=False, help="Print the normalized text to stderr")
@click.pass_context
def check(ctx, task_kind: str, completion_file: str, bounds_policy: str, show_normalized: bool):
    """
    Normalize and validate a saved raw completion, offline.

    COMPLETION_FILE can be a file path or '-' for stdin.
    """
    formatter = ctx.obj["formatter"]
    shape = shape_for(TaskKind.from_route(task_kind))
    raw_text = _read_source(completion_file)
    normalized = normalize(raw_text, allow_array=shape.root == RootKind.SEQUENCE)
    if show_normalized:
        click.echo(normalized, err=True)

    try:
        document = validate(normalized, shape, bounds_policy=bounds_policy)
    except BAAssistError as e:
        _fail(formatter, e)

    _emit(formatter, document.data, None)


@main.command()
@click.argument("tasks_file", type=click.Path(exists=False))
@click.option("--project-key", "-k", required=True, help="Jira project key, e.g. PROJ")
@click.option("--output", "-o", type=click.Path(writable=True), default=None, help="Output file (default: stdout)")
@click.pass_context
def jira(ctx, tasks_file: str, project_key: str, output: Optional[str]):
    """
    Create simulated Jira tickets from a JSON array of assigned tasks.

    TASKS_FILE can be a file path or '-' for stdin.
    """
    assigned = _load_json(tasks_file, "TASKS_FILE")
    if isinstance(assigned, dict):
        assigned = assigned.get("assignedTasks", assigned.get("assignments"))
    if not isinstance(assigned, list):
        raise click.BadParameter("expected a JSON array of tasks", param_hint="TASKS_FILE")
    if not all(isinstance(task, dict) for task in assigned):
        raise click.BadParameter("every task must be a JSON object", param_hint="TASKS_FILE")

    formatter = ctx.obj["formatter"]
    try:
        tickets = create_jira_tickets(assigned, project_key)
    except BAAssistError as e:
        _fail(formatter, e)

    _emit(formatter, [ticket.model_dump() for ticket in tickets], output)


@main.command()
@click.option("--host", default="127.0.0.1", help="Bind address (default: 127.0.0.1)")
@click.option("--port", default=3005, type=int, help="Port (default: 3005)")
@click.option("--reload/--no-reload", default=False, help="Restart on code changes")
@click.pass_context
def serve(ctx, host: str, port: int, reload: bool):
    """Start the JSON API server (Django development server)."""
    os.environ.setdefault("DJANGO_SETTINGS_MODULE", "baassist.web.settings")

    import django
    from django.core.management import call_command

    django.setup()
    ctx.obj["formatter"].print_info(f"Business-analyst assistant API running on http://{host}:{port}/api/")
    call_command("runserver", f"{host}:{port}", use_reloader=reload)


@main.group()
def config():
    """Configuration management commands."""
    pass


@config.command("export")
@click.option(
    "--output",
    "-o",
    type=click.Path(),
    default=None,
    help="Output file path (default: stdout)",
)
@click.option(
    "--format",
    "-f",
    type=click.Choice(["yaml", "json"], case_sensitive=False),
    default="yaml",
    help="Output format (default: yaml)",
)
@click.pass_context
def config_export(ctx, output: Optional[str], format: str):
    """Export current configuration to file."""
    config_obj = Config.load(config_file=ctx.obj["config_file"])

    if output:
        output_path = Path(output)
        config_obj.save(output_path, format=format)
        ctx.obj["formatter"].print_success(f"Configuration exported to: {output_path}")
    else:
        if format == "yaml":
            content = yaml.dump(config_obj.to_dict(), default_flow_style=False, sort_keys=False)
        else:
            content = json.dumps(config_obj.to_dict(), indent=2)
        click.echo(content)


@config.command("import")
@click.argument("config_file", type=click.Path(exists=True))
@click.pass_context
def config_import(ctx, config_file: str):
    """Import configuration from file into the user config."""
    config_obj = Config()
    config_obj._load_file(Path(config_file))
    config_obj.validate()

    config_obj.save(USER_CONFIG_PATH, format="yaml")
    ctx.obj["formatter"].print_success(f"Configuration imported and saved to: {USER_CONFIG_PATH}")


if __name__ == "__main__":
    main()
