"""Click CLI for offline checks against the intake pipeline."""

from __future__ import annotations

import json

import click

from agent_architect.config import load_settings_from_env, mask_secret
from agent_architect.intake.validator import validate
from agent_architect.models import SubmissionKind
from agent_architect.session import AgentBlocks

KIND_CHOICES = [kind.value for kind in SubmissionKind]


@click.group()
def cli() -> None:
    """Agent Architect intake pipeline CLI."""


@cli.command("validate")
@click.argument("kind", type=click.Choice(KIND_CHOICES))
@click.argument("payload_file", type=click.File("r"))
def validate_command(kind: str, payload_file) -> None:
    """Validate a JSON submission file as KIND.

    Prints the normalized payload, or the field errors and exits with 1.
    """
    try:
        raw = json.load(payload_file)
    except ValueError as exc:
        raise click.ClickException(f"Invalid JSON: {exc}") from exc

    result = validate(SubmissionKind(kind), raw)
    if result.payload is None:
        click.echo(json.dumps({"ok": False, "fields": result.fields}, indent=2))
        raise SystemExit(1)
    click.echo(json.dumps(
        {"ok": True, "payload": result.payload.model_dump(mode="json", exclude_none=True)},
        indent=2,
    ))


@cli.command()
def schema() -> None:
    """Print the JSON schema the backend's reply blocks must follow."""
    click.echo(json.dumps(AgentBlocks.model_json_schema(), indent=2))


@cli.command()
def health() -> None:
    """Report configuration read from the environment. Exits 1 on issues."""
    settings = load_settings_from_env()
    report = {
        "environment": settings.environment,
        "webhooks": {
            kind.value: bool(url) for kind, url in settings.endpoints().items()
        },
        "chatbot_webhook": bool(settings.chatbot_webhook_url),
        "webhook_secret": mask_secret(settings.webhook_secret) if settings.webhook_secret else None,
        "timeout_ms": settings.timeout_ms,
        "rate_limit": {
            "max": settings.rate_limit_max,
            "window_ms": settings.rate_limit_window_ms,
        },
        "issues": settings.issues(),
    }
    click.echo(json.dumps(report, indent=2))
    if report["issues"]:
        raise SystemExit(1)
