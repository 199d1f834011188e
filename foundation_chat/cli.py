"""
foundation-chat CLI — availability status and an interactive terminal chat.

Registered as `foundation-chat` console script via pyproject.toml.
"""

from __future__ import annotations

import asyncio
import logging

import click

from .config import ChatConfig, resolve_log_level
from .controller import SessionController
from .exceptions import (
    AppleFMSetupError,
    BusyError,
    SessionInitError,
    UnavailableError,
    ValidationError,
)
from .gate import AvailabilityGate, GateDecision, banner
from .models import Availability, Message, Role, UnavailableReason
from .protocols import Provider
from .providers import AppleFMProvider, FakeProvider

CHAT_HELP = """\
Commands:
  /help    Show this help.
  /clear   Clear the transcript.
  /exit    Leave the chat.
"""


def _parse_availability(value: str) -> Availability:
    """Parse ``available``, a reason name such as ``modelNotReady``, or free text."""
    normalized = value.strip()
    if normalized.lower() == "available":
        return Availability.available()
    for reason in UnavailableReason:
        if reason is not UnavailableReason.OTHER and reason.value.lower() == normalized.lower():
            return Availability.unavailable(reason)
    return Availability.other(normalized or "unknown")


def _build_provider(name: str, fake_availability: str, fake_replies: tuple[str, ...]) -> Provider:
    if name == "fake":
        return FakeProvider(
            availability=_parse_availability(fake_availability),
            replies=fake_replies,
        )
    return AppleFMProvider()


def _echo_banner(decision: GateDecision) -> None:
    info = banner(decision)
    color = "green" if decision.input_enabled else "yellow"
    suffix = " ..." if info.busy_indicator else ""
    click.secho(f"{info.title}{suffix}", fg=color, bold=True)
    click.echo(f"  {info.detail}")
    if info.hint:
        click.echo(f"  {info.hint}")


def _render_latest(snapshot: tuple[Message, ...]) -> None:
    if not snapshot:
        return
    message = snapshot[-1]
    if message.role is Role.ASSISTANT:
        click.echo(f"Assistant [{message.time_label()}]> {message.text}")


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="foundation-chat")
@click.option(
    "--provider",
    "provider_name",
    type=click.Choice(["apple", "fake"]),
    default="apple",
    show_default=True,
    help="Language-model backend.",
)
@click.option(
    "--fake-availability",
    default="available",
    show_default=True,
    help="Availability reported by the fake provider (available, modelNotReady, ...).",
)
@click.option(
    "--fake-reply",
    "fake_replies",
    multiple=True,
    help="Scripted reply for the fake provider (repeatable); echoes once exhausted.",
)
@click.option("--log-level", default="warning", show_default=True, help="Logging level.")
@click.pass_context
def cli(
    ctx: click.Context,
    provider_name: str,
    fake_availability: str,
    fake_replies: tuple[str, ...],
    log_level: str,
) -> None:
    """foundation-chat — chat with an on-device language model."""
    logging.basicConfig(
        level=resolve_log_level(log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = {
        "provider": _build_provider(provider_name, fake_availability, fake_replies),
        "log_level": log_level,
    }


@cli.command()
@click.pass_obj
def status(obj: dict) -> None:
    """Show whether the language model can take prompts right now."""
    gate = AvailabilityGate()
    try:
        decision = gate.refresh(obj["provider"])
    except AppleFMSetupError as exc:
        click.secho(str(exc), fg="red", err=True)
        raise SystemExit(1) from exc
    _echo_banner(decision)
    raise SystemExit(0 if decision.input_enabled else 1)


@cli.command()
@click.option("--instructions", default=None, help="System instructions for the session.")
@click.option(
    "--timeout",
    "request_timeout",
    default=None,
    type=float,
    help="Per-request timeout in seconds (default: none).",
)
@click.pass_obj
def chat(obj: dict, instructions: str | None, request_timeout: float | None) -> None:
    """Start an interactive chat. Type /help for commands."""
    try:
        config = ChatConfig.from_mapping(
            {
                "instructions": instructions,
                "request_timeout": request_timeout,
                "log_level": obj["log_level"],
            }
        )
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--timeout") from exc

    controller = SessionController(obj["provider"], config=config)
    try:
        with asyncio.Runner() as runner:
            rc = _chat_loop(controller, AvailabilityGate(), runner)
    except AppleFMSetupError as exc:
        click.secho(str(exc), fg="red", err=True)
        raise SystemExit(1) from exc
    raise SystemExit(rc)


def _chat_loop(
    controller: SessionController, gate: AvailabilityGate, runner: asyncio.Runner
) -> int:
    """Read prompts until /exit; every send runs on the same event loop."""
    decision = gate.refresh(controller.provider)
    _echo_banner(decision)
    try:
        controller.ensure_session()
    except SessionInitError as exc:
        click.secho(str(exc), fg="red", err=True)
        return 1

    unsubscribe = controller.store.subscribe(_render_latest)
    try:
        while True:
            try:
                line = click.prompt("You", default="", show_default=False, prompt_suffix="> ")
            except click.Abort:
                break

            command = line.strip()
            if not command:
                continue
            if command in {"/exit", "/quit"}:
                break
            if command == "/help":
                click.echo(CHAT_HELP)
                continue
            if command == "/clear":
                controller.clear_transcript()
                click.echo("Transcript cleared.")
                continue

            availability = controller.provider.availability()
            current = gate.update(availability)
            if current != decision:
                decision = current
                _echo_banner(decision)
            try:
                runner.run(controller.send(command, availability))
            except ValidationError:
                continue
            except (UnavailableError, BusyError, SessionInitError) as exc:
                controller.consume_error()
                click.secho(f"エラー: {exc}", fg="red", err=True)
                continue

            error = controller.consume_error()
            if error is not None:
                click.secho(f"エラー: {error}", fg="red", err=True)
    finally:
        unsubscribe()
    return 0


def main() -> None:
    cli()
