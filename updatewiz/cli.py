"""
update-wiz CLI entrypoint.

Usage:
    update-wiz tui
    update-wiz run --skip docker --skip gcloud
    update-wiz detect --json
"""

import asyncio
import json
import sys

import click

from updatewiz.catalog.definitions import CATALOGUE, all_options, get_option
from updatewiz.config import load_settings
from updatewiz.engine.errors import ConfigError
from updatewiz.engine.models import RunOptions
from updatewiz.engine.orchestrator import RunListener, RunOrchestrator
from updatewiz.observability.logging_config import setup_logging
from updatewiz.safety.guardrails import PrivilegeGate, ensure_sudo
from updatewiz.utils.system import detect_all


class ConsoleListener(RunListener):
    """Streams script output to stdout and progress to stderr."""

    def __init__(self, show_output: bool = True):
        self.show_output = show_output
        self._last_label = None

    def on_output_chunk(self, chunk):
        if self.show_output:
            click.echo(chunk.text, nl=False)

    def on_progress(self, percent, label):
        if self.show_output and label != self._last_label:
            self._last_label = label
            click.secho(f"[{percent:3.0f}%] {label}", err=True, fg="cyan")


def _load(**overrides):
    try:
        return load_settings(**overrides)
    except ConfigError as e:
        raise click.ClickException(str(e)) from e


def _check_ids(ids, flag):
    unknown = [i for i in ids if get_option(i) is None]
    if unknown:
        raise click.BadParameter(f"unknown option(s): {', '.join(unknown)}", param_hint=flag)


@click.group()
@click.version_option(version="0.1.0", prog_name="update-wiz")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, quiet: bool, debug: bool) -> None:
    """update-wiz: run htotheizzo with live progress."""
    ctx.ensure_object(dict)
    if debug:
        level = "DEBUG"
    elif verbose:
        level = "INFO"
    elif quiet:
        level = "ERROR"
    else:
        level = None
    ctx.obj["log_level"] = level
    ctx.obj["quiet"] = quiet


@cli.command()
@click.option("--script", type=click.Path(dir_okay=False), default=None,
              help="Path to the maintenance script.")
@click.pass_context
def tui(ctx: click.Context, script) -> None:
    """Open the interactive terminal UI."""
    from updatewiz.app import UpdateWizApp

    settings = _load(script_path=script, log_level=ctx.obj["log_level"])
    setup_logging(settings.log_level, settings.log_file, settings.log_file_level, console=False)
    # Prompt now, on the plain terminal; inside the TUI the gate only refreshes.
    if not ensure_sudo(settings.elevation_command):
        raise click.ClickException("Authentication failed or was cancelled.")
    UpdateWizApp(settings).run()


@cli.command()
@click.option("--skip", "skips", multiple=True, metavar="ID", help="Skip a tool (repeatable).")
@click.option("--only", "only", multiple=True, metavar="ID", help="Update only these tools.")
@click.option("--detect/--no-detect", default=True, show_default=True,
              help="Skip tools that are not installed.")
@click.option("--log-file", default=None, help="LOG_FILE passed to the script.")
@click.option("--mock", is_flag=True, help="Ask the script to only pretend (MOCK_MODE=1).")
@click.option("--timeout", type=float, default=None, help="Stop the run after N seconds.")
@click.option("--script", type=click.Path(dir_okay=False), default=None,
              help="Path to the maintenance script.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Print the result as JSON.")
@click.pass_context
def run(ctx: click.Context, skips, only, detect, log_file, mock, timeout, script, as_json) -> None:
    """Authenticate, run the script and report the verdict."""
    _check_ids(skips, "--skip")
    _check_ids(only, "--only")
    settings = _load(script_path=script, timeout=timeout, log_level=ctx.obj["log_level"])
    setup_logging(settings.log_level, settings.log_file, settings.log_file_level)

    if settings.script_path is None:
        raise click.ClickException("Maintenance script not found. Use --script or UPDATEWIZ_SCRIPT.")

    options = list(all_options())
    enabled = set(only) if only else {o.id for o in options}
    enabled -= set(skips)
    if detect:
        found = detect_all(options)
        enabled = {i for i in enabled if found.get(i) is not False}

    run_options = RunOptions.from_selection(
        [o.env_key for o in options],
        [o.env_key for o in options if o.id in enabled],
        log_file=log_file,
        mock=mock,
    )

    orchestrator = RunOrchestrator(
        settings.script_path,
        PrivilegeGate(settings.elevation_command),
        timeout=settings.timeout,
    )
    orchestrator.add_listener(ConsoleListener(show_output=not as_json and not ctx.obj["quiet"]))
    result = asyncio.run(orchestrator.start(run_options))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
    else:
        _print_summary(result)

    if not result.success:
        sys.exit(result.exit_code if result.exit_code and result.exit_code > 0 else 1)


def _print_summary(result) -> None:
    click.echo("")
    if result.warnings:
        click.secho(f"Warnings ({len(result.warnings)}):", fg="yellow")
        for warning in result.warnings:
            click.echo(f"  - {warning}")
    if result.success:
        click.secho(f"✓ {result.verdict.value.replace('_', ' ')}", fg="green", bold=True)
    else:
        click.secho(f"✗ failed: {result.error}", fg="red", bold=True)


@cli.command("detect")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def detect_cmd(as_json: bool) -> None:
    """Show which tools are installed on this machine."""
    results = detect_all()
    if as_json:
        click.echo(json.dumps(results, indent=2))
        return

    marks = {True: ("✓", "green"), False: ("✗", "red"), None: ("?", "yellow")}
    for category, options in CATALOGUE.items():
        click.secho(category, bold=True)
        for option in options.values():
            mark, colour = marks[results[option.id]]
            click.echo(f"  {click.style(mark, fg=colour)} {option.label} ({option.id})")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
