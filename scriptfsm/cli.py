"""
scriptfsm CLI entry point.

Commands:
- scriptfsm probe: Check exported callables of a user script
- scriptfsm run: Build, validate, compile and run a machine
- scriptfsm version: Show version information
"""

import json
import logging
import sys
from pathlib import Path
from typing import Optional, Tuple

import click
from scriptfsm import __version__
from scriptfsm.cli_ui import error, probe_table, run_summary, success, version_line
from scriptfsm.errors import FSMError


def setup_logging(debug: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def _parse_state(spec: str) -> Tuple[str, str, str]:
    """Parse NAME[:ENTRY[:EXIT]]."""
    parts = spec.split(":")
    if len(parts) > 3:
        raise click.BadParameter(f"expected NAME[:ENTRY[:EXIT]], got '{spec}'")
    parts += [""] * (3 - len(parts))
    return parts[0], parts[1], parts[2]


def _parse_transition(spec: str) -> Tuple[str, str, str, str]:
    """Parse SRC:DST[:CONDITION[:ACTION]]."""
    parts = spec.split(":")
    if not 2 <= len(parts) <= 4:
        raise click.BadParameter(
            f"expected SRC:DST[:CONDITION[:ACTION]], got '{spec}'"
        )
    parts += [""] * (4 - len(parts))
    return parts[0], parts[1], parts[2], parts[3]


def _load_settings(config: Optional[Path]):
    from scriptfsm.config.settings import FSMSettings

    return FSMSettings(config_file=config)


def _format_value(value) -> str:
    from scriptfsm.resolver.values import thaw

    try:
        return json.dumps(thaw(value))
    except (TypeError, ValueError):
        return repr(value)


@click.group()
@click.version_option(version=__version__, prog_name="scriptfsm")
def main() -> None:
    """scriptfsm - Scriptable finite state machines."""
    pass


@main.command()
@click.argument(
    "script",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.argument("names", nargs=-1)
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Path to scriptfsm.yaml config file",
)
def probe(script: Path, names: Tuple[str, ...], config: Optional[Path]) -> None:
    """Probe callables exported by a user script.

    Without NAMES, every export is probed.

    Example:
        scriptfsm probe machine.py is_digit enter
    """
    from scriptfsm.resolver.script import ScriptResolver

    settings = _load_settings(config)
    resolver = ScriptResolver(
        script.read_bytes(),
        blocked_modules=settings.script.blocked_modules,
        filename=str(script),
    )

    try:
        targets = list(names) or resolver.names()
        results = [resolver.probe(name) for name in targets]
    except FSMError as e:
        error(str(e))
        raise SystemExit(1)

    probe_table(f"Exports of {script.name}", results)

    failed = [r for r in results if not r.ok]
    for r in failed:
        error(str(r.to_error()))
    if failed:
        raise SystemExit(1)


@main.command()
@click.argument(
    "script",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "--state",
    "-s",
    "states",
    multiple=True,
    help="State declaration NAME[:ENTRY[:EXIT]] (repeatable)",
)
@click.option(
    "--transition",
    "-t",
    "transitions",
    multiple=True,
    help="Transition declaration SRC:DST[:CONDITION[:ACTION]] (repeatable)",
)
@click.option("--start", required=True, help="Initial state")
@click.option(
    "--value",
    default="null",
    help="Initial value as JSON (default: null)",
)
@click.option(
    "--validate/--no-validate",
    default=True,
    help="Validate declarations before compiling",
)
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Path to scriptfsm.yaml config file",
)
@click.option(
    "--debug/--no-debug",
    default=False,
    help="Enable debug logging",
)
def run(
    script: Path,
    states: Tuple[str, ...],
    transitions: Tuple[str, ...],
    start: str,
    value: str,
    validate: bool,
    config: Optional[Path],
    debug: bool,
) -> None:
    """Build and run a state machine.

    Example:
        scriptfsm run machine.py -s S -s T:enter -t S:T:truthy --start S --value 1
    """
    from scriptfsm.machine.builder import new

    setup_logging(debug)

    try:
        initial = json.loads(value)
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"invalid JSON: {e}", param_hint="--value")

    state_specs = [_parse_state(s) for s in states]
    transition_specs = [_parse_transition(t) for t in transitions]

    settings = _load_settings(config)
    settings.script.filename = str(script)
    builder = new(script.read_bytes(), settings=settings)
    for name, entry, exit_fn in state_specs:
        builder.state(name, entry, exit_fn)
    for src, dst, condition, action in transition_specs:
        builder.transition(src, dst, condition, action)

    path = []

    def record(src: str, dst: str, _value) -> None:
        path.append(dst)

    try:
        machine = builder.validate_compile() if validate else builder.compile()
        result = machine.run(start, initial, on_transition=record)
    except FSMError as e:
        error(str(e))
        raise SystemExit(1)

    success("Run complete")
    run_summary([start, *path], _format_value(result))


@main.command()
def version() -> None:
    """Show version information."""
    version_line("scriptfsm", __version__)


if __name__ == "__main__":
    main()
