"""Command-line interface for midlfmt.

Commands:
- midlfmt format <paths...>: Format files, directories or stdin ("-")
- midlfmt tokens <file>: Show the token stream of a file
- midlfmt hover <word>: Show documentation for a MIDL keyword
- midlfmt telemetry tail: Print recent telemetry events
"""

from __future__ import annotations

import difflib
import json
import sys
import time
from pathlib import Path
from typing import TextIO

import click
from pydantic import ValidationError

from . import __version__
from .config import FormatterConfig, StyleConfig, load_config
from .documentation import lookup, render_hover
from .files import discover_files
from .formatter import format_document, normalize_line_endings
from .telemetry import RunTelemetry, read_events
from .tokenizer import tokenize


@click.group()
@click.version_option(version=__version__, prog_name="midlfmt")
def cli() -> None:
    """midlfmt - Formatter for MIDL interface definition files."""


def _load_formatter_config(config: str | None, indent_width: int | None) -> FormatterConfig:
    try:
        if config:
            formatter_config = FormatterConfig.load_from_file(config)
            formatter_config.apply_env_overrides()
        else:
            formatter_config = load_config(Path.cwd())
    except (FileNotFoundError, ValidationError, ValueError) as e:
        raise click.ClickException(f"Invalid configuration: {e}") from e

    if indent_width is not None:
        formatter_config.style = StyleConfig(
            indent_width=indent_width,
            attribute_inline_limit=formatter_config.style.attribute_inline_limit,
        )
    return formatter_config


def _unified_diff(original: str, formatted: str, name: str) -> str:
    return "".join(
        difflib.unified_diff(
            original.splitlines(keepends=True),
            formatted.splitlines(keepends=True),
            fromfile=f"a/{name}",
            tofile=f"b/{name}",
        )
    )


@cli.command("format")
@click.argument(
    "paths",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, allow_dash=True),
)
@click.option("--config", "-c", type=click.Path(exists=True, dir_okay=False), help="Config file path")
@click.option("--in-place", "-i", is_flag=True, help="Rewrite files that change.")
@click.option("--check", is_flag=True, help="Report files that would change; exit 1 if any.")
@click.option("--diff", "show_diff", is_flag=True, help="Print a unified diff instead of the formatted text.")
@click.option("--indent-width", type=click.IntRange(1, 16), help="Override the configured indent width.")
def format_command(
    paths: tuple[str, ...],
    config: str | None,
    in_place: bool,
    check: bool,
    show_diff: bool,
    indent_width: int | None,
) -> None:
    """Format MIDL files.

    Directories are searched for files with the configured extensions.
    With a single file and no flags the formatted text goes to stdout.

    Example:
        midlfmt format api.idl
        midlfmt format --in-place src/
        midlfmt format --check --diff src/
        cat api.idl | midlfmt format -
    """
    formatter_config = _load_formatter_config(config, indent_width)
    style = formatter_config.style

    if "-" in paths:
        if len(paths) > 1:
            raise click.UsageError("'-' (stdin) cannot be combined with other paths")
        if in_place:
            raise click.UsageError("--in-place cannot be used with stdin")
        original = click.get_text_stream("stdin").read()
        formatted = format_document(original, style)
        changed = formatted != normalize_line_endings(original)
        if show_diff:
            click.echo(_unified_diff(normalize_line_endings(original), formatted, "<stdin>"), nl=False)
        elif not check:
            click.echo(formatted, nl=False)
        if check and changed:
            click.echo("would reformat <stdin>", err=True)
            sys.exit(1)
        return

    run = RunTelemetry.from_config(formatter_config.telemetry)

    files = discover_files([Path(p) for p in paths], formatter_config.files)
    if not files:
        click.echo("No MIDL files found.", err=True)
        return

    to_stdout = not (in_place or check or show_diff)
    if to_stdout and len(files) > 1:
        raise click.UsageError(
            "Multiple files need --in-place, --check or --diff"
        )

    mode = "check" if check else "in-place" if in_place else "diff" if show_diff else "stdout"
    run.run_started(paths, len(files), mode)

    changed_files: list[Path] = []
    failed = 0
    for path in files:
        started = time.time()
        try:
            with open(path, encoding="utf-8", newline="") as f:
                original = f.read()
        except (OSError, UnicodeDecodeError) as e:
            failed += 1
            click.echo(f"error: cannot read {path}: {e}", err=True)
            run.file_failed(path, "read", e)
            continue

        formatted = format_document(original, style)
        changed = formatted != original
        run.file_formatted(path, original, formatted, started)

        if to_stdout:
            click.echo(formatted, nl=False)
            continue

        if not changed:
            continue
        changed_files.append(path)

        if show_diff:
            click.echo(_unified_diff(original, formatted, path.as_posix()), nl=False)
        if check:
            click.echo(f"would reformat {path}", err=True)
        elif in_place:
            try:
                with open(path, "w", encoding="utf-8", newline="") as f:
                    f.write(formatted)
            except OSError as e:
                changed_files.pop()
                failed += 1
                click.echo(f"error: cannot write {path}: {e}", err=True)
                run.file_failed(path, "write", e)
                continue
            click.echo(f"reformatted {path}", err=True)

    run.run_completed(len(files), len(changed_files), failed)

    if not to_stdout:
        verb = "would be reformatted" if check or not in_place else "reformatted"
        unchanged = len(files) - len(changed_files) - failed
        click.echo(
            f"{len(changed_files)} file(s) {verb}, {unchanged} unchanged, {failed} failed",
            err=True,
        )

    if failed:
        sys.exit(2)
    if check and changed_files:
        sys.exit(1)


@cli.command()
@click.argument("file", type=click.File("r", encoding="utf-8"))
@click.option("--json", "as_json", is_flag=True, help="Emit tokens as JSON.")
def tokens(file: TextIO, as_json: bool) -> None:
    """Show the token stream of a MIDL file (debugging aid)."""
    token_list = tokenize(normalize_line_endings(file.read()))

    if as_json:
        click.echo(json.dumps([t.to_dict() for t in token_list], indent=2))
        return

    for token in token_list:
        text = token.text.replace("\n", "\\n")
        click.echo(f"{token.kind.value}\t{text}")


@cli.command()
@click.argument("word")
def hover(word: str) -> None:
    """Show documentation for a MIDL keyword, attribute or type."""
    entry = lookup(word)
    if entry is None:
        raise click.ClickException(f"No documentation for: {word}")
    click.echo(render_hover(entry))


@cli.group()
def telemetry() -> None:
    """Telemetry utilities."""


@telemetry.command("tail")
@click.option("--config", "-c", type=click.Path(exists=True, dir_okay=False), help="Config file path")
@click.option(
    "--lines",
    "-n",
    type=int,
    default=20,
    show_default=True,
    help="Number of events to show.",
)
def telemetry_tail(config: str | None, lines: int) -> None:
    """Print the last N telemetry events."""
    formatter_config = _load_formatter_config(config, None)
    telemetry_path = Path(formatter_config.telemetry.log_path)

    if not telemetry_path.exists():
        raise click.ClickException(f"Telemetry file not found: {telemetry_path}")

    events = read_events(telemetry_path)
    for event in events[-lines:] if lines > 0 else []:
        click.echo(json.dumps(event, ensure_ascii=False))


def main() -> None:
    """Entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
