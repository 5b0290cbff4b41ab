"""CLI commands for piping documents through filters with minimal edits."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import List, Optional

import typer

from .config import DEFAULT_CONFIG_NAME, ConfigError, Settings, default_config, load_settings, write_config
from .patch.applier import PatchSummary
from .patch.errors import PatchError
from .pipeline import apply_diff_to_document, pipe_document
from .tools.document import DocumentError, FileDocument
from .tools.process import ProcessError

APP_HELP = "Pipe a document through a command and apply only the lines that changed."

app = typer.Typer(help=APP_HELP)

_PASSTHROUGH = {"ignore_unknown_options": True, "allow_interspersed_args": False}


def _enable_verbose_logging() -> None:
    """Send apipe debug logs and telemetry to stderr."""
    logger = logging.getLogger("apipe")
    logger.setLevel(logging.DEBUG)
    if not any(getattr(handler, "_apipe_cli", False) for handler in logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
        handler._apipe_cli = True  # type: ignore[attr-defined]
        logger.addHandler(handler)


def _resolve_settings(config: str, max_write: Optional[int], timeout: Optional[float]) -> Settings:
    """Load the configuration file and apply command line overrides."""
    try:
        settings = load_settings(Path(config))
    except ConfigError as error:
        typer.echo(str(error), err=True)
        raise typer.Exit(code=1) from error

    if max_write is not None:
        if max_write < 4:
            raise typer.BadParameter("must be at least 4 bytes", param_hint="--max-write")
        settings.engine.max_write = max_write
    if timeout is not None:
        if timeout <= 0:
            raise typer.BadParameter("must be greater than 0", param_hint="--timeout")
        settings.transform.timeout = timeout
        settings.diff.timeout = timeout
    return settings


def _load_document(path: Path) -> FileDocument:
    try:
        return FileDocument.load(path)
    except DocumentError as error:
        typer.echo(f"apipe: {error}", err=True)
        raise typer.Exit(code=1) from error


def _finish(document: FileDocument, summary: PatchSummary, *, dry_run: bool) -> None:
    """Report the edits of a run and persist them unless ``dry_run``."""
    if dry_run:
        for address in summary.addresses:
            typer.echo(address)
        typer.echo(f"{document.name}: {summary.hunks_applied} edit(s) (dry run)")
        return
    if not document.modified:
        typer.echo(f"{document.name}: unchanged")
        return
    try:
        document.save()
    except DocumentError as error:
        typer.echo(f"apipe: {error}", err=True)
        raise typer.Exit(code=1) from error
    typer.echo(f"{document.name}: applied {summary.hunks_applied} edit(s)")


@app.command(context_settings=_PASSTHROUGH)
def pipe(
    path: Path = typer.Argument(..., help="Document to rewrite in place."),
    command: List[str] = typer.Argument(..., help="Command (and arguments) to pipe the document through."),
    config: str = typer.Option(
        DEFAULT_CONFIG_NAME,
        "--config",
        "-c",
        help="Path to the apipe configuration file.",
    ),
    max_write: Optional[int] = typer.Option(
        None,
        "--max-write",
        help="Largest single write handed to the document, in bytes.",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds to wait for the command and for diff.",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Print the edit addresses without saving the document.",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every hunk to stderr."),
) -> None:
    """Pipe PATH through COMMAND and apply the minimal edits to PATH."""

    if verbose:
        _enable_verbose_logging()
    settings = _resolve_settings(config, max_write, timeout)
    document = _load_document(path)

    try:
        result = pipe_document(document, command, settings)
    except (ProcessError, PatchError) as error:
        if isinstance(error, ProcessError) and error.diagnostic:
            typer.echo(error.diagnostic, err=True, nl=not error.diagnostic.endswith("\n"))
        typer.echo(f"apipe: {error}", err=True)
        raise typer.Exit(code=1) from error

    _finish(document, result.summary, dry_run=dry_run)


@app.command()
def apply(
    path: Path = typer.Argument(..., help="Document the diff was computed against."),
    diff_path: Optional[Path] = typer.Argument(
        None,
        help="Normal-format diff to apply; read from stdin when omitted.",
    ),
    config: str = typer.Option(
        DEFAULT_CONFIG_NAME,
        "--config",
        "-c",
        help="Path to the apipe configuration file.",
    ),
    max_write: Optional[int] = typer.Option(
        None,
        "--max-write",
        help="Largest single write handed to the document, in bytes.",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Print the edit addresses without saving the document.",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every hunk to stderr."),
) -> None:
    """Apply an existing `diff PATH NEW` output to PATH."""

    if verbose:
        _enable_verbose_logging()
    settings = _resolve_settings(config, max_write, None)
    document = _load_document(path)

    try:
        if diff_path is None:
            summary = apply_diff_to_document(document, typer.get_binary_stream("stdin"), settings)
        else:
            with diff_path.open("rb") as handle:
                summary = apply_diff_to_document(document, handle, settings)
    except OSError as error:
        typer.echo(f"apipe: cannot read diff: {error}", err=True)
        raise typer.Exit(code=1) from error
    except PatchError as error:
        typer.echo(f"apipe: {error}", err=True)
        raise typer.Exit(code=1) from error

    _finish(document, summary, dry_run=dry_run)


@app.command("init-config")
def init_config(
    config: str = typer.Option(
        DEFAULT_CONFIG_NAME,
        "--config",
        "-c",
        help="Where to write the configuration file.",
    ),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file."),
) -> None:
    """Write the default configuration file."""

    config_path = Path(config)
    if config_path.exists() and not force:
        typer.echo(f"Configuration already exists at {config_path}; use --force to overwrite.", err=True)
        raise typer.Exit(code=1)
    write_config(config_path, default_config())
    typer.echo(f"Created configuration at {config_path}.")


if __name__ == "__main__":
    app()
