#!/usr/bin/env python3
# Copyright (C) 2026 Daniel Iwugo
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License.
# See <https://www.gnu.org/licenses/> for details.

# File: cli.py
# Description: Imcode command-line interface.
#
#   Commands: encode, decode, collision, capacity
#   Requires: typer, rich  (pip install typer rich)

from __future__ import annotations

import logging
import os
import sys
from enum import IntEnum
from pathlib import Path
from typing import Optional

# Windows cmd/PowerShell defaults to cp1252. Force UTF-8 before Rich initialises.
if sys.platform == "win32":
    os.environ.setdefault("PYTHONUTF8", "1")
    for _stream in (sys.stdout, sys.stderr):
        if _stream and hasattr(_stream, "reconfigure"):
            try:
                _stream.reconfigure(encoding="utf-8", errors="replace")
            except Exception:
                pass

import typer
from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table
from rich.text import Text

# ---------------------------------------------------------------------------
# Bootstrap — make sure imcode/ is importable when running cli.py directly
# ---------------------------------------------------------------------------

_HERE = Path(__file__).parent.resolve()
if str(_HERE) not in sys.path:
    sys.path.insert(0, str(_HERE))

from imcode import __version__, space, steg, utils  # noqa: E402

# ---------------------------------------------------------------------------
# App + console
# ---------------------------------------------------------------------------

app = typer.Typer(
    name="imcode",
    help=(
        "Tool to store and retrieve information in images.\n\n"
        "[dim]Commands:[/dim]  imcode encode / decode / collision / capacity --help"
    ),
    add_completion=False,
    rich_markup_mode="rich",
    no_args_is_help=True,
)
console     = Console()
err_console = Console(stderr=True)

# Colour constants
ACCENT = "bright_blue"
GOOD   = "bright_green"
WARN   = "yellow"
ERR    = "bright_red"
MUTED  = "dim"


class ExitCode(IntEnum):
    OK            = 0
    INVALID_INPUT = 1
    COLLISION     = 2


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------

def _banner() -> None:
    console.print(
        Panel(
            Text.assemble(
                ("imcode", "bold white"),
                (f"  v{__version__}", MUTED),
                ("  |  ", MUTED),
                ("AGPL-3.0", MUTED),
            ),
            border_style=ACCENT,
            padding=(0, 2),
        )
    )


def _err(msg: str, code: ExitCode = ExitCode.INVALID_INPUT) -> None:
    err_console.print(f"\n[{ERR}]✗  Error:[/{ERR}]  {msg}\n", highlight=False)
    raise typer.Exit(int(code))


def _warn(msg: str) -> None:
    err_console.print(f"[{WARN}]⚠  {msg}[/{WARN}]")


def _ok(msg: str) -> None:
    console.print(f"[{GOOD}]✓[/{GOOD}]  {msg}")


def _hint(msg: str) -> None:
    console.print(f"  [{MUTED}]{msg}[/{MUTED}]")


def _require_file(path: Path, label: str) -> None:
    if not path.exists():
        _err(f"{label} not found: {path}")
    if not path.is_file():
        _err(f"Not a file: {path}")


def _run_with_spinner(label: str, fn, *args, **kwargs):
    """
    Run fn(*args, **kwargs) while showing an indeterminate spinner on stderr.
    Returns the result. Raises on exception.
    """
    with Progress(
        SpinnerColumn(style=ACCENT),
        TextColumn(f"[{MUTED}]{label}[/{MUTED}]"),
        TimeElapsedColumn(),
        transient=True,
        console=err_console,
    ) as prog:
        task = prog.add_task(label, total=None)
        result = fn(*args, **kwargs)
        prog.update(task, completed=1, total=1)
    return result


# ---------------------------------------------------------------------------
# Global options
# ---------------------------------------------------------------------------

@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging."),
) -> None:
    """Tool to store and retrieve information in images."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


# ---------------------------------------------------------------------------
# encode
# ---------------------------------------------------------------------------

@app.command()
def encode(
    image_file: Path = typer.Argument(..., metavar="IMAGE_FILE",
                    help="The path to the file in which to encode the data. This file will be "
                         "overridden with the modified version unless you specify an output file."),
    keyword:    str  = typer.Argument(..., help="The keyword to use for encoding and decoding of data."),
    input_data: Optional[str] = typer.Argument(None, metavar="INPUT_DATA",
                    help="Input data as a UTF-8 string. Can also be specified using --in."),
    infile:     Optional[Path] = typer.Option(None, "--infile", "--in", "-i",
                    help="The data to be encoded inside the image file. "
                         "This will take precedence over inputData if specified."),
    outfile:    Optional[Path] = typer.Option(None, "--outfile", "--out", "-o",
                    help="The path to store the resulting image containing the encoded data to."),
) -> None:
    """
    Encode given input data into an image file.

    [dim]Examples:
      imcode encode photo.png mykeyword "meet at noon"
      imcode encode photo.png mykeyword --in secret.zip --out stego.png[/dim]
    """
    _banner()
    _require_file(image_file, "Image file")

    if infile is not None:
        _require_file(infile, "Input file")
        if input_data is not None:
            _warn("Both inputData and --infile given — using --infile.")
    elif input_data is None:
        _err("Must specify either inputData or --infile!")

    output = outfile or image_file
    if output.suffix.lower() != ".png":
        _warn(f"Output is always written as PNG, even though '{output.name}' says otherwise.")

    try:
        _run_with_spinner(
            "Encoding payload…",
            steg.embed,
            image_file, keyword,
            data=input_data, payload_path=infile, output_path=output,
        )
    except ValueError as exc:
        _err(str(exc))
    except RuntimeError as exc:
        _err(f"Unexpected error during encoding: {exc}")

    _ok(f"Data encoded into {output}")


# ---------------------------------------------------------------------------
# decode
# ---------------------------------------------------------------------------

@app.command()
def decode(
    image_file: Path = typer.Argument(..., metavar="IMAGE_FILE",
                    help="The path to the file from which to decode the data."),
    keyword:    str  = typer.Argument(..., help="The keyword used to encode the file."),
    outfile:    Optional[Path] = typer.Option(None, "--outfile", "--out", "-o",
                    help="The file to output the decoded data to. If not specified, data will be "
                         "printed to the console, interpreted as a UTF-8 string."),
) -> None:
    """
    Decode hidden data from an image file.

    [dim]Examples:
      imcode decode stego.png mykeyword
      imcode decode stego.png mykeyword --out secret.zip[/dim]
    """
    _require_file(image_file, "Image file")

    try:
        if outfile is None:
            payload = _run_with_spinner("Decoding payload…", steg.read_payload, image_file, keyword)
        else:
            _run_with_spinner("Decoding payload…", steg.extract, image_file, keyword, outfile)
    except ValueError as exc:
        _err(str(exc))
    except RuntimeError as exc:
        _err(f"Unexpected error during decoding: {exc}")

    if outfile is None:
        typer.echo(payload.decode("utf-8", errors="replace"))
    else:
        err_console.print(f"[{GOOD}]✓[/{GOOD}]  {utils.fmt_bytes(outfile.stat().st_size)} written to {outfile}")


# ---------------------------------------------------------------------------
# collision
# ---------------------------------------------------------------------------

@app.command()
def collision(
    keyword1: str = typer.Argument(..., help="First keyword"),
    keyword2: str = typer.Argument(..., help="Second keyword"),
) -> None:
    """Checks if two keywords would use colliding information spaces."""
    _banner()
    report = space.check_collision(keyword1, keyword2)

    if report.collides:
        console.print(
            f"[{WARN}]⚠  Uh oh! These two keywords are operating in the same information space "
            f"({report.first}) and could possibly collide![/{WARN}]"
        )
        raise typer.Exit(int(ExitCode.COLLISION))

    _ok(
        f"These two keywords operate in separate information spaces "
        f"({report.first}, {report.second}) and will therefore never collide."
    )


# ---------------------------------------------------------------------------
# capacity
# ---------------------------------------------------------------------------

@app.command()
def capacity(
    image_file: Path = typer.Argument(..., metavar="IMAGE_FILE", help="Carrier image to inspect."),
    keyword:    Optional[str] = typer.Option(None, "--keyword", "-k",
                    help="Report the exact capacity of this keyword's information space."),
) -> None:
    """
    Report how much data an image can hold.

    [dim]Without a keyword the smallest information space is reported.[/dim]
    """
    _banner()
    _require_file(image_file, "Image file")

    try:
        result = _run_with_spinner("Measuring carrier…", steg.get_capacity, image_file, keyword)
    except Exception as exc:
        _err(f"Could not analyse image: {exc}")

    t = Table(box=box.SIMPLE, show_header=False, padding=(0, 2))
    t.add_column("key",   style=MUTED, no_wrap=True)
    t.add_column("value", style="white")
    t.add_row("Dimensions",       f"{result['width']} × {result['height']} px")
    t.add_row("File-size bound",  utils.fmt_bytes(result["coarse_bytes"]))
    t.add_row("Space bound",      utils.fmt_bytes(result["space_bytes"]))
    if result["space"] is not None:
        t.add_row("Information space", str(result["space"]))
    t.add_row("Available",        utils.fmt_bytes(result["available_bytes"]))
    console.print(t)
    if result["space"] is None:
        _hint("Space bound shown for the smallest information space. Pass --keyword for yours.")

    if result["available_bytes"] == 0:
        _warn("This image is too small to hold any data.")


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    app()
