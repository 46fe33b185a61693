"""
Faultline CLI - styled output primitives built on Click.

    error()     - error message on stderr
    section()   - section divider with title
    kv()        - key-value pair, aligned
    table()     - minimal aligned table

click.style handles NO_COLOR / TERM=dumb.
"""

from __future__ import annotations

import shutil
from typing import Optional, Sequence

import click

_L_H = "─"

_TERM_WIDTH: Optional[int] = None


def _tw() -> int:
    """Terminal width, cached and clamped to a sane range."""
    global _TERM_WIDTH
    if _TERM_WIDTH is None:
        _TERM_WIDTH = max(40, min(shutil.get_terminal_size((80, 24)).columns, 120))
    return _TERM_WIDTH


def error(message: str) -> None:
    click.echo(click.style(message, fg="red"), err=True)


def section(title: str, *, width: Optional[int] = None, fg: str = "cyan") -> None:
    """
    Print a section header with a ruled line.

        ── Categories ─────────────────────────────
    """
    w = width or _tw()
    dashes = max(4, w - len(title) - 6)
    click.echo(click.style(f"{_L_H}{_L_H} {title} {_L_H * dashes}", fg=fg, bold=True))


def kv(key: str, value: object, *, key_width: int = 24, indent: int = 2) -> None:
    """
    Print an aligned key-value pair.

        log_uncaught:           WARNING|NOTICE
    """
    padding = " " * max(1, key_width - len(key) - 1)
    k = click.style(f"{key}:", fg="white")
    v = click.style(str(value), fg="cyan")
    click.echo(f"{' ' * indent}{k}{padding}{v}")


def table(headers: Sequence[str], rows: Sequence[Sequence[object]], *, indent: int = 2) -> None:
    """
    Print a minimal aligned table.

        Category            Bit     Level      Label
        ─────────────────── ─────── ────────── ──────────
        ERROR               1       ERROR      Fatal error
    """
    prefix = " " * indent
    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row[:len(headers)]):
            widths[i] = max(widths[i], len(str(cell)))
    widths = [w + 2 for w in widths]

    header = "".join(h.ljust(widths[i]) for i, h in enumerate(headers))
    click.echo(f"{prefix}{click.style(header, fg='cyan', bold=True)}")
    click.echo(f"{prefix}{click.style(''.join(_L_H * w for w in widths), dim=True)}")

    for row in rows:
        line = "".join(str(cell).ljust(widths[i]) for i, cell in enumerate(row))
        click.echo(f"{prefix}{line.rstrip()}")
