"""Command-line interface for refgen code generation."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from refgen import __version__
from refgen.generator import Config, GenerationError, parse, parse_type
from refgen.generator.driver import Context, collect, generate, group_units
from refgen.generator.files import SOURCE_SUFFIX, load_units, needs_update, output_file
from refgen.generator.types import SourceUnit
from refgen.generator.wrappers import wrapper_name


def _configure_logging(trace: bool) -> None:
    log = logging.getLogger("refgen")
    if not any(isinstance(h, RichHandler) for h in log.handlers):
        log.addHandler(RichHandler(console=Console(stderr=True), show_path=False))
    log.setLevel(logging.INFO if trace else logging.WARNING)


def _fail(error: Exception) -> None:
    click.echo(f"refgen: {error}", err=True)
    sys.exit(1)


def _load(path: str) -> list[SourceUnit]:
    p = Path(path)
    if p.is_dir():
        return load_units(p)
    return [parse(p.read_text(encoding="utf-8"), name=p.name, package=p.resolve().parent.name)]


@click.group()
@click.version_option(__version__, prog_name="refgen")
def cli() -> None:
    """refgen reference wrapper and wire codec generator."""


@cli.command()
@click.argument(
    "directories", nargs=-1, required=True, type=click.Path(exists=True, file_okay=False)
)
@click.option("--id-type", default="string", help="Declaration type of wrapper identifiers")
@click.option("--suffix", default="_ref", help="Output file name suffix")
@click.option("--force", is_flag=True, default=False, help="Regenerate up-to-date outputs")
@click.option("--trace", is_flag=True, default=False, help="Log generation steps")
@click.option("--import", "imports", multiple=True, help="Extra module to import (repeatable)")
@click.option("--runtime-import", default="refgen.wire", help="Import path of the wire runtime")
@click.option(
    "--stdout", "to_stdout", is_flag=True, default=False, help="Print instead of writing files"
)
def gen(
    directories: tuple[str, ...],
    id_type: str,
    suffix: str,
    force: bool,
    trace: bool,
    imports: tuple[str, ...],
    runtime_import: str,
    to_stdout: bool,
) -> None:
    """Generate reference modules for package directories."""
    _configure_logging(trace)
    config = Config(
        id_type=id_type,
        suffix=suffix,
        force=force,
        trace=trace,
        imports=imports,
        runtime_import=runtime_import,
    )

    for directory in directories:

        def sink(package: str, text: str, directory: str = directory) -> None:
            if to_stdout:
                click.echo(text, nl=False)
                return
            path = output_file(directory, package, config.suffix)
            path.write_text(text, encoding="utf-8")
            click.echo(f"Generated {path}")

        try:
            units = load_units(directory)
            stale: list[SourceUnit] = []
            for package, package_units in group_units(units).items():
                sources = [Path(directory) / unit.name for unit in package_units]
                dst = output_file(directory, package, config.suffix)
                if config.force or to_stdout or needs_update(dst, sources):
                    stale.extend(package_units)
                else:
                    click.echo(f"{dst} is up to date")
            generate(stale, config, sink)
        except GenerationError as e:
            _fail(e)


@cli.command()
@click.option(
    "--input",
    "-i",
    "input_path",
    required=True,
    type=click.Path(exists=True),
    help=f"Declaration file ({SOURCE_SUFFIX}) or package directory",
)
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def info(input_path: str, output_json: bool) -> None:
    """Display declared types and their field policies."""
    try:
        contexts = []
        for package, units in sorted(group_units(_load(input_path)).items()):
            ctx = Context(package=package, config=Config())
            collect(ctx, units)
            contexts.append(ctx)
    except GenerationError as e:
        _fail(e)

    if output_json:
        _output_json(contexts)
    else:
        _output_plain(contexts)


def _output_json(contexts: list[Context]) -> None:
    """Output package info as JSON."""
    data: dict = {}
    for ctx in contexts:
        data[ctx.package] = {
            "types": {name: decl.to_dict() for name, decl in ctx.types.items()},
            "wrappers": {
                wrapper_name(ctx.config, ident): ident.name for ident in ctx.generate.values()
            },
            "fields": {
                name: [
                    {
                        "name": m.name,
                        "type": m.ident.name,
                        "wire_name": m.policy.wire_name if m.wired else None,
                        "variant": m.policy.variant if m.wired else None,
                    }
                    for m in members
                ]
                for name, members in ctx.marshal.items()
            },
        }

    print(json.dumps(data, indent=2))


def _output_plain(contexts: list[Context]) -> None:
    """Output package info using rich text formatting."""
    console = Console()

    for ctx in contexts:
        console.print(f"[bold cyan]Package {ctx.package}[/bold cyan]")

        for name, members in ctx.marshal.items():
            table = Table(title=name, show_header=True, box=None, padding=(0, 2, 0, 0))
            table.add_column("Field", style="white")
            table.add_column("Type", style="yellow")
            table.add_column("Wire name", style="green")
            table.add_column("Reference", style="dim")

            for m in members:
                if not m.wired:
                    table.add_row(m.name, m.ident.name, "", "omitted")
                    continue
                assert m.policy is not None
                ref = ""
                if m.policy.is_reference:
                    ref = f"{m.policy.id_name} ({m.policy.variant})"
                wire = m.policy.wire_name + (",omitempty" if m.policy.omit_empty else "")
                table.add_row(m.name, m.ident.name, wire, ref)

            console.print(table)
            console.print()

        if ctx.generate:
            console.print("[bold cyan]Wrappers[/bold cyan]")
            for base in sorted(ctx.generate):
                ident = ctx.generate[base]
                console.print(f"  {wrapper_name(ctx.config, ident)} [dim]{ident.name}[/dim]")
            console.print()


@cli.command()
@click.argument("expression")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def ident(expression: str, output_json: bool) -> None:
    """Display the descriptor of one type expression."""
    try:
        descriptor = parse_type(expression)
    except GenerationError as e:
        _fail(e)

    data = {
        "name": descriptor.name,
        "base": descriptor.base,
        "indirects": descriptor.indirects,
        "dims": descriptor.dims,
        "key": descriptor.key.name if descriptor.key else None,
        "nullable": descriptor.nullable(),
    }

    if output_json:
        print(json.dumps(data, indent=2))
        return

    table = Table(show_header=False, box=None, padding=(0, 2, 0, 2))
    table.add_column("Label", style="dim")
    table.add_column("Value", style="white")
    for label, value in data.items():
        table.add_row(label, str(value))
    Console().print(table)


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
