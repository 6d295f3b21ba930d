"""Declaration file discovery, output naming and staleness checks."""

import os
from pathlib import Path

from .parser import parse
from .types import SourceUnit

SOURCE_SUFFIX = ".decl"


def source_files(directory: str | Path) -> list[Path]:
    """List the declaration files of a directory, sorted by name."""
    return sorted(p for p in Path(directory).iterdir() if p.suffix == SOURCE_SUFFIX and p.is_file())


def load_units(directory: str | Path) -> list[SourceUnit]:
    """Parse every declaration file of a directory.

    Files without a package clause belong to the package named after the
    directory.
    """
    default_package = Path(directory).resolve().name
    units: list[SourceUnit] = []
    for path in source_files(directory):
        units.append(parse(path.read_text(encoding="utf-8"), name=path.name, package=default_package))
    return units


def output_file(directory: str | Path, package: str, suffix: str) -> Path:
    """Path of the module generated for a package."""
    return Path(directory) / f"{package}{suffix}.py"


def is_out_of_date(dst: str | Path, src: str | Path) -> bool:
    """Check if ``dst`` is missing or older than ``src``.

    A missing source is an error.
    """
    try:
        dst_mtime = os.stat(dst).st_mtime
    except FileNotFoundError:
        return True

    return os.stat(src).st_mtime > dst_mtime


def needs_update(dst: str | Path, sources: list[Path]) -> bool:
    """Check if ``dst`` must be regenerated from any of ``sources``."""
    return any(is_out_of_date(dst, src) for src in sources)
