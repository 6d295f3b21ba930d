"""Generation settings shared by every stage of a run."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Config:
    """Resolved generation settings.

    Built once from the command line and passed to every stage; nothing in
    the generator keeps settings in module globals.
    """

    id_type: str = "string"  # declaration-language type of wrapper identifiers
    suffix: str = "_ref"  # output file name suffix
    force: bool = False  # regenerate even when outputs are up to date
    trace: bool = False  # log collection and emission steps at INFO
    imports: tuple[str, ...] = ()  # modules every generated file imports
    wire_tag: str = "json"
    ref_tag: str = "ref"
    ref_suffix: str = "Ref"
    runtime_import: str = "refgen.wire"
