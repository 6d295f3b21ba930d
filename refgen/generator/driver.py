"""Two-phase generation driver: collect every unit of a package, then emit."""

from __future__ import annotations

import keyword
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from . import python
from .config import Config
from .errors import ExportError, GenerationError, TypeLookupError, TypeSyntaxError
from .ident import Identifier, parse_ident, parse_type
from .marshal import Member
from .policy import resolve_field
from .types import RUNTIME_TYPES, AliasDecl, SourceUnit, StructDecl, TypeDecl, is_builtin
from .wrappers import wrapper_name

logger = logging.getLogger(__name__)

Sink = Callable[[str, str], None]

# Names the generated module binds itself or uses unqualified, including
# the builtins behind annotations, defaults and decode shapes and the
# parameters and locals of generated methods
RESERVED_NAMES = frozenset(
    [
        "Any",
        "annotations",
        "dataclass",
        "field",
        "_wire",
        "bool",
        "bytes",
        "dict",
        "float",
        "int",
        "list",
        "object",
        "str",
        "cls",
        "self",
        "fields",
        "value",
        "_raw",
        "_buf",
        "_n",
    ]
)

# Methods every generated struct defines
STRUCT_METHODS = frozenset(["marshal", "unmarshal", "from_wire", "_assign"])


@dataclass
class Context:
    """Bookkeeping of one package run.

    ``types`` is the type table, ``generate`` maps canonical base names to the
    descriptor their wrapper is built from and ``marshal`` maps struct names
    to their resolved members. All of it is filled by ``collect`` and only
    read by ``emit``.
    """

    package: str
    config: Config
    units: list[str] = field(default_factory=list)
    types: dict[str, TypeDecl] = field(default_factory=dict)
    aliases: dict[str, Identifier] = field(default_factory=dict)
    generate: dict[str, Identifier] = field(default_factory=dict)
    marshal: dict[str, list[Member]] = field(default_factory=dict)
    dependencies: set[str] = field(default_factory=set)


def _trace(ctx: Context, msg: str, *args: object) -> None:
    logger.log(logging.INFO if ctx.config.trace else logging.DEBUG, msg, *args)


def _check_name(name: str, what: str) -> None:
    if keyword.iskeyword(name) or name in RESERVED_NAMES:
        raise TypeSyntaxError(f"{what} name {name} is reserved")


def _resolve(ctx: Context, ident: Identifier) -> None:
    """Check that every type named by a descriptor can be referenced."""
    for layer in ident.layers:
        if layer.key is not None:
            _resolve(ctx, layer.key)

    if ident.package:
        if ident.qualified not in RUNTIME_TYPES:
            ctx.dependencies.add(ident.package)
    elif not is_builtin(ident.type_name) and ident.type_name not in ctx.types:
        raise TypeLookupError(f"No type found for: {ident.type_name}")


def _alias_refs(ident: Identifier) -> Iterable[str]:
    for layer in ident.layers:
        if layer.key is not None:
            yield from _alias_refs(layer.key)
    if not ident.package:
        yield ident.type_name


def _check_cycles(graph: dict[str, list[str]]) -> None:
    done: set[str] = set()

    def visit(name: str, path: list[str]) -> None:
        if name in path:
            cycle = " -> ".join([*path[path.index(name) :], name])
            raise TypeSyntaxError(f"Invalid recursive type: {cycle}")
        if name in done:
            return
        for ref in graph[name]:
            visit(ref, [*path, name])
        done.add(name)

    for name in graph:
        visit(name, [])


def _check_alias_cycles(ctx: Context) -> None:
    _check_cycles(
        {
            name: [ref for ref in _alias_refs(ident) if ref in ctx.aliases]
            for name, ident in ctx.aliases.items()
        }
    )


def _value_struct(ctx: Context, ident: Identifier) -> str | None:
    """Name of the struct a descriptor holds by value, following aliases."""
    while not ident.layers and not ident.package:
        decl = ctx.types.get(ident.type_name)
        if isinstance(decl, StructDecl):
            return decl.name
        if not isinstance(decl, AliasDecl):
            return None
        ident = ctx.aliases[decl.name]
    return None


def _check_struct_cycles(ctx: Context) -> None:
    """Reject structs that contain themselves by value.

    Pointer, slice and map layers end a cycle, and so do reference
    fields, which default to ``None``.
    """
    graph: dict[str, list[str]] = {}
    for name, members in ctx.marshal.items():
        graph[name] = []
        for m in members:
            if m.wired and m.policy is not None and m.policy.is_reference:
                continue
            target = _value_struct(ctx, m.ident)
            if target is not None:
                graph[name].append(target)
    _check_cycles(graph)


def _collect_struct(ctx: Context, decl: StructDecl) -> list[Member]:
    members: list[Member] = []
    seen: set[str] = set()

    for fdecl in decl.fields:
        ident = parse_ident(fdecl.type)
        _resolve(ctx, ident)
        policies = dict(resolve_field(fdecl, ctx.config.wire_tag, ctx.config.ref_tag))

        for name in fdecl.names:
            _check_name(name, "Field")
            if name in STRUCT_METHODS:
                raise TypeSyntaxError(f"Field name {name} collides with a generated method")
            if name in seen:
                raise TypeSyntaxError(f"Duplicate field {name}")
            seen.add(name)

            policy = policies.get(name)
            if policy is not None and policy.is_reference and not policy.omit:
                if not ident.is_exported():
                    raise ExportError(
                        f"Type of reference field {name} must be exported: {ident.name}"
                    )
                previous = ctx.generate.get(ident.base)
                if previous is None:
                    _trace(ctx, "%s: wrapper %s for %s", ctx.package, ident.base, ident.name)
                    ctx.generate[ident.base] = ident
                elif previous.qualified != ident.qualified:
                    raise GenerationError(
                        f"Wrapper for {ident.base} is needed for both "
                        f"{previous.qualified} and {ident.qualified}"
                    )
            members.append(Member(name, ident, policy))

    return members


def collect(ctx: Context, units: Iterable[SourceUnit]) -> None:
    """Record every declaration of every unit, then resolve them.

    All units are registered before any is resolved since a declaration may
    use a type declared in a sibling unit.
    """
    for unit in sorted(units, key=lambda u: u.name):
        ctx.units.append(unit.name)
        for decl in unit.decls:
            _check_name(decl.name, "Type")
            previous = ctx.types.get(decl.name)
            if previous is not None:
                raise GenerationError(
                    f"{decl.unit}: {decl.name} redeclared, previous declaration in {previous.unit}"
                )
            ctx.types[decl.name] = decl

    _trace(ctx, "%s: collected %d types from %d units", ctx.package, len(ctx.types), len(ctx.units))

    ctx.dependencies.update(ctx.config.imports)
    _resolve(ctx, parse_type(ctx.config.id_type))

    for decl in ctx.types.values():
        try:
            if isinstance(decl, AliasDecl):
                ident = parse_ident(decl.type)
                _resolve(ctx, ident)
                ctx.aliases[decl.name] = ident
            else:
                ctx.marshal[decl.name] = _collect_struct(ctx, decl)
        except GenerationError as e:
            raise type(e)(f"{decl.unit}: {decl.name}: {e}") from e

    _check_alias_cycles(ctx)
    _check_struct_cycles(ctx)

    for base in ctx.generate:
        name = wrapper_name(ctx.config, ctx.generate[base])
        if name in ctx.types:
            raise GenerationError(f"Wrapper {name} collides with a declared type")


def emit(ctx: Context) -> str:
    """Render the collected package."""
    _trace(
        ctx,
        "%s: emitting %d wrappers and %d codecs",
        ctx.package,
        len(ctx.generate),
        len(ctx.marshal),
    )
    return python.render(ctx)


def process_package(package: str, units: Iterable[SourceUnit], config: Config, sink: Sink) -> str:
    """Generate one package and hand the text to ``sink``.

    Nothing reaches the sink unless both phases succeed.
    """
    ctx = Context(package=package, config=config)
    collect(ctx, units)
    text = emit(ctx)
    sink(package, text)
    return text


def group_units(units: Iterable[SourceUnit]) -> dict[str, list[SourceUnit]]:
    """Group source units by package name."""
    packages: dict[str, list[SourceUnit]] = {}
    for unit in units:
        if not unit.package:
            raise GenerationError(f"{unit.name}: missing package clause")
        packages.setdefault(unit.package, []).append(unit)
    return packages


def generate(units: Iterable[SourceUnit], config: Config, sink: Sink) -> list[str]:
    """Generate every package found in ``units``, in package name order.

    The first failing package stops the run and its error is raised;
    packages already handed to the sink are left as they are.
    """
    done: list[str] = []
    packages = group_units(units)
    for package in sorted(packages):
        try:
            process_package(package, packages[package], config, sink)
        except GenerationError:
            logger.error("%s: generation failed after %d packages", package, len(done))
            raise
        done.append(package)
    return done
