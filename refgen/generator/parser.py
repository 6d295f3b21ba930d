"""Declaration source parser using Lark."""

import json
import os
from typing import Any

from lark import Lark, Token
from lark.exceptions import UnexpectedInput
from lark.visitors import Transformer

from .errors import TypeSyntaxError
from .types import (
    AliasDecl,
    ArrayExpr,
    FieldDecl,
    MapExpr,
    NameExpr,
    SelectorExpr,
    SliceExpr,
    SourceUnit,
    StarExpr,
    StructDecl,
    TypeDecl,
    TypeExpr,
)

_g_parser: Lark | None = None


class _PackageName(str):
    pass


class _Tag(str):
    pass


def _grammar() -> Lark:
    global _g_parser

    if not _g_parser:
        with open(f"{os.path.dirname(__file__)}/declarations.lark", encoding="utf-8") as f:
            grammar = f.read()

        _g_parser = Lark(grammar, parser="lalr", start=["unit", "type"])

    return _g_parser


class TreeTransformer(Transformer):
    """Transform parse tree into declaration types."""

    def __init__(self, unit: str = "<string>", package: str = "") -> None:
        super().__init__()
        self.unit_name = unit
        self.package = package

    def unit(self, args: list[Any]) -> SourceUnit:
        package = self.package
        decls: list[TypeDecl] = []
        for arg in args:
            if isinstance(arg, _PackageName):
                package = str(arg)
            else:
                decls.extend(arg)
        return SourceUnit(name=self.unit_name, package=package, decls=decls)

    def package_clause(self, args: list[Any]) -> _PackageName:
        return _PackageName(args[0])

    def type_decl(self, args: list[Any]) -> list[TypeDecl]:
        return list(args)

    def type_group(self, args: list[Any]) -> list[TypeDecl]:
        return list(args)

    def struct_spec(self, args: list[Any]) -> StructDecl:
        return StructDecl(name=str(args[0]), fields=list(args[1:]), unit=self.unit_name)

    def alias_spec(self, args: list[Any]) -> AliasDecl:
        return AliasDecl(name=str(args[0]), type=args[-1], unit=self.unit_name)

    def field(self, args: list[Any]) -> FieldDecl:
        names = [str(a) for a in args if isinstance(a, Token)]
        tags = [a for a in args if isinstance(a, _Tag)]
        type_expr = next(a for a in args if not isinstance(a, (Token, _Tag)))
        return FieldDecl(names=names, type=type_expr, tag=str(tags[0]) if tags else None)

    def raw_tag(self, args: list[Any]) -> _Tag:
        return _Tag(str(args[0])[1:-1])

    def quoted_tag(self, args: list[Any]) -> _Tag:
        return _Tag(json.loads(str(args[0])))

    def name(self, args: list[Any]) -> NameExpr:
        return NameExpr(name=str(args[0]))

    def selector(self, args: list[Any]) -> SelectorExpr:
        return SelectorExpr(parts=[str(a) for a in args])

    def star(self, args: list[Any]) -> StarExpr:
        return StarExpr(elem=args[0])

    def slice(self, args: list[Any]) -> SliceExpr:
        return SliceExpr(elem=args[0])

    def array(self, args: list[Any]) -> ArrayExpr:
        return ArrayExpr(length=int(args[0]), elem=args[1])

    def map(self, args: list[Any]) -> MapExpr:
        return MapExpr(key=args[0], value=args[1])


def parse(text: str, name: str = "<string>", package: str = "") -> SourceUnit:
    """Parse one declaration source unit.

    ``package`` is used when the text has no package clause.
    """
    try:
        tree = _grammar().parse(text, start="unit")
    except UnexpectedInput as e:
        raise TypeSyntaxError(f"{name}:{e.line}:{e.column}: invalid declaration") from e

    return TreeTransformer(name, package).transform(tree)


def parse_type_expr(text: str) -> TypeExpr:
    """Parse a single type expression such as ``[]*pkg.Msg``."""
    try:
        tree = _grammar().parse(text, start="type")
    except UnexpectedInput as e:
        raise TypeSyntaxError(f"invalid type expression: {text!r}") from e

    return TreeTransformer().transform(tree)
