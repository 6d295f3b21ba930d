"""Tests for struct tag lookup and field policies."""

import pytest

from refgen.generator import FieldPolicy, Variant, resolve
from refgen.generator.errors import AmbiguousTagError, PolicyError
from refgen.generator.policy import lookup, resolve_field
from refgen.generator.types import FieldDecl, NameExpr


def describe_lookup():
    def finds_values_by_key(expect):
        tag = 'json:"a,omitempty" ref:"a_id,value"'
        expect(lookup(tag, "json")) == "a,omitempty"
        expect(lookup(tag, "ref")) == "a_id,value"

    def returns_empty_for_missing_keys(expect):
        expect(lookup('json:"a"', "ref")) == ""
        expect(lookup(None, "json")) == ""
        expect(lookup("", "json")) == ""

    def unescapes_values(expect):
        expect(lookup(r'json:"a\"b"', "json")) == 'a"b'


def describe_resolve():
    def defaults_wire_name_to_field_name(expect):
        expect(resolve("", "", "A")) == FieldPolicy(wire_name="A")
        expect(resolve(",omitempty", "", "A")) == FieldPolicy(wire_name="A", omit_empty=True)

    def reads_plain_fields(expect):
        policy = resolve("a,omitempty", "", "A")
        expect(policy.wire_name) == "a"
        expect(policy.omit_empty) == True
        expect(policy.is_reference) == False
        expect(policy.variant) == None

    def omits_dashed_fields(expect):
        expect(resolve("-", "", "A").omit) == True
        expect(resolve("a,-", "", "A").omit) == True
        expect(resolve("a", "-", "A").omit) == True
        expect(resolve("a", "a_id,-", "A").omit) == True

    def defaults_references_to_id(expect):
        policy = resolve("a", "a_id", "A")
        expect(policy) == FieldPolicy(
            wire_name="a", id_name="a_id", variant=Variant.ID, is_reference=True
        )

    def reads_value_references(expect):
        policy = resolve("", "a_id,value", "A")
        expect(policy.wire_name) == "A"
        expect(policy.id_name) == "a_id"
        expect(policy.variant) == Variant.VALUE

    def rejects_unknown_variants(expect):
        with pytest.raises(PolicyError, match="Invalid marshaling option"):
            resolve("a", "a_id,both", "A")

    def rejects_several_variants(expect):
        with pytest.raises(PolicyError):
            resolve("a", "a_id,id,value", "A")

    def rejects_unnamed_references(expect):
        with pytest.raises(PolicyError):
            resolve("a", ",value", "A")


def describe_resolve_field():
    def skips_unexported_names(expect):
        field = FieldDecl(names=["hidden", "B"], type=NameExpr("int"))
        expect(resolve_field(field)) == [("B", FieldPolicy(wire_name="B"))]

    def shares_unnamed_tags(expect):
        field = FieldDecl(names=["A", "B"], type=NameExpr("int"), tag='json:",omitempty"')
        policies = resolve_field(field)
        expect([name for name, _ in policies]) == ["A", "B"]
        expect(policies[1][1]) == FieldPolicy(wire_name="B", omit_empty=True)

    def rejects_shared_wire_names(expect):
        field = FieldDecl(names=["A", "B"], type=NameExpr("int"), tag='json:"x"')
        with pytest.raises(AmbiguousTagError):
            resolve_field(field)

    def rejects_shared_reference_tags(expect):
        field = FieldDecl(names=["A", "B"], type=NameExpr("Msg"), tag='ref:"x_id"')
        with pytest.raises(AmbiguousTagError):
            resolve_field(field)

    def allows_shared_omitted_tags(expect):
        field = FieldDecl(names=["A", "B"], type=NameExpr("int"), tag='json:"-"')
        expect(all(p.omit for _, p in resolve_field(field))) == True

    def uses_configured_tag_keys(expect):
        field = FieldDecl(names=["A"], type=NameExpr("Msg"), tag='wire:"a" link:"a_id,value"')
        [(_, policy)] = resolve_field(field, wire_key="wire", ref_key="link")
        expect(policy.wire_name) == "a"
        expect(policy.variant) == Variant.VALUE
