"""Tests for generated reference modules.

The generated code is executed and its wrappers and codecs exercised
directly.
"""

import json
import os

import pytest

from refgen.generator import Config, Context, collect, emit, parse
from refgen.generator.files import load_units
from refgen.wire import DecodeError, MarshalError, RawMessage

FILE_DIR = os.path.dirname(os.path.realpath(__file__))


def gen_code(text, config=Config()):
    gbl = globals().copy()

    unit = parse(text, name="test.decl", package="test")
    ctx = Context(package=unit.package, config=config)
    collect(ctx, [unit])
    exec(emit(ctx), gbl)
    return gbl


def gen_package(name, config=Config()):
    gbl = globals().copy()

    units = load_units(f"{FILE_DIR}/data/{name}")
    ctx = Context(package=name, config=config)
    collect(ctx, units)
    exec(emit(ctx), gbl)
    return gbl


def describe_generated_module():
    def has_header_and_runtime_import(expect):
        unit = parse("type Int int", name="test.decl", package="test")
        ctx = Context(package="test", config=Config())
        collect(ctx, [unit])
        code = emit(ctx)
        expect(code.splitlines()[0]) == "# Code generated by refgen from test.decl. DO NOT EDIT."
        expect("import refgen.wire as _wire" in code) == True
        expect("Int = int" in code) == True

    def separates_definitions_with_blank_lines(expect):
        ctx = Context(package="example", config=Config())
        collect(ctx, load_units(f"{FILE_DIR}/data/example"))
        code = emit(ctx)
        expect("import refgen.wire as _wire\n\n\n@dataclass\nclass ComplexRef:" in code) == True
        expect("return self.Value is not None\n\n\n@dataclass\nclass IntRef:" in code) == True
        expect("return self.Value is not None\n\n\n@dataclass\nclass Complex:" in code) == True
        expect('    B: int = 0\n\n    def marshal(self) -> bytes:' in code) == True
        expect("\n\n\nInt = int\n" in code) == True
        expect("\n\n\n\n" in code) == False

    def names_referenced_type_in_wrapper_docstring(expect):
        ctx = Context(package="example", config=Config())
        collect(ctx, load_units(f"{FILE_DIR}/data/example"))
        code = emit(ctx)
        expect('"""Reference to Int held by value or by identifier."""' in code) == True
        expect('"""Reference to *Complex held by value or by identifier."""' in code) == True

    def binds_aliases(expect):
        gbl = gen_code("type Ids []string\ntype Table map[string]*int")
        expect(gbl["Ids"]) == list[str]
        expect(gbl["Table"]) == dict[str, int | None]


def describe_wrappers():
    def default_to_unset(expect):
        gbl = gen_package("example")
        ref = gbl["IntRef"]()
        expect(ref.Id) == ""
        expect(ref.Value) == None
        expect(ref.has_value()) == False

    def build_from_value_or_id(expect):
        IntRef = gen_package("example")["IntRef"]
        expect(IntRef.from_value(5).has_value()) == True
        expect(IntRef.from_value(5).Id) == ""
        expect(IntRef.from_id("abc")) == IntRef(Id="abc")
        expect(IntRef.from_id("abc").has_value()) == False

    def are_generated_once_per_base_name(expect):
        gbl = gen_package("example")
        expect("IntRef" in gbl) == True
        expect("ComplexRef" in gbl) == True

    def use_configured_identifier_type(expect):
        gbl = gen_code(
            """
            type Msg struct { N int `json:"n"` }
            type Holder struct { M *Msg `json:"m" ref:"m_id"` }
        """,
            config=Config(id_type="int"),
        )
        expect(gbl["MsgRef"]().Id) == 0


def describe_basic_package():
    def writes_value_references_inline(expect):
        gbl = gen_package("basic")
        X, RawMessageRef = gbl["X"], gbl["RawMessageRef"]

        x = X(A=123, B=RawMessageRef.from_value(RawMessage(b'{"a":123}')))
        data = x.marshal()
        expect(data) == b'{"a":123,"b":{"a":123}}'

        x1 = X()
        x1.unmarshal(data)
        expect(x1) == x

    def leaves_out_identifier_references_without_id(expect):
        gbl = gen_package("basic")
        Y, RawMessageRef = gbl["Y"], gbl["RawMessageRef"]

        y = Y(A=123, B=RawMessageRef.from_value(RawMessage(b'{"a":123}')))
        data = y.marshal()
        expect(data) == b'{"a":123}'

        y1 = Y()
        y1.unmarshal(data)
        expect(y1) == Y(A=123, B=None)

    def writes_slices_of_values(expect):
        gbl = gen_package("basic")
        Z, ArrayOfRawMessageRef = gbl["Z"], gbl["ArrayOfRawMessageRef"]

        msg = RawMessage(b'{"a":123}')
        z = Z(A=123, B=ArrayOfRawMessageRef.from_value([msg, msg]))
        data = z.marshal()
        expect(data) == b'{"a":123,"b":[{"a":123},{"a":123}]}'

        z1 = Z()
        z1.unmarshal(data)
        expect(z1) == z

    def writes_slices_of_pointers(expect):
        gbl = gen_package("basic")
        W, ArrayOfPtrToRawMessageRef = gbl["W"], gbl["ArrayOfPtrToRawMessageRef"]

        msg = RawMessage(b'{"a":123}')
        w = W(A=123, B=ArrayOfPtrToRawMessageRef.from_value([msg, msg]))
        data = w.marshal()
        expect(data) == b'{"a":123,"b":[{"a":123},{"a":123}]}'

        w1 = W()
        w1.unmarshal(data)
        expect(w1) == w


def describe_example_package():
    def writes_plain_fields_by_field_name(expect):
        Hello = gen_package("example")["Hello"]
        expect(Hello().marshal()) == b'{"A":"","B":""}'

    def writes_identifier_references(expect):
        gbl = gen_package("example")
        Hello, IntRef = gbl["Hello"], gbl["IntRef"]

        hello = Hello(A="x", C=IntRef(Id="abc", Value=123), D=4)
        expect(hello.marshal()) == b'{"A":"x","B":"","hello_id":"abc","d":4}'

        hello = Hello(C=IntRef.from_value(123))
        expect(hello.marshal()) == b'{"A":"","B":""}'

    def reads_identifier_references(expect):
        gbl = gen_package("example")
        Hello, IntRef = gbl["Hello"], gbl["IntRef"]

        hello = Hello()
        hello.unmarshal('{"A":"x","hello_id":"abc"}')
        expect(hello.A) == "x"
        expect(hello.C) == IntRef.from_id("abc")
        expect(hello.C.has_value()) == False

    def reads_the_value_side_first(expect):
        gbl = gen_package("example")
        Hello, IntRef = gbl["Hello"], gbl["IntRef"]

        hello = Hello()
        hello.unmarshal('{"hello":5,"hello_id":"abc"}')
        expect(hello.C) == IntRef.from_value(5)

    def selects_side_per_field(expect):
        gbl = gen_package("example")
        Example, Complex = gbl["Example"], gbl["Complex"]
        IntRef, ComplexRef = gbl["IntRef"], gbl["ComplexRef"]

        example = Example(A=IntRef.from_value(7), B=ComplexRef.from_value(Complex(B=2)))
        expect(example.marshal()) == b'{"a":7}'

        example.B = ComplexRef(Id="c1", Value=Complex())
        expect(example.marshal()) == b'{"a":7,"b_id":"c1"}'

    def reads_nested_reference_values(expect):
        gbl = gen_package("example")
        Example, Complex, ComplexRef = gbl["Example"], gbl["Complex"], gbl["ComplexRef"]

        example = Example()
        example.unmarshal(b'{"a":7,"b":{"a":"x","b":2}}')
        expect(example.A.Value) == 7
        expect(example.B) == ComplexRef.from_value(Complex(A="x", B=2))

    def defaults_reference_variant_to_id(expect):
        gbl = gen_package("example")
        Another, IntRef = gbl["Another"], gbl["IntRef"]

        expect(Another(A=IntRef(Id="x", Value=1)).marshal()) == b'{"a_id":"x"}'

    def omits_empty_strings(expect):
        Complex = gen_package("example")["Complex"]
        expect(Complex().marshal()) == b'{"b":0}'
        expect(Complex(A="x").marshal()) == b'{"a":"x","b":0}'


def describe_marshal():
    def places_one_separator_between_entries(expect):
        gbl = gen_code(
            """
            type Sep struct {
                A int `json:"a,omitempty"`
                B int `json:"b,omitempty"`
                C int `json:"c,omitempty"`
            }
        """
        )
        Sep = gbl["Sep"]
        expect(Sep(A=1, B=2, C=3).marshal()) == b'{"a":1,"b":2,"c":3}'
        expect(Sep(A=1, C=3).marshal()) == b'{"a":1,"c":3}'
        expect(Sep(B=2, C=3).marshal()) == b'{"b":2,"c":3}'
        expect(Sep(B=2).marshal()) == b'{"b":2}'
        expect(Sep().marshal()) == b"{}"

    def omits_empty_values(expect):
        gbl = gen_code(
            """
            type Opt struct {
                S string         `json:"s,omitempty"`
                F float64        `json:"f,omitempty"`
                L []int          `json:"l,omitempty"`
                M map[string]int `json:"m,omitempty"`
                P *int           `json:"p,omitempty"`
                B bool           `json:"b,omitempty"`
            }
        """
        )
        Opt = gbl["Opt"]
        expect(Opt().marshal()) == b"{}"

        opt = Opt(S="x", F=1.5, L=[1], M={"k": 1}, P=5, B=True)
        expect(opt.marshal()) == b'{"s":"x","f":1.5,"l":[1],"m":{"k":1},"p":5,"b":true}'

    def skips_omitted_and_unexported_fields(expect):
        gbl = gen_code(
            """
            type Priv struct {
                Shown  int `json:"shown"`
                Skip   int `json:"-"`
                hidden int
            }
        """
        )
        Priv = gbl["Priv"]
        expect(Priv(Shown=1, Skip=2, hidden=3).marshal()) == b'{"shown":1}'

    def writes_nested_values(expect):
        gbl = gen_code(
            """
            type Inner struct {
                N int `json:"n"`
            }

            type Outer struct {
                In     Inner             `json:"in"`
                Ptr    *Inner            `json:"ptr"`
                List   []Inner           `json:"list"`
                ByName map[string]*Inner `json:"by_name"`
            }
        """
        )
        Inner, Outer = gbl["Inner"], gbl["Outer"]
        expect(Outer().marshal()) == b'{"in":{"n":0},"ptr":null,"list":[],"by_name":{}}'

        outer = Outer(
            In=Inner(N=1),
            Ptr=Inner(N=2),
            List=[Inner(N=3)],
            ByName={"b": Inner(N=5), "a": None},
        )
        data = outer.marshal()
        expect(json.loads(data)) == {
            "in": {"n": 1},
            "ptr": {"n": 2},
            "list": [{"n": 3}],
            "by_name": {"a": None, "b": {"n": 5}},
        }
        expect(b'"by_name":{"a":null,"b":{"n":5}}' in data) == True

        outer1 = Outer()
        outer1.unmarshal(data)
        expect(outer1) == outer

    def writes_integer_map_keys_as_strings(expect):
        gbl = gen_code('type Tally struct { Counts map[int]string `json:"counts"` }')
        Tally = gbl["Tally"]

        tally = Tally(Counts={2: "b", 10: "a"})
        data = tally.marshal()
        expect(data) == b'{"counts":{"10":"a","2":"b"}}'

        tally1 = Tally()
        tally1.unmarshal(data)
        expect(tally1.Counts) == {2: "b", 10: "a"}

    def passes_any_values_through(expect):
        Bag = gen_code('type Bag struct { V any `json:"v"` }')["Bag"]
        expect(Bag().marshal()) == b'{"v":null}'
        expect(Bag(V={"x": [1, 2]}).marshal()) == b'{"v":{"x":[1,2]}}'

        bag = Bag()
        bag.unmarshal('{"v":{"x":[1,2]}}')
        expect(bag.V) == {"x": [1, 2]}

    def writes_integer_identifiers(expect):
        gbl = gen_code(
            """
            type Msg struct { N int `json:"n"` }
            type Holder struct { M *Msg `json:"m" ref:"m_id"` }
        """,
            config=Config(id_type="int"),
        )
        Holder, MsgRef = gbl["Holder"], gbl["MsgRef"]
        expect(Holder(M=MsgRef.from_id(0)).marshal()) == b"{}"
        expect(Holder(M=MsgRef.from_id(7)).marshal()) == b'{"m_id":7}'

    def rejects_values_without_wire_form(expect):
        Opt = gen_code('type Opt struct { F float64 `json:"f"` }')["Opt"]
        with pytest.raises(MarshalError):
            Opt(F=float("nan")).marshal()


def describe_unmarshal():
    def keeps_zero_values_for_missing_fields(expect):
        Complex = gen_package("example")["Complex"]
        complex_ = Complex(A="x", B=1)
        complex_.unmarshal(b"{}")
        expect(complex_) == Complex(A="x", B=1)

    def ignores_omitted_and_unknown_names(expect):
        gbl = gen_code(
            """
            type Priv struct {
                Shown  int `json:"shown"`
                Skip   int `json:"-"`
                hidden int
            }
        """
        )
        Priv = gbl["Priv"]
        priv = Priv()
        priv.unmarshal('{"shown":4,"Skip":5,"-":6,"hidden":7,"extra":8}')
        expect(priv) == Priv(Shown=4)

    def reads_integer_identifiers(expect):
        gbl = gen_code(
            """
            type Msg struct { N int `json:"n"` }
            type Holder struct { M *Msg `json:"m" ref:"m_id"` }
        """,
            config=Config(id_type="int"),
        )
        Holder, Msg, MsgRef = gbl["Holder"], gbl["Msg"], gbl["MsgRef"]

        holder = Holder()
        holder.unmarshal('{"m_id":7}')
        expect(holder.M) == MsgRef.from_id(7)

        holder.unmarshal('{"m":{"n":1},"m_id":7}')
        expect(holder.M) == MsgRef.from_value(Msg(N=1))

    def reads_alias_fields(expect):
        gbl = gen_code(
            """
            type Ids []string
            type Tagged struct {
                I Ids `json:"ids"`
            }
        """
        )
        Tagged = gbl["Tagged"]
        expect(Tagged().I) == []

        tagged = Tagged()
        tagged.unmarshal('{"ids":["a","b"]}')
        expect(tagged.I) == ["a", "b"]

    def propagates_malformed_input(expect):
        Complex = gen_package("example")["Complex"]
        with pytest.raises(json.JSONDecodeError):
            Complex().unmarshal(b"{not json")

    def rejects_non_objects(expect):
        Complex = gen_package("example")["Complex"]
        with pytest.raises(DecodeError):
            Complex().unmarshal(b"[1]")

    def rejects_mistyped_values(expect):
        Complex = gen_package("example")["Complex"]
        with pytest.raises(DecodeError):
            Complex().unmarshal(b'{"b":"two"}')
