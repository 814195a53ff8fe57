"""
Tests for the CUE serializer.
"""

from unittest import TestCase

from cue_jsonschema.cue_ast import CueSerializer, format_node
from cue_jsonschema.cue_ast.astutil import add_imports
from cue_jsonschema.cue_ast.nodes import (
    Attribute,
    BadExpr,
    BinaryExpr,
    EmbedDecl,
    Field,
    FieldConstraint,
    File,
    Ident,
    ImportSpec,
    ListLit,
    Package,
    PatternLabel,
    StructLit,
    Token,
    UnaryExpr,
    new_bin_expr,
    new_call,
    new_field,
    new_ident,
    new_int,
    new_sel,
    new_string,
)
from cue_jsonschema.cue_ast.nodes import Ellipsis as EllipsisNode


class TestExpressions(TestCase):
    def test_precedence(self):
        expr = new_bin_expr(Token.AND, new_ident("a"), new_bin_expr(Token.OR, new_ident("b"), new_ident("c")))
        self.assertEqual(format_node(expr), "a & (b | c)")
        expr = new_bin_expr(Token.OR, new_ident("a"), new_bin_expr(Token.AND, new_ident("b"), new_ident("c")))
        self.assertEqual(format_node(expr), "a | b & c")

    def test_unary(self):
        self.assertEqual(format_node(UnaryExpr(op=Token.GEQ, x=new_int(1))), ">=1")
        self.assertEqual(format_node(UnaryExpr(op=Token.NMAT, x=new_string("^a"))), '!~"^a"')

    def test_calls_and_selectors(self):
        strings = Ident(name="strings", node=ImportSpec(path="strings"))
        self.assertEqual(format_node(new_call(new_sel(strings, "MinRunes"), new_int(2))), "strings.MinRunes(2)")

    def test_lists(self):
        self.assertEqual(format_node(ListLit(elts=[EllipsisNode()])), "[...]")
        self.assertEqual(format_node(ListLit(elts=[new_ident("string"), EllipsisNode(type=new_ident("int"))])), "[string, ...int]")

    def test_structs(self):
        self.assertEqual(format_node(StructLit()), "{}")
        self.assertEqual(format_node(StructLit(elts=[EllipsisNode()])), "{...}")
        s = StructLit(
            elts=[
                new_field("a", new_ident("string"), FieldConstraint.REQUIRED),
                new_field("b", StructLit(elts=[new_field("c", new_ident("int"), FieldConstraint.OPTIONAL)])),
                Field(label=PatternLabel(expr=UnaryExpr(op=Token.MAT, x=new_string("^x-"))), value=new_ident("string")),
            ]
        )
        self.assertEqual(format_node(s), '{\n\ta!: string\n\tb: {\n\t\tc?: int\n\t}\n\t[=~"^x-"]: string\n}')

    def test_quoted_labels(self):
        self.assertEqual(format_node(StructLit(elts=[new_field("foo-bar", new_ident("int"))])), '{\n\t"foo-bar": int\n}')
        self.assertEqual(format_node(StructLit(elts=[new_field("#x", new_ident("int"))])), '{\n\t"#x": int\n}')

    def test_field_doc_and_attributes(self):
        f = new_field("old", new_ident("string"), FieldConstraint.OPTIONAL)
        f.doc = "Old field.\nDo not use."
        f.attrs.append(Attribute(text="@deprecated()"))
        out = format_node(StructLit(elts=[new_field("a", new_ident("int")), f]))
        self.assertEqual(out, "{\n\ta: int\n\n\t// Old field.\n\t// Do not use.\n\told?: string @deprecated()\n}")

    def test_error_call(self):
        self.assertEqual(format_node(BinaryExpr(op=Token.AND, x=new_ident("a"), y=new_call(new_ident("error"), new_string("x")))), 'a & error("x")')

    def test_bad_expression(self):
        self.assertEqual(format_node(BadExpr(message="oops")), "_|_")


class TestFiles(TestCase):
    def test_full_file(self):
        strings = Ident(name="strings", node=ImportSpec(path="strings"))
        f = File(
            decls=[
                Package(name="schemas"),
                Attribute(text='@jsonschema(schema="https://json-schema.org/draft/2020-12/schema")'),
                EmbedDecl(expr=new_call(new_sel(strings, "MinRunes"), new_int(1))),
            ]
        )
        out = CueSerializer().serialize(add_imports(f), "Generated by cue_jsonschema v1.0.1 : cue_jsonschema extract a.json")
        self.assertEqual(
            out,
            "// Generated by cue_jsonschema v1.0.1 : cue_jsonschema extract a.json\n"
            "\n"
            "package schemas\n"
            "\n"
            '@jsonschema(schema="https://json-schema.org/draft/2020-12/schema")\n'
            "\n"
            'import "strings"\n'
            "\n"
            "strings.MinRunes(1)\n",
        )

    def test_multiple_imports(self):
        f = File(
            decls=[
                EmbedDecl(
                    expr=new_bin_expr(
                        Token.AND,
                        new_sel(Ident(name="time", node=ImportSpec(path="time")), "Time"),
                        new_call(new_sel(Ident(name="strings", node=ImportSpec(path="strings")), "MinRunes"), new_int(1)),
                    )
                )
            ]
        )
        out = format_node(add_imports(f))
        self.assertTrue(out.startswith('import (\n\t"strings"\n\t"time"\n)\n\n'))

    def test_import_qualifier_must_match(self):
        f = File(decls=[EmbedDecl(expr=Ident(name="foo", node=ImportSpec(path="example.com/bar")))])
        with self.assertRaises(ValueError):
            add_imports(f)

    def test_declarations_are_separated_by_blank_lines(self):
        f = File(decls=[EmbedDecl(expr=new_ident("#a")), Field(label=new_ident("#a"), value=new_ident("int"))])
        self.assertEqual(format_node(f), "#a\n\n#a: int\n")
