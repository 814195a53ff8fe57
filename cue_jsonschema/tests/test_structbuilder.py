"""
Tests for StructBuilder.
"""

from unittest import TestCase

from cue_jsonschema.cue_ast import format_node
from cue_jsonschema.cue_ast.nodes import Field, PatternLabel, StructLit, Token, UnaryExpr, new_field, new_ident, new_string
from cue_jsonschema.errors import StructBuilderError
from cue_jsonschema.jsonschema.structbuilder import StructBuilder
from cue_jsonschema.values import Path, Selector

FOO = Path.make(Selector.definition("#foo"))


class TestStructBuilder(TestCase):
    def setUp(self):
        self.b = StructBuilder()

    def test_put_twice(self):
        self.assertTrue(self.b.put(FOO, new_ident("int")))
        self.assertFalse(self.b.put(FOO, new_ident("string")))
        self.assertEqual(format_node(self.b.syntax()), "#foo: int\n")

    def test_reference_before_definition(self):
        ref = self.b.get_ref(FOO)
        self.b.put(Path(), ref)
        self.b.put(FOO, new_ident("int"))
        f = self.b.syntax()
        self.assertEqual(format_node(f), "#foo\n\n#foo: int\n")
        self.assertIs(ref.node, f.decls[1].value)

    def test_reference_to_nested_path(self):
        path = Path.make(Selector.hidden("_#defs"), Selector.string("/properties/a"))
        ref = self.b.get_ref(path)
        self.b.put(path, new_ident("string"))
        self.b.put(Path.make(Selector.string("b")), ref)
        out = format_node(self.b.syntax())
        self.assertIn('_#defs: "/properties/a": string', out)
        self.assertIn('b: _#defs."/properties/a"', out)

    def test_reference_to_root(self):
        ref = self.b.get_ref(Path())
        self.b.put(Path(), StructLit(elts=[new_field("next", ref)]))
        f = self.b.syntax()
        out = format_node(f)
        self.assertTrue(out.startswith("_schema\n\n_schema: {"))
        self.assertIn("next: _schema", out)

    def test_reference_to_undefined_path(self):
        self.b.get_ref(FOO)
        with self.assertRaises(StructBuilderError):
            self.b.syntax()

    def test_reference_must_start_with_identifier(self):
        with self.assertRaises(StructBuilderError):
            self.b.get_ref(Path.make(Selector.string("foo-bar")))

    def test_entries_are_sorted(self):
        self.b.put(Path.make(Selector.definition("#b")), new_ident("int"))
        self.b.put(Path.make(Selector.hidden("_#defs"), Selector.string("/x")), new_ident("int"))
        self.b.put(Path.make(Selector.definition("#a")), new_ident("int"))
        self.assertEqual(format_node(self.b.syntax()), '#a: int\n\n#b: int\n\n_#defs: "/x": int\n')

    def test_value_with_entries(self):
        self.b.put(Path(), new_ident("string"))
        self.b.put(FOO, new_ident("int"))
        self.assertEqual(format_node(self.b.syntax()), "string\n\n#foo: int\n")

    def test_doc_comment(self):
        self.b.put(FOO, new_ident("int"), "A foo.")
        self.assertEqual(format_node(self.b.syntax()), "// A foo.\n#foo: int\n")

    def test_root_comment(self):
        self.b.put(Path(), new_ident("int"), "Root.")
        f = self.b.syntax()
        self.assertEqual(f.doc, "Root.")
        self.assertEqual(format_node(f), "// Root.\nint\n")

    def test_root_struct_with_pattern_field(self):
        pattern = Field(label=PatternLabel(expr=UnaryExpr(op=Token.MAT, x=new_string("^x-"))), value=new_ident("string"))
        self.b.put(Path(), StructLit(elts=[new_field("a", new_ident("int")), pattern]))
        self.assertEqual(format_node(self.b.syntax()), 'a: int\n\n[=~"^x-"]: string\n')
