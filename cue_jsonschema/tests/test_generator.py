"""
Tests for generation of JSON Schema from CUE values.

CUE values are built directly as syntax trees.
"""

import unittest

from cue_jsonschema.cue_ast.nodes import (
    EmbedDecl,
    Ellipsis,
    Field,
    FieldConstraint,
    File,
    Ident,
    ImportSpec,
    ListLit,
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
from cue_jsonschema.errors import GenerateError
from cue_jsonschema.jsonschema import GenerateConfig, Version, generate
from cue_jsonschema.values import ExprValue

SCHEMA_2020_12 = "https://json-schema.org/draft/2020-12/schema"


def gen(*decls, **config):
    return generate(ExprValue.from_file(File(decls=list(decls))), GenerateConfig(**config))


def embed(expr):
    return EmbedDecl(expr=expr)


def pkg(name):
    return Ident(name=name, node=ImportSpec(path=name))


class TestStructs(unittest.TestCase):
    def test_closed_struct(self):
        closed = new_call(
            new_ident("close"),
            StructLit(
                elts=[
                    new_field("a", new_ident("string")),
                    new_field("b", new_ident("number"), FieldConstraint.OPTIONAL),
                ]
            ),
        )
        self.assertEqual(
            gen(embed(closed)),
            {
                "$schema": SCHEMA_2020_12,
                "type": "object",
                "properties": {"a": {"type": "string"}, "b": {"type": "number"}},
                "required": ["a"],
                "additionalProperties": False,
            },
        )

    def test_schema_keyword_comes_first(self):
        result = gen(new_field("a", new_ident("string")))
        self.assertEqual(list(result)[:2], ["$schema", "type"])

    def test_open_struct(self):
        result = gen(new_field("a", new_ident("string"), FieldConstraint.OPTIONAL))
        self.assertNotIn("additionalProperties", result)
        self.assertNotIn("required", result)

    def test_explicitly_open_struct(self):
        decls = [new_field("a", new_ident("string"), FieldConstraint.OPTIONAL), Ellipsis()]
        self.assertNotIn("additionalProperties", gen(*decls))
        self.assertEqual(gen(*decls, explicit_open=True)["additionalProperties"], True)

    def test_required_field(self):
        result = gen(new_field("a", new_ident("int"), FieldConstraint.REQUIRED))
        self.assertEqual(result["required"], ["a"])

    def test_concrete_regular_field_is_not_required(self):
        result = gen(new_field("kind", new_string("Pod")))
        self.assertNotIn("required", result)
        self.assertEqual(result["properties"], {"kind": {"const": "Pod"}})

    def test_pattern_constraints(self):
        pattern = Field(label=PatternLabel(expr=UnaryExpr(op=Token.MAT, x=new_string("^x-"))), value=new_ident("string"))
        result = gen(pattern)
        self.assertEqual(result["patternProperties"], {"^x-": {"type": "string"}})

    def test_catch_all_pattern(self):
        catch_all = Field(label=PatternLabel(expr=new_ident("string")), value=new_ident("int"))
        result = gen(new_field("a", new_ident("string"), FieldConstraint.OPTIONAL), catch_all)
        self.assertEqual(result["additionalProperties"], {"type": "integer"})

    def test_property_names(self):
        label = new_call(new_sel(pkg("strings"), "MinRunes"), new_int(2))
        result = gen(Field(label=PatternLabel(expr=label), value=new_ident("_")))
        self.assertEqual(result["propertyNames"], {"type": "string", "minLength": 2})

    def test_negated_patterns_cover_remaining_fields(self):
        label = UnaryExpr(op=Token.NMAT, x=new_string("^(a)$"))
        result = gen(new_field("a", new_ident("string"), FieldConstraint.OPTIONAL), Field(label=PatternLabel(expr=label), value=new_ident("int")))
        self.assertEqual(result["additionalProperties"], {"type": "integer"})


class TestScalars(unittest.TestCase):
    def test_enum_from_disjunction(self):
        result = gen(embed(new_bin_expr(Token.OR, new_string("a"), new_string("b"))))
        self.assertEqual(result, {"$schema": SCHEMA_2020_12, "enum": ["a", "b"]})

    def test_mixed_disjunction_stays_any_of(self):
        result = gen(embed(new_bin_expr(Token.OR, new_string("a"), new_int(1))))
        self.assertEqual(result["anyOf"], [{"const": "a"}, {"const": 1}])

    def test_numeric_bounds(self):
        expr = new_bin_expr(
            Token.AND,
            new_ident("int"),
            UnaryExpr(op=Token.GEQ, x=new_int(0)),
            UnaryExpr(op=Token.LSS, x=new_int(10)),
        )
        self.assertEqual(
            gen(embed(expr)),
            {"$schema": SCHEMA_2020_12, "type": "integer", "minimum": 0, "exclusiveMaximum": 10},
        )

    def test_string_length(self):
        strings = pkg("strings")
        expr = new_bin_expr(
            Token.AND,
            new_call(new_sel(strings, "MinRunes"), new_int(2)),
            new_call(new_sel(pkg("strings"), "MaxRunes"), new_int(5)),
        )
        result = gen(embed(expr))
        self.assertEqual(result["type"], "string")
        self.assertEqual(result["minLength"], 2)
        self.assertEqual(result["maxLength"], 5)

    def test_pattern(self):
        result = gen(embed(UnaryExpr(op=Token.MAT, x=new_string("^[0-9]+$"))))
        self.assertEqual(result["pattern"], "^[0-9]+$")
        self.assertEqual(result["type"], "string")

    def test_time_formats(self):
        self.assertEqual(gen(embed(new_sel(pkg("time"), "Time")))["format"], "date-time")
        date = new_call(new_sel(pkg("time"), "Format"), new_string("2006-01-02"))
        self.assertEqual(gen(embed(date))["format"], "date")

    def test_multiple_of(self):
        expr = new_bin_expr(Token.AND, new_ident("int"), new_call(new_sel(pkg("math"), "MultipleOf"), new_int(3)))
        result = gen(embed(expr))
        self.assertEqual(result["multipleOf"], 3)
        self.assertEqual(result["type"], "integer")


class TestLists(unittest.TestCase):
    def test_list_of(self):
        result = gen(embed(ListLit(elts=[Ellipsis(type=new_ident("string"))])))
        self.assertEqual(result, {"$schema": SCHEMA_2020_12, "type": "array", "items": {"type": "string"}})

    def test_closed_prefix(self):
        result = gen(embed(ListLit(elts=[new_ident("string"), new_ident("int")])))
        self.assertEqual(result["prefixItems"], [{"type": "string"}, {"type": "integer"}])
        self.assertEqual(result["items"], False)
        self.assertEqual(result["minItems"], 2)

    def test_unique_items(self):
        result = gen(embed(new_call(new_sel(pkg("list"), "UniqueItems"))))
        self.assertEqual(result["uniqueItems"], True)


class TestCombinators(unittest.TestCase):
    def _match_n(self, count):
        return embed(new_call(new_ident("matchN"), count, ListLit(elts=[new_ident("string"), new_ident("int")])))

    def test_one_of(self):
        result = gen(self._match_n(new_int(1)))
        self.assertEqual(result["oneOf"], [{"type": "string"}, {"type": "integer"}])

    def test_any_of(self):
        result = gen(self._match_n(UnaryExpr(op=Token.GEQ, x=new_int(1))))
        self.assertEqual(result["anyOf"], [{"type": "string"}, {"type": "integer"}])

    def test_all_of(self):
        elems = ListLit(elts=[new_ident("string"), UnaryExpr(op=Token.MAT, x=new_string("^a"))])
        result = gen(embed(new_call(new_ident("matchN"), new_int(2), elems)))
        self.assertEqual(result, {"$schema": SCHEMA_2020_12, "type": "string", "pattern": "^a"})

    def test_not(self):
        result = gen(embed(new_call(new_ident("matchN"), new_int(0), ListLit(elts=[new_ident("string")]))))
        self.assertEqual(result["not"], {"type": "string"})

    def test_if_then_else(self):
        expr = new_call(new_ident("matchIf"), new_ident("string"), UnaryExpr(op=Token.MAT, x=new_string("^a")), new_ident("_"))
        result = gen(embed(expr))
        self.assertEqual(result["if"], {"type": "string"})
        self.assertEqual(result["then"], {"type": "string", "pattern": "^a"})
        self.assertNotIn("else", result)


class TestReferences(unittest.TestCase):
    def test_definition_reference(self):
        result = gen(embed(new_ident("#foo")), Field(label=new_ident("#foo"), value=new_ident("string")))
        self.assertEqual(
            result,
            {
                "$schema": SCHEMA_2020_12,
                "$defs": {"#foo": {"type": "string"}},
                "$ref": "#/$defs/#foo",
            },
        )

    def test_recursive_reference(self):
        node = StructLit(elts=[new_field("next", new_ident("#node"), FieldConstraint.OPTIONAL)])
        result = gen(embed(new_ident("#node")), Field(label=new_ident("#node"), value=node))
        self.assertEqual(result["$defs"]["#node"]["properties"]["next"], {"$ref": "#/$defs/#node"})
        # Fields of definitions are closed.
        self.assertEqual(result["$defs"]["#node"]["additionalProperties"], False)

    def test_custom_name_func(self):
        def name_func(root, path):
            return str(path).lstrip("#").upper()

        result = gen(embed(new_ident("#foo")), Field(label=new_ident("#foo"), value=new_ident("int")), name_func=name_func)
        self.assertEqual(result["$ref"], "#/$defs/FOO")

    def test_unnamed_reference_is_inlined(self):
        foo = Field(label=new_ident("#foo"), value=new_ident("int"))
        result = gen(embed(new_ident("#foo")), foo, name_func=lambda root, path: "")
        self.assertEqual(result["type"], "integer")
        self.assertNotIn("$ref", result)

    def test_unnamed_cyclic_reference(self):
        node = StructLit(elts=[new_field("next", new_ident("#node"), FieldConstraint.OPTIONAL)])
        with self.assertRaises(GenerateError) as ctx:
            gen(embed(new_ident("#node")), Field(label=new_ident("#node"), value=node), name_func=lambda r, p: "")
        self.assertIn("cyclic reference to #node cannot be inlined", str(ctx.exception))


class TestErrors(unittest.TestCase):
    def test_unresolved_reference(self):
        with self.assertRaises(GenerateError) as ctx:
            gen(embed(new_ident("missing")))
        self.assertIn("reference 'missing' not found", str(ctx.exception))

    def test_unsatisfiable(self):
        with self.assertRaises(GenerateError):
            gen(embed(new_call(new_ident("error"), new_string("disallowed"))))

    def test_bad_builtin_argument(self):
        with self.assertRaises(GenerateError) as ctx:
            gen(embed(new_call(new_sel(pkg("strings"), "MinRunes"), new_string("x"))))
        self.assertIn("expects an integer argument", str(ctx.exception))

    def test_unsupported_version(self):
        with self.assertRaises(ValueError):
            gen(new_field("a", new_ident("string")), version=Version.DRAFT7)

    def test_deterministic(self):
        decls = [
            new_field("a", new_ident("string")),
            new_field("b", ListLit(elts=[Ellipsis(type=new_ident("int"))]), FieldConstraint.OPTIONAL),
        ]
        self.assertEqual(gen(*decls), gen(*decls))


if __name__ == "__main__":
    unittest.main()
