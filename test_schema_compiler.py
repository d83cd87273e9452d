"""
Unit tests for the schema compiler.
"""

import json

from schema_builder.field_tree import FieldNode, add_field, toggle_lock, update_field
from schema_builder.schema_compiler import compile_schema, decompile_schema, schema_to_json


class TestCompileSchema:
    """Test cases for compile_schema."""

    def test_compile_nested_scenario(self):
        """Test the name/address example."""
        tree = (
            FieldNode(key="name", type="string"),
            FieldNode(key="address", type="nested", children=(
                FieldNode(key="city", type="string"),
            )),
        )

        assert compile_schema(tree) == {"name": "string", "address": {"city": "string"}}

    def test_compile_empty_tree(self):
        """Test that an empty tree compiles to an empty mapping."""
        assert compile_schema(()) == {}

    def test_empty_and_whitespace_keys_are_skipped(self):
        """Test that unnamed fields never reach the output, whatever their type."""
        tree = (
            FieldNode(key="", type="number"),
            FieldNode(key="   ", type="nested", children=(FieldNode(key="inner"),)),
            FieldNode(key="kept", type="boolean"),
        )

        assert compile_schema(tree) == {"kept": "boolean"}

    def test_nested_without_children_compiles_to_empty_mapping(self):
        """Test that an empty group compiles to {}."""
        tree = (FieldNode(key="meta", type="nested"),)

        assert compile_schema(tree) == {"meta": {}}

    def test_duplicate_keys_last_write_wins(self):
        """Test that a later sibling overwrites an earlier one with the same key."""
        tree = (
            FieldNode(key="id", type="string"),
            FieldNode(key="id", type="objectId"),
        )

        assert compile_schema(tree) == {"id": "objectId"}

    def test_primitive_children_are_ignored(self):
        """Test that children left on a primitive field are not compiled."""
        tree = (
            FieldNode(key="address", type="nested", children=(FieldNode(key="city"),)),
        )
        tree = update_field(tree, [0], {"type": "string"})

        assert compile_schema(tree) == {"address": "string"}

    def test_keys_are_kept_as_entered(self):
        """Test that keys are not trimmed."""
        tree = (FieldNode(key=" spaced ", type="float"),)

        assert compile_schema(tree) == {" spaced ": "float"}

    def test_insertion_order_follows_document_order(self):
        """Test output key order."""
        tree = (
            FieldNode(key="b"),
            FieldNode(key="a"),
            FieldNode(key="c"),
        )

        assert list(compile_schema(tree)) == ["b", "a", "c"]


class TestDecompileSchema:
    """Test cases for decompile_schema."""

    def test_decompile_nested(self):
        """Test rebuilding nested fields."""
        tree = decompile_schema({"name": "string", "address": {"city": "string", "zip": "number"}})

        assert tree == (
            FieldNode(key="name", type="string"),
            FieldNode(key="address", type="nested", children=(
                FieldNode(key="city", type="string"),
                FieldNode(key="zip", type="number"),
            )),
        )

    def test_unknown_types_default_to_string(self):
        """Test the lenient fallback for hand-edited schemas."""
        tree = decompile_schema({"age": "integer", "tags": ["a", "b"], "count": 3, "flag": None})

        assert [field.type for field in tree] == ["string", "string", "string", "string"]

    def test_empty_mapping_becomes_empty_nested_field(self):
        """Test that {} decompiles to a nested field with no children."""
        tree = decompile_schema({"meta": {}})

        assert tree == (FieldNode(key="meta", type="nested"),)

    def test_decompile_never_locks(self):
        """Test that lock state is not restored."""
        tree = decompile_schema({"a": "string", "b": {"c": "float"}})

        assert not any(field.locked for field in tree)
        assert not tree[1].children[0].locked

    def test_non_mapping_decompiles_to_empty_tree(self):
        """Test corrupt input."""
        assert decompile_schema(["string"]) == ()
        assert decompile_schema(None) == ()

    def test_round_trip_schema(self):
        """Test compile(decompile(s)) == s for recognized type names."""
        schemas = [
            {},
            {"a": "string"},
            {"a": "number", "b": "boolean", "c": "objectId", "d": "float"},
            {"outer": {"inner": {"deep": "string"}, "empty": {}}, "after": "number"},
        ]

        for schema in schemas:
            assert compile_schema(decompile_schema(schema)) == schema

    def test_tree_round_trip_drops_locks_and_unnamed_fields(self):
        """Test that decompile(compile(t)) is not an identity."""
        tree = add_field((FieldNode(key="name"),))
        tree = toggle_lock(tree, [0])

        restored = decompile_schema(compile_schema(tree))

        assert restored == (FieldNode(key="name"),)
        assert restored != tree


class TestSchemaToJson:
    """Test cases for the preview renderer."""

    def test_preview_is_indented_json(self):
        """Test the preview format."""
        schema = {"name": "string", "address": {"city": "string"}}
        text = schema_to_json(schema)

        assert json.loads(text) == schema
        assert '\n  "address": {\n    "city": "string"\n  }' in text
