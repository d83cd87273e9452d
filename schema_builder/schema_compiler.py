"""
Schema compiler for the schema builder.

Converts a field tree into the persisted schema object (a mapping of field
key to type name or nested mapping) and back again for re-editing.
"""

import json
import logging
from typing import Any, Dict, Mapping

from .field_tree import (
    DEFAULT_FIELD_TYPE,
    NESTED,
    PRIMITIVE_TYPES,
    FieldNode,
    FieldTree,
)

logger = logging.getLogger(__name__)

SchemaObject = Dict[str, Any]


def compile_schema(tree: FieldTree) -> SchemaObject:
    """
    Compile a field tree into a schema object.

    Fields with an empty or whitespace-only key are skipped. Nested fields
    compile to a nested mapping (``{}`` when they have no children). When
    siblings share a key, the later one wins.

    Args:
        tree: Field tree to compile

    Returns:
        Schema object
    """
    result: SchemaObject = {}

    for field in tree:
        if not field.key or not field.key.strip():
            continue

        if field.type == NESTED:
            result[field.key] = compile_schema(field.children)
        else:
            result[field.key] = field.type

    return result


def decompile_schema(schema: Mapping[str, Any]) -> FieldTree:
    """
    Rebuild an editable field tree from a stored schema object.

    Mapping values become nested fields. Any other value becomes a primitive
    field; values that are not a recognized type name fall back to
    ``string`` so hand-edited or legacy schemas still open in the editor.
    Lock flags are not persisted, so every field comes back unlocked.

    Args:
        schema: Stored schema object

    Returns:
        Field tree
    """
    if not isinstance(schema, Mapping):
        logger.warning(f"Cannot decompile schema of type {type(schema).__name__}, using empty tree")
        return ()

    fields = []
    for key, value in schema.items():
        if isinstance(value, Mapping):
            fields.append(FieldNode(key=str(key), type=NESTED, children=decompile_schema(value)))
            continue

        if value in PRIMITIVE_TYPES:
            field_type = value
        else:
            logger.warning(
                f"Unrecognized type {value!r} for field '{key}', defaulting to '{DEFAULT_FIELD_TYPE}'"
            )
            field_type = DEFAULT_FIELD_TYPE
        fields.append(FieldNode(key=str(key), type=field_type))

    return tuple(fields)


def schema_to_json(schema: Mapping[str, Any]) -> str:
    """Render a schema object as indented JSON for the live preview."""
    return json.dumps(schema, indent=2, ensure_ascii=False)
