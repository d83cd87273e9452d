"""
Dynamic Pydantic model builder for the schema builder.
Creates Pydantic models from compiled schema objects for document validation
and JSON Schema export.
"""

from typing import Any, Dict, List, Mapping, Tuple, Type
from pydantic import BaseModel, ConfigDict, Field, ValidationError, create_model
import logging

logger = logging.getLogger(__name__)

OBJECT_ID_PATTERN = r'^[0-9a-fA-F]{24}$'

_PYTHON_TYPES = {
    'string': str,
    'number': float,
    'float': float,
    'boolean': bool,
    'objectId': str,
}


def get_field_type(type_name: Any) -> Type:
    """
    Map a schema type name to a Python type.

    Args:
        type_name: Type name from a schema object

    Returns:
        Python type for the field
    """
    if type_name in _PYTHON_TYPES:
        return _PYTHON_TYPES[type_name]

    logger.warning(f"Unknown field type {type_name!r}, defaulting to str")
    return str


def create_model_from_schema(schema: Mapping[str, Any], model_name: str = "DynamicModel") -> Type[BaseModel]:
    """
    Create a Pydantic model from a schema object.

    Schema keys are used as field aliases, so keys that are not valid Python
    identifiers still work. Every field is required; nested mappings become
    nested models.

    Args:
        schema: Compiled schema object
        model_name: Name for the generated model class

    Returns:
        Pydantic model class
    """
    model_fields: Dict[str, Any] = {}

    for index, (key, value) in enumerate(schema.items()):
        attribute = f"field_{index}"

        if isinstance(value, Mapping):
            nested_model = create_model_from_schema(value, f"{model_name}_{index}")
            model_fields[attribute] = (nested_model, Field(..., alias=key, title=key))
        elif value == 'objectId':
            model_fields[attribute] = (str, Field(..., alias=key, title=key, pattern=OBJECT_ID_PATTERN))
        else:
            model_fields[attribute] = (get_field_type(value), Field(..., alias=key, title=key))

    dynamic_model = create_model(
        model_name,
        __config__=ConfigDict(extra='ignore'),
        **model_fields
    )

    logger.debug(f"Created dynamic model '{model_name}' with {len(model_fields)} fields")
    return dynamic_model


def schema_to_json_schema(schema: Mapping[str, Any], title: str = "Schema") -> Dict[str, Any]:
    """
    Export a schema object as JSON Schema.

    Args:
        schema: Compiled schema object
        title: Title for the root JSON Schema object

    Returns:
        JSON Schema dictionary
    """
    model = create_model_from_schema(schema, "Schema")
    json_schema = model.model_json_schema(by_alias=True)
    json_schema['title'] = title or "Schema"
    return json_schema


def validate_document(schema: Mapping[str, Any], data: Dict[str, Any]) -> Tuple[bool, List[str]]:
    """
    Validate a document against a schema object.

    Args:
        schema: Compiled schema object
        data: Document to validate

    Returns:
        Tuple of (is_valid, list_of_errors). Each error reads
        ``"<dotted.location>: <message>"``.
    """
    model = create_model_from_schema(schema)

    try:
        model.model_validate(data)
        return True, []
    except ValidationError as e:
        errors = []
        for error in e.errors():
            location = '.'.join(str(part) for part in error['loc'])
            errors.append(f"{location}: {error['msg']}")
        logger.debug(f"Document validation failed with {len(errors)} errors")
        return False, errors
