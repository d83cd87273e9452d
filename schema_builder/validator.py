"""
Structural validation for field trees and submissions.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from .exceptions import (
    EmptySchema,
    FieldValidationFailed,
    MissingTitle,
    SchemaBuilderError,
)
from .field_tree import FieldTree, Path, iter_fields
from .schema_compiler import compile_schema

logger = logging.getLogger(__name__)

ROOT_KEY_REQUIRED = "Field name is required"
NESTED_KEY_REQUIRED = "Nested field name is required"
NESTED_CHILDREN_REQUIRED = "Nested field must contain at least one field"


@dataclass(frozen=True)
class FieldError:
    """A structural problem at one field of the tree."""

    path: Path
    message: str


def validate_fields(tree: FieldTree) -> List[FieldError]:
    """
    Validate every field of the tree at every depth.

    Errors are ordered depth-first: a field's own errors come before those of
    its children, and siblings are checked in order.

    Args:
        tree: Field tree to validate

    Returns:
        List of field errors (empty if the tree is valid)
    """
    errors: List[FieldError] = []

    for path, field in iter_fields(tree):
        if not field.key.strip():
            message = ROOT_KEY_REQUIRED if len(path) == 1 else NESTED_KEY_REQUIRED
            errors.append(FieldError(path, message))

        if field.is_nested and not field.children:
            errors.append(FieldError(path, NESTED_CHILDREN_REQUIRED))

    return errors


def validate_title(title: Optional[str]) -> Optional[MissingTitle]:
    """Return a MissingTitle error if the title is empty or whitespace."""
    if not title or not title.strip():
        return MissingTitle()
    return None


def validate_submission(title: Optional[str], tree: FieldTree) -> List[SchemaBuilderError]:
    """
    Run every check required before a schema may be saved.

    Args:
        title: Schema title as entered
        tree: Field tree as edited

    Returns:
        Ordered list of errors: title first, then field errors, then the
        empty-schema check
    """
    errors: List[SchemaBuilderError] = []

    title_error = validate_title(title)
    if title_error:
        errors.append(title_error)

    field_errors = validate_fields(tree)
    if field_errors:
        errors.append(FieldValidationFailed(field_errors))
    elif not compile_schema(tree):
        errors.append(EmptySchema())

    if errors:
        logger.debug(f"validate_submission: {len(errors)} problems ({len(field_errors)} field errors)")

    return errors
