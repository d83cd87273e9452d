"""
Submission handler for the schema builder.
Validates an edited field tree, compiles it and saves it to the schema store.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from .exceptions import DuplicateTitle, NotFound, SchemaBuilderError, StorageCorrupted
from .field_tree import FieldTree
from .schema_compiler import compile_schema
from .schema_store import SchemaEntry, SchemaStore
from .validator import validate_submission

logger = logging.getLogger(__name__)


@dataclass
class SubmissionResult:
    """Outcome of a save attempt, ready for inline display."""

    success: bool
    entry: Optional[SchemaEntry] = None
    errors: List[SchemaBuilderError] = field(default_factory=list)
    message: str = ""


class SubmissionHandler:
    """Handles the save workflow for edited schemas."""

    @staticmethod
    def submit(
        store: SchemaStore,
        title: str,
        tree: FieldTree,
        entry_id: Optional[str] = None
    ) -> SubmissionResult:
        """
        Validate and save a schema.

        Args:
            store: Schema store to save into
            title: Title as entered; surrounding whitespace is dropped
            tree: Edited field tree
            entry_id: Id of the entry being edited, or None to create

        Returns:
            SubmissionResult. Validation, duplicate, missing-entry and storage problems
            are reported in ``errors`` instead of being raised.
        """
        errors = validate_submission(title, tree)
        if errors:
            logger.warning(f"Submission of {title!r} rejected: {len(errors)} validation errors")
            return SubmissionResult(
                success=False,
                errors=errors,
                message=errors[0].message
            )

        clean_title = title.strip()
        schema = compile_schema(tree)

        try:
            if entry_id is None:
                entry = store.create(clean_title, schema)
                message = f'Schema "{entry.title}" saved successfully!'
            else:
                entry = store.update(entry_id, clean_title, schema)
                message = f'Schema "{entry.title}" updated successfully!'
        except (DuplicateTitle, NotFound, StorageCorrupted) as e:
            logger.warning(f"Submission of {clean_title!r} failed: {e}")
            return SubmissionResult(success=False, errors=[e], message=e.message)

        return SubmissionResult(success=True, entry=entry, message=message)

    @staticmethod
    def delete(store: SchemaStore, entry_id: str) -> SubmissionResult:
        """Delete a saved schema; deleting an unknown id still succeeds."""
        try:
            store.delete(entry_id)
        except StorageCorrupted as e:
            logger.error(f"Delete of {entry_id} failed: {e}")
            return SubmissionResult(success=False, errors=[e], message=e.message)
        return SubmissionResult(success=True, message="Schema deleted")
