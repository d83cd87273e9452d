"""
Custom exception classes for the schema builder.

This module provides the error hierarchy shared by the field tree, the
validator, the schema store and the submission flow, together with helpers
that turn errors into user-facing messages.
"""

import logging
from typing import Optional, Dict, Any, List, Sequence

logger = logging.getLogger(__name__)


class SchemaBuilderError(Exception):
    """
    Base exception for schema builder errors.

    Attributes:
        message: Error message
        context: Additional context information
        recovery_suggestions: List of suggested recovery actions
    """

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None,
                 recovery_suggestions: Optional[List[str]] = None):
        self.message = message
        self.context = context or {}
        self.recovery_suggestions = recovery_suggestions or []
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message

    def get_full_details(self) -> Dict[str, Any]:
        """Get complete error details including context and suggestions."""
        return {
            'error_type': self.__class__.__name__,
            'message': self.message,
            'context': self.context,
            'recovery_suggestions': self.recovery_suggestions
        }


class InvalidPath(SchemaBuilderError):
    """
    Raised when a field path does not resolve in the current tree.

    Paths handed out by the editor are always derived from the tree being
    rendered, so this signals a caller bug rather than bad user input.
    """

    def __init__(self, path: Sequence[int], reason: str, message: Optional[str] = None):
        self.path = tuple(path)
        self.reason = reason

        if message is None:
            message = f"Invalid field path {list(self.path)}: {reason}"

        context = {
            'path': list(self.path),
            'reason': reason
        }

        recovery_suggestions = [
            "Re-read the field tree and recompute the path before retrying",
            "Do not reuse paths across add/remove operations"
        ]

        super().__init__(message, context, recovery_suggestions)


class MissingTitle(SchemaBuilderError):
    """Raised when a schema is submitted without a usable title."""

    def __init__(self, message: str = "Schema title is required."):
        super().__init__(
            message,
            recovery_suggestions=["Enter a title for the schema before saving"]
        )


class FieldValidationFailed(SchemaBuilderError):
    """
    Raised when the field tree contains structural errors.

    The ordered error list is kept as produced by the validator so the first
    entry is the first problem in document order.
    """

    def __init__(self, errors: Sequence[Any], message: Optional[str] = None):
        self.errors = list(errors)

        if message is None:
            count = len(self.errors)
            message = f"Schema has {count} field error{'s' if count != 1 else ''}"

        context = {
            'errors': [
                {'path': list(error.path), 'message': error.message}
                for error in self.errors
            ]
        }

        super().__init__(
            message,
            context,
            ["Fix the highlighted fields and save again"]
        )


class EmptySchema(SchemaBuilderError):
    """Raised when a schema would compile to an empty mapping."""

    def __init__(self, message: str = "At least one field with a name is required."):
        super().__init__(
            message,
            recovery_suggestions=["Add a field and give it a name"]
        )


class DuplicateTitle(SchemaBuilderError):
    """Raised when a schema title is already used by another stored entry."""

    def __init__(self, title: str, message: Optional[str] = None):
        self.title = title

        if message is None:
            message = f'A schema with the title "{title}" already exists.'

        super().__init__(
            message,
            {'title': title},
            ["Choose a different title", "Edit the existing schema instead"]
        )


class NotFound(SchemaBuilderError):
    """Raised when no stored entry has the requested id."""

    def __init__(self, entry_id: str, message: Optional[str] = None):
        self.entry_id = entry_id

        if message is None:
            message = f"Schema not found: {entry_id}"

        super().__init__(
            message,
            {'entry_id': entry_id},
            ["Reload the saved schemas list", "The schema may have been deleted"]
        )


class StorageCorrupted(SchemaBuilderError):
    """
    Raised when the persisted collection cannot be decoded.

    This includes invalid JSON and payloads whose root is not a list.
    """

    def __init__(self, key: str, original_error: Exception,
                 message: Optional[str] = None):
        self.key = key
        self.original_error = original_error

        if message is None:
            message = f"Stored collection '{key}' is unreadable: {str(original_error)}"

        context = {
            'key': key,
            'original_error_type': type(original_error).__name__,
            'original_error_message': str(original_error)
        }

        recovery_suggestions = [
            "Check the storage file for manual edits or truncation",
            "Restore the collection from a backup",
            "Remove the storage file to start with an empty collection"
        ]

        super().__init__(message, context, recovery_suggestions)


def create_user_friendly_error_message(error: SchemaBuilderError) -> Dict[str, Any]:
    """
    Create user-friendly error message for display in UI.

    Args:
        error: SchemaBuilderError instance

    Returns:
        Dictionary with formatted error information for UI display
    """
    error_details = error.get_full_details()

    error_type_info = {
        'InvalidPath': {
            'title': 'Editor Error',
            'icon': '🧭',
            'severity': 'error'
        },
        'MissingTitle': {
            'title': 'Missing Title',
            'icon': '🏷️',
            'severity': 'warning'
        },
        'FieldValidationFailed': {
            'title': 'Field Errors',
            'icon': '⚠️',
            'severity': 'warning'
        },
        'EmptySchema': {
            'title': 'Empty Schema',
            'icon': '📭',
            'severity': 'warning'
        },
        'DuplicateTitle': {
            'title': 'Duplicate Title',
            'icon': '📄',
            'severity': 'warning'
        },
        'NotFound': {
            'title': 'Schema Not Found',
            'icon': '🔍',
            'severity': 'error'
        },
        'StorageCorrupted': {
            'title': 'Storage Error',
            'icon': '💾',
            'severity': 'error'
        }
    }

    error_type = error_details['error_type']
    type_info = error_type_info.get(error_type, {
        'title': 'Schema Builder Error',
        'icon': '❌',
        'severity': 'error'
    })

    return {
        'title': f"{type_info['icon']} {type_info['title']}",
        'message': error_details['message'],
        'severity': type_info['severity'],
        'context': error_details['context'],
        'recovery_suggestions': error_details['recovery_suggestions']
    }


def log_error_with_context(error: SchemaBuilderError, operation: str) -> None:
    """
    Log error with full context information.

    Args:
        error: SchemaBuilderError instance
        operation: Description of the operation that failed
    """
    logger.error(f"Schema builder error during {operation}")
    logger.error(f"Error type: {type(error).__name__}")
    logger.error(f"Error message: {error.message}")

    if error.context:
        logger.error("Error context:")
        for key, value in error.context.items():
            logger.error(f"  {key}: {value}")

    if error.recovery_suggestions:
        logger.info("Recovery suggestions:")
        for i, suggestion in enumerate(error.recovery_suggestions, 1):
            logger.info(f"  {i}. {suggestion}")
