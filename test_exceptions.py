"""
Unit tests for the schema builder exception hierarchy.
"""

import logging

from schema_builder.exceptions import (
    DuplicateTitle,
    EmptySchema,
    FieldValidationFailed,
    InvalidPath,
    MissingTitle,
    NotFound,
    SchemaBuilderError,
    StorageCorrupted,
    create_user_friendly_error_message,
    log_error_with_context,
)
from schema_builder.validator import FieldError


class TestSchemaBuilderErrors:
    """Test cases for the exception classes."""

    def test_base_error_details(self):
        """Test get_full_details."""
        error = SchemaBuilderError("boom", {"a": 1}, ["retry"])

        assert str(error) == "boom"
        assert error.get_full_details() == {
            'error_type': 'SchemaBuilderError',
            'message': 'boom',
            'context': {'a': 1},
            'recovery_suggestions': ['retry']
        }

    def test_invalid_path(self):
        """Test that the path is kept as a tuple."""
        error = InvalidPath([1, 2], "index out of range")

        assert error.path == (1, 2)
        assert error.context == {'path': [1, 2], 'reason': "index out of range"}
        assert "[1, 2]" in error.message

    def test_default_messages(self):
        """Test the user-facing messages."""
        assert MissingTitle().message == "Schema title is required."
        assert EmptySchema().message == "At least one field with a name is required."
        assert DuplicateTitle("Foo").message == 'A schema with the title "Foo" already exists.'
        assert NotFound("abc").message == "Schema not found: abc"

    def test_field_validation_failed_context(self):
        """Test that field errors are listed in the context."""
        error = FieldValidationFailed([
            FieldError((0,), "Field name is required"),
            FieldError((1, 0), "Nested field name is required"),
        ])

        assert error.message == "Schema has 2 field errors"
        assert error.context['errors'][1] == {'path': [1, 0], 'message': "Nested field name is required"}

    def test_storage_corrupted(self):
        """Test the wrapped error details."""
        error = StorageCorrupted("savedSchemas", ValueError("bad"))

        assert isinstance(error.original_error, ValueError)
        assert error.context['original_error_type'] == 'ValueError'
        assert "savedSchemas" in error.message

    def test_all_errors_share_base(self):
        """Test the hierarchy."""
        for error in (MissingTitle(), EmptySchema(), NotFound("x"), DuplicateTitle("t")):
            assert isinstance(error, SchemaBuilderError)


class TestErrorPresentation:
    """Test cases for the presentation helpers."""

    def test_friendly_message_for_known_type(self):
        """Test title, icon and severity lookup."""
        friendly = create_user_friendly_error_message(DuplicateTitle("Foo"))

        assert friendly['title'] == "📄 Duplicate Title"
        assert friendly['severity'] == 'warning'
        assert friendly['context'] == {'title': 'Foo'}
        assert "Choose a different title" in friendly['recovery_suggestions']

    def test_friendly_message_for_unknown_type(self):
        """Test the generic fallback."""
        friendly = create_user_friendly_error_message(SchemaBuilderError("odd"))

        assert friendly['title'] == "❌ Schema Builder Error"
        assert friendly['severity'] == 'error'

    def test_log_error_with_context(self, caplog):
        """Test that context and suggestions are logged."""
        with caplog.at_level(logging.INFO, logger="schema_builder.exceptions"):
            log_error_with_context(NotFound("abc"), "update")

        assert "during update" in caplog.text
        assert "entry_id: abc" in caplog.text
        assert "Reload the saved schemas list" in caplog.text
