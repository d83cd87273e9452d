"""
Schema Builder page for the schema builder app.
Renders the recursive field editor, the live preview and the save controls.
"""

import json
import logging
from typing import Any, Dict, List, Sequence, Tuple

import streamlit as st

from .diff_utils import calculate_schema_diff, format_diff_for_display, get_change_summary, has_changes
from .exceptions import FieldValidationFailed, create_user_friendly_error_message
from .field_tree import (
    FIELD_TYPES,
    FieldNode,
    Path,
    add_field,
    count_fields,
    duplicate_field,
    move_field,
    remove_field,
    toggle_lock,
    update_field,
)
from .model_builder import schema_to_json_schema, validate_document
from .schema_compiler import compile_schema, schema_to_json
from .schema_store import SchemaStore
from .session_manager import (
    FEEDBACK_KEY,
    PAGE_SAVED,
    SHOW_ERRORS_KEY,
    TITLE_KEY,
    SessionManager,
)
from .submission_handler import SubmissionHandler
from .ui_feedback import Notify, show_error_messages
from .validator import validate_fields

logger = logging.getLogger(__name__)

PREVIEW_LABELS = {
    'schema': 'Schema object',
    'json_schema': 'JSON Schema'
}


def _format_path(path: Sequence[int]) -> str:
    return ' › '.join(str(index + 1) for index in path)


def _on_key_change(path: Path, widget_key: str) -> None:
    SessionManager.apply(update_field, path, {'key': st.session_state[widget_key]}, structural=False)


def _on_type_change(path: Path, widget_key: str) -> None:
    SessionManager.apply(update_field, path, {'type': st.session_state[widget_key]}, structural=False)


def _on_save(store: SchemaStore) -> None:
    """Submit the current tree and record feedback for the next render."""
    result = SubmissionHandler.submit(
        store,
        st.session_state.get(TITLE_KEY, ''),
        SessionManager.get_fields(),
        SessionManager.get_entry_id()
    )

    if result.success:
        st.session_state[FEEDBACK_KEY] = []
        SessionManager.attach_entry(result.entry)
        Notify.success(result.message)
        return

    feedback = []
    for error in result.errors:
        item = create_user_friendly_error_message(error)
        if isinstance(error, FieldValidationFailed):
            item['details'] = [
                f"Field {_format_path(field_error.path)}: {field_error.message}"
                for field_error in error.errors
            ]
        feedback.append(item)

    logger.info(f"Save rejected with {len(result.errors)} errors: {result.message}")
    st.session_state[FEEDBACK_KEY] = feedback
    st.session_state[SHOW_ERRORS_KEY] = True
    Notify.error(result.message)


class SchemaBuilderView:
    """Renders the Schema Builder page."""

    @staticmethod
    def render(store: SchemaStore, config: Dict[str, Any]) -> None:
        """Render the builder with the editor on the left and preview on the right."""
        editing = SessionManager.get_entry_id() is not None
        st.header("🧱 JSON Schema Builder")
        if editing:
            st.caption("Editing a saved schema")

        editor_col, preview_col = st.columns(2)

        with editor_col:
            SchemaBuilderView._render_editor(store, editing)

        with preview_col:
            SchemaBuilderView._render_preview(config)

    @staticmethod
    def _render_editor(store: SchemaStore, editing: bool) -> None:
        st.text_input("Schema Title", key=TITLE_KEY, placeholder="Enter schema title")

        fields = SessionManager.get_fields()
        errors_by_path: Dict[Path, List[str]] = {}
        if st.session_state.get(SHOW_ERRORS_KEY):
            for error in validate_fields(fields):
                errors_by_path.setdefault(error.path, []).append(error.message)

        if not fields:
            st.caption("No fields yet. Add one below.")

        for index, field in enumerate(fields):
            SchemaBuilderView._render_field(field, (index,), len(fields), errors_by_path)

        st.button(
            "➕ Add Field",
            key="add_root_field",
            on_click=SessionManager.apply,
            args=(add_field,),
            width='stretch'
        )

        show_error_messages(st.session_state.get(FEEDBACK_KEY, []))

        col1, col2, col3 = st.columns(3)
        with col1:
            st.button(
                "💾 Update Schema" if editing else "💾 Save Schema",
                type="primary",
                key="save_schema_btn",
                on_click=_on_save,
                args=(store,),
                width='stretch'
            )
        with col2:
            st.button(
                "🆕 New Schema" if editing else "🧹 Clear",
                key="reset_builder_btn",
                on_click=SessionManager.reset_builder,
                width='stretch'
            )
        with col3:
            st.button(
                "📚 View Saved Schemas",
                key="view_saved_btn",
                on_click=SessionManager.set_page,
                args=(PAGE_SAVED,),
                width='stretch'
            )

        st.caption(f"{count_fields(fields)} fields")

    @staticmethod
    def _render_field(
        field: FieldNode,
        path: Path,
        sibling_count: int,
        errors_by_path: Dict[Path, List[str]]
    ) -> None:
        """Render one field row and, for nested fields, its children."""
        key_widget = SessionManager.widget_key("key", path)
        type_widget = SessionManager.widget_key("type", path)
        index = path[-1]

        cols = st.columns([4, 3, 1, 1, 1, 1, 1])
        with cols[0]:
            st.text_input(
                "Field name",
                value=field.key,
                key=key_widget,
                disabled=field.locked,
                placeholder="Field name",
                label_visibility="collapsed",
                on_change=_on_key_change,
                args=(path, key_widget)
            )
        with cols[1]:
            st.selectbox(
                "Field type",
                options=FIELD_TYPES,
                index=FIELD_TYPES.index(field.type),
                key=type_widget,
                disabled=field.locked,
                label_visibility="collapsed",
                on_change=_on_type_change,
                args=(path, type_widget)
            )
        with cols[2]:
            st.toggle(
                "🔒",
                value=field.locked,
                key=SessionManager.widget_key("lock", path),
                help="Lock name and type",
                on_change=SessionManager.apply,
                args=(toggle_lock, path)
            )
        with cols[3]:
            st.button("🔼", key=SessionManager.widget_key("up", path), help="Move up",
                      disabled=index == 0,
                      on_click=SessionManager.apply, args=(move_field, path, -1))
        with cols[4]:
            st.button("🔽", key=SessionManager.widget_key("down", path), help="Move down",
                      disabled=index == sibling_count - 1,
                      on_click=SessionManager.apply, args=(move_field, path, 1))
        with cols[5]:
            st.button("📋", key=SessionManager.widget_key("dup", path), help="Duplicate",
                      on_click=SessionManager.apply, args=(duplicate_field, path))
        with cols[6]:
            st.button("✖️", key=SessionManager.widget_key("remove", path), help="Remove",
                      on_click=SessionManager.apply, args=(remove_field, path))

        for message in errors_by_path.get(path, []):
            st.caption(f":red[{message}]")

        if field.is_nested:
            with st.container(border=True):
                for child_index, child in enumerate(field.children):
                    SchemaBuilderView._render_field(
                        child, path + (child_index,), len(field.children), errors_by_path
                    )
                st.button(
                    "➕ Add Field",
                    key=SessionManager.widget_key("add", path),
                    on_click=SessionManager.apply,
                    args=(add_field, path),
                    width='stretch'
                )

    @staticmethod
    def _render_preview(config: Dict[str, Any]) -> None:
        title = st.session_state.get(TITLE_KEY, '')
        schema = compile_schema(SessionManager.get_fields())

        st.subheader(f"Live {title} Schema Preview")

        default_format = config.get('ui', {}).get('preview_format', 'schema')
        formats = list(PREVIEW_LABELS)
        preview_format = st.radio(
            "Preview format",
            options=formats,
            index=formats.index(default_format) if default_format in formats else 0,
            format_func=PREVIEW_LABELS.get,
            horizontal=True,
            key="preview_format"
        )

        if preview_format == 'json_schema':
            st.code(json.dumps(schema_to_json_schema(schema, title.strip()), indent=2), language='json')
        else:
            st.code(schema_to_json(schema), language='json')

        original = SessionManager.get_original_schema()
        if original is not None:
            SchemaBuilderView._render_unsaved_changes(original, title.strip(), schema)

        SchemaBuilderView._render_document_check(schema)

    @staticmethod
    def _render_unsaved_changes(original: Dict[str, Any], title: str, schema: Dict[str, Any]) -> None:
        diff = calculate_schema_diff(original['schema'], schema)
        title_changed = title != original['title']

        if not has_changes(diff) and not title_changed:
            st.caption("✅ No unsaved changes")
            return

        st.warning("⚠️ **Unsaved Changes**")
        summary = get_change_summary(diff)
        st.caption(
            f"{summary['added']} added, {summary['removed']} removed, {summary['changed']} changed"
            + (", title changed" if title_changed else "")
        )
        lines = format_diff_for_display(diff)
        if title_changed:
            lines.insert(0, f"~ title: {original['title']} → {title}")
        st.code('\n'.join(lines), language='diff')

    @staticmethod
    def _render_document_check(schema: Dict[str, Any]) -> None:
        """Validate a pasted JSON document against the schema being edited."""
        with st.expander("🧪 Test a document"):
            text = st.text_area("Document JSON", key="document_check_input", height=150,
                                placeholder='{"name": "Ada"}')
            if not st.button("Validate", key="document_check_btn"):
                return

            is_valid, errors = check_document(schema, text)
            if is_valid:
                st.success("✅ Document matches the schema")
            else:
                for error in errors:
                    st.error(error)


def check_document(schema: Dict[str, Any], text: str) -> Tuple[bool, List[str]]:
    """
    Parse ``text`` as JSON and validate it against ``schema``.

    Returns:
        Tuple of (is_valid, list_of_errors)
    """
    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        return False, [f"Invalid JSON: {e}"]

    if not isinstance(document, dict):
        return False, ["Document must be a JSON object"]

    return validate_document(schema, document)
