"""
Session state management for the schema builder Streamlit app.
Holds the field tree being edited, the title, the entry under edit and the
current page.
"""

import streamlit as st
from typing import Any, Callable, Dict, Optional, Sequence
import logging

from .field_tree import FieldTree
from .schema_compiler import decompile_schema
from .schema_store import SchemaEntry

logger = logging.getLogger(__name__)

PAGE_BUILDER = "builder"
PAGE_SAVED = "saved"

TITLE_KEY = "builder_title"
FIELDS_KEY = "builder_fields"
ENTRY_ID_KEY = "builder_entry_id"
ORIGINAL_KEY = "builder_original"
REVISION_KEY = "builder_revision"
SHOW_ERRORS_KEY = "builder_show_errors"
FEEDBACK_KEY = "builder_feedback"
PENDING_DELETE_KEY = "pending_delete"
PAGE_KEY = "current_page"


class SessionManager:
    """Manages Streamlit session state for the schema builder."""

    @staticmethod
    def initialize() -> None:
        """Initialize all session state variables with default values."""
        defaults = {
            PAGE_KEY: PAGE_BUILDER,
            TITLE_KEY: '',
            FIELDS_KEY: (),
            ENTRY_ID_KEY: None,
            ORIGINAL_KEY: None,
            REVISION_KEY: 0,
            SHOW_ERRORS_KEY: False,
            FEEDBACK_KEY: [],
            PENDING_DELETE_KEY: None
        }

        for key, default_value in defaults.items():
            if key not in st.session_state:
                st.session_state[key] = default_value

    @staticmethod
    def get_page() -> str:
        return st.session_state.get(PAGE_KEY, PAGE_BUILDER)

    @staticmethod
    def set_page(page: str) -> None:
        old_page = st.session_state.get(PAGE_KEY)
        if old_page != page:
            logger.info(f"Page transition: {old_page} -> {page}")
            st.session_state[PAGE_KEY] = page

    @staticmethod
    def get_fields() -> FieldTree:
        return st.session_state.get(FIELDS_KEY, ())

    @staticmethod
    def set_fields(fields: FieldTree, structural: bool = True) -> None:
        """
        Replace the tree being edited.

        Structural changes bump the widget revision so that widgets keyed by
        path are recreated from the new tree instead of keeping stale input.
        """
        st.session_state[FIELDS_KEY] = fields
        if structural:
            st.session_state[REVISION_KEY] = st.session_state.get(REVISION_KEY, 0) + 1

    @staticmethod
    def apply(operation: Callable[..., FieldTree], *args: Any, structural: bool = True) -> None:
        """Run a field tree operation on the current tree and store the result."""
        fields = operation(SessionManager.get_fields(), *args)
        SessionManager.set_fields(fields, structural=structural)

    @staticmethod
    def widget_key(name: str, path: Sequence[int]) -> str:
        """Key for a per-field widget, unique for the current revision."""
        revision = st.session_state.get(REVISION_KEY, 0)
        return f"{name}_{revision}_{'-'.join(str(i) for i in path)}"

    @staticmethod
    def get_entry_id() -> Optional[str]:
        return st.session_state.get(ENTRY_ID_KEY)

    @staticmethod
    def get_original_schema() -> Optional[Dict[str, Any]]:
        return st.session_state.get(ORIGINAL_KEY)

    @staticmethod
    def load_entry(entry: SchemaEntry) -> None:
        """Open a saved entry in the builder."""
        SessionManager.attach_entry(entry)
        SessionManager.set_fields(decompile_schema(entry.schema_object))
        logger.info(f"Loaded schema {entry.id} into the builder")

    @staticmethod
    def attach_entry(entry: SchemaEntry) -> None:
        """Mark the tree being edited as saved to ``entry`` without rebuilding it."""
        st.session_state[TITLE_KEY] = entry.title
        st.session_state[ENTRY_ID_KEY] = entry.id
        st.session_state[ORIGINAL_KEY] = {'title': entry.title, 'schema': entry.schema_object}
        st.session_state[SHOW_ERRORS_KEY] = False

    @staticmethod
    def reset_builder() -> None:
        """Start a new, empty schema."""
        st.session_state[TITLE_KEY] = ''
        st.session_state[ENTRY_ID_KEY] = None
        st.session_state[ORIGINAL_KEY] = None
        st.session_state[SHOW_ERRORS_KEY] = False
        st.session_state[FEEDBACK_KEY] = []
        SessionManager.set_fields(())

    @staticmethod
    def detach_entry() -> None:
        """Keep the edited tree but save it as a new entry next time."""
        st.session_state[ENTRY_ID_KEY] = None
        st.session_state[ORIGINAL_KEY] = None

    @staticmethod
    def request_delete(entry_id: str, title: str) -> None:
        st.session_state[PENDING_DELETE_KEY] = {'id': entry_id, 'title': title}

    @staticmethod
    def get_pending_delete() -> Optional[Dict[str, str]]:
        return st.session_state.get(PENDING_DELETE_KEY)

    @staticmethod
    def clear_pending_delete() -> None:
        st.session_state[PENDING_DELETE_KEY] = None
