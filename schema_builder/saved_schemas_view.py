"""
Saved Schemas page for the schema builder app.
Lists stored schemas with edit and delete actions.
"""

import logging

import streamlit as st

from .exceptions import StorageCorrupted, create_user_friendly_error_message, log_error_with_context
from .schema_compiler import schema_to_json
from .schema_store import SchemaEntry, SchemaStore
from .session_manager import ENTRY_ID_KEY, PAGE_BUILDER, SessionManager
from .submission_handler import SubmissionHandler
from .ui_feedback import Notify, show_error_messages

logger = logging.getLogger(__name__)


def _on_edit(entry: SchemaEntry) -> None:
    SessionManager.load_entry(entry)
    SessionManager.set_page(PAGE_BUILDER)


def _on_confirm_delete(store: SchemaStore) -> None:
    pending = SessionManager.get_pending_delete()
    SessionManager.clear_pending_delete()
    if not pending:
        return

    result = SubmissionHandler.delete(store, pending['id'])
    if not result.success:
        Notify.error(result.message)
        return

    logger.info(f"Deleted schema {pending['id']} from saved list")
    if st.session_state.get(ENTRY_ID_KEY) == pending['id']:
        SessionManager.detach_entry()
    Notify.warn(f"Deleted schema: {pending['title']}")


class SavedSchemasView:
    """Renders the Saved Schemas page."""

    @staticmethod
    def render(store: SchemaStore) -> None:
        st.header("📚 Saved Schemas")

        SavedSchemasView._handle_pending_delete(store)

        try:
            entries = store.list_entries()
        except StorageCorrupted as e:
            log_error_with_context(e, "listing saved schemas")
            show_error_messages([create_user_friendly_error_message(e)])
            entries = []
        else:
            if not entries:
                st.info("No schemas saved.")

        for entry in entries:
            with st.container(border=True):
                col1, col2, col3 = st.columns([6, 1, 1])
                with col1:
                    st.subheader(entry.title)
                with col2:
                    st.button("✏️", key=f"edit_{entry.id}", help="Edit this schema",
                              on_click=_on_edit, args=(entry,), width='stretch')
                with col3:
                    st.button("🗑️", key=f"delete_{entry.id}", help="Delete this schema",
                              on_click=SessionManager.request_delete, args=(entry.id, entry.title),
                              width='stretch')
                st.code(schema_to_json(entry.schema_object), language='json')

        st.button("⬅️ Back", key="back_to_builder",
                  on_click=SessionManager.set_page, args=(PAGE_BUILDER,))

    @staticmethod
    def _handle_pending_delete(store: SchemaStore) -> None:
        """Ask for confirmation before deleting a schema."""
        pending = SessionManager.get_pending_delete()
        if not pending:
            return

        st.warning("⚠️ **Confirm Schema Deletion**")
        st.write(f"Are you sure you want to delete schema **{pending['title']}**?")
        st.write("This action cannot be undone.")

        col1, col2 = st.columns(2)
        with col1:
            st.button("🗑️ Delete Schema", type="primary", key="confirm_delete",
                      on_click=_on_confirm_delete, args=(store,))
        with col2:
            st.button("❌ Cancel", key="cancel_delete",
                      on_click=SessionManager.clear_pending_delete)
