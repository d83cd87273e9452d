"""
Main Streamlit application for the JSON Schema Builder.
Compose nested field schemas, preview them live and keep named schemas for
later editing.
"""

import streamlit as st
import logging

from schema_builder.config_loader import (
    apply_config_defaults,
    create_store_from_config,
    get_config_summary,
    get_config_value,
    load_config,
    validate_config,
)
from schema_builder.schema_store import SchemaStore
from schema_builder.session_manager import PAGE_SAVED, SessionManager


def get_logging_level(level_str):
    """Map string logging level to logging constant."""
    level_map = {
        'DEBUG': logging.DEBUG,
        'INFO': logging.INFO,
        'WARNING': logging.WARNING,
        'ERROR': logging.ERROR,
        'CRITICAL': logging.CRITICAL
    }
    return level_map.get(str(level_str).upper(), logging.INFO)


config = load_config()
config_is_valid = validate_config(config)
config = apply_config_defaults(config)

# Configure logging dynamically from config
log_level_str = get_config_value(config, 'logging', 'level', 'INFO')
logging.basicConfig(level=get_logging_level(log_level_str))
logger = logging.getLogger(__name__)
logger.info(f"Logging configured to level: {log_level_str}")
logger.info(f"Starting app version: {get_config_value(config, 'app', 'version', 'Unknown')}")
logger.debug(f"Configuration summary: {get_config_summary(config)}")


@st.cache_resource
def get_store() -> SchemaStore:
    """Build the schema store once per server process."""
    return create_store_from_config(config)


def main():
    """Main application entry point."""
    from schema_builder.saved_schemas_view import SavedSchemasView
    from schema_builder.schema_builder_view import SchemaBuilderView

    st.set_page_config(
        page_title=get_config_value(config, 'ui', 'page_title', 'JSON Schema Builder'),
        page_icon="🧱",
        layout="wide"
    )

    if not config_is_valid:
        st.warning("⚠️ Some configuration settings are invalid, using defaults where necessary.")

    SessionManager.initialize()
    store = get_store()

    if SessionManager.get_page() == PAGE_SAVED:
        SavedSchemasView.render(store)
    else:
        SchemaBuilderView.render(store, config)


if __name__ == "__main__":
    main()
