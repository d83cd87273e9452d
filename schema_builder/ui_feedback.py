"""
UI feedback utilities for the schema builder.
Provides toast notifications and inline rendering of schema builder errors.
"""

import streamlit as st
from typing import Any, Dict, List
import logging

logger = logging.getLogger(__name__)


class Notify:
    """
    Toast notification helper.

    The API includes: success, info, warn, error.

    Usage:
    Notify.success("Schema saved")
    """

    _ICONS = {
        'success': '✅',
        'info': 'ℹ️',
        'warning': '⚠️',
        'error': '❌'
    }

    @staticmethod
    def _display_notification(message: str, notification_type: str = 'info') -> None:
        """Internal method to display notification based on type."""
        icon = Notify._ICONS.get(notification_type, 'ℹ️')

        try:
            st.toast(message, icon=icon)
        except Exception as e:
            logger.error(f"Error using st.toast: {e}", exc_info=True)
            full_message = f"{icon} {message}"
            if notification_type == 'success':
                st.success(full_message)
            elif notification_type == 'warning':
                st.warning(full_message)
            elif notification_type == 'error':
                st.error(full_message)
            else:
                st.info(full_message)

    @staticmethod
    def success(message: str) -> None:
        """Show success notification."""
        Notify._display_notification(message, 'success')

    @staticmethod
    def info(message: str) -> None:
        """Show info notification."""
        Notify._display_notification(message, 'info')

    @staticmethod
    def warn(message: str) -> None:
        """Show warning notification."""
        Notify._display_notification(message, 'warning')

    @staticmethod
    def error(message: str) -> None:
        """Show error notification."""
        Notify._display_notification(message, 'error')


def show_error_messages(messages: List[Dict[str, Any]]) -> None:
    """
    Render friendly error dictionaries inline.

    Args:
        messages: Dictionaries from create_user_friendly_error_message, with
            an optional ``details`` list of extra lines
    """
    for item in messages:
        render = st.error if item.get('severity') == 'error' else st.warning
        render(f"**{item['title']}**: {item['message']}")
        for line in item.get('details', []):
            st.caption(f"• {line}")
