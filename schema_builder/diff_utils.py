"""
Diff utilities for the schema builder.

Compares a saved schema object with the one currently being edited using
DeepDiff, so the editor can show what an update would change.
"""

from typing import Any, Dict, List, Mapping
from deepdiff import DeepDiff
import logging

logger = logging.getLogger(__name__)

CHANGE_TYPES = ('added', 'removed', 'changed')


def _field_path(level: Any) -> str:
    """Turn a DeepDiff tree level into a dotted field path."""
    return '.'.join(str(part) for part in level.path(output_format='list'))


def _describe(value: Any) -> str:
    if isinstance(value, Mapping):
        return 'nested'
    return str(value)


def calculate_schema_diff(original: Mapping[str, Any], modified: Mapping[str, Any]) -> Dict[str, List[Dict[str, Any]]]:
    """
    Calculate field-level differences between two schema objects.

    Args:
        original: Schema object as stored
        modified: Schema object as currently edited

    Returns:
        Dict with ``added``, ``removed`` and ``changed`` lists. Added and
        removed items carry ``path`` and ``value``; changed items carry
        ``path``, ``old`` and ``new``. Each list is sorted by path.
    """
    diff = DeepDiff(dict(original), dict(modified), view='tree')

    result: Dict[str, List[Dict[str, Any]]] = {change_type: [] for change_type in CHANGE_TYPES}

    for level in diff.get('dictionary_item_added', []):
        result['added'].append({'path': _field_path(level), 'value': level.t2})

    for level in diff.get('dictionary_item_removed', []):
        result['removed'].append({'path': _field_path(level), 'value': level.t1})

    # A primitive type swap is a value change; primitive <-> nested is a type change
    for section in ('values_changed', 'type_changes'):
        for level in diff.get(section, []):
            result['changed'].append({
                'path': _field_path(level),
                'old': level.t1,
                'new': level.t2
            })

    for items in result.values():
        items.sort(key=lambda item: item['path'])

    return result


def has_changes(diff: Dict[str, List[Dict[str, Any]]]) -> bool:
    """
    Check if there are any changes in the diff.

    Args:
        diff: Diff dictionary from calculate_schema_diff

    Returns:
        True if there are changes, False otherwise
    """
    if not diff:
        return False
    return any(diff.get(change_type) for change_type in CHANGE_TYPES)


def format_diff_for_display(diff: Dict[str, List[Dict[str, Any]]]) -> List[str]:
    """
    Format a schema diff as one line per change.

    Args:
        diff: Diff dictionary from calculate_schema_diff

    Returns:
        Lines such as ``"+ address.city (string)"``
    """
    lines = []

    for item in diff.get('added', []):
        lines.append(f"+ {item['path']} ({_describe(item['value'])})")

    for item in diff.get('removed', []):
        lines.append(f"- {item['path']} ({_describe(item['value'])})")

    for item in diff.get('changed', []):
        lines.append(f"~ {item['path']}: {_describe(item['old'])} → {_describe(item['new'])}")

    return lines


def get_change_summary(diff: Dict[str, List[Dict[str, Any]]]) -> Dict[str, int]:
    """Count changes per change type."""
    return {change_type: len(diff.get(change_type, [])) for change_type in CHANGE_TYPES}
