"""
Field tree model for the schema builder.

A field tree is an ordered tuple of root ``FieldNode`` values. Nodes are
immutable pydantic models, so every mutation below returns a new tree that
shares all untouched subtrees with the previous one. Fields are addressed by
paths of child indices, e.g. ``(1, 0)`` is the first child of the second root.
"""

import logging
from typing import Any, Callable, Dict, Iterator, Literal, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict

from .exceptions import InvalidPath

logger = logging.getLogger(__name__)

NESTED = 'nested'

# Primitive field types, in the order they are offered in the editor
PRIMITIVE_TYPES = ('string', 'number', 'boolean', 'objectId', 'float')
FIELD_TYPES = PRIMITIVE_TYPES + (NESTED,)

DEFAULT_FIELD_TYPE = 'string'

# Keys accepted by update_field
UPDATABLE_KEYS = frozenset({'key', 'type', 'children', 'locked'})

FieldType = Literal['string', 'number', 'boolean', 'objectId', 'float', 'nested']


class FieldNode(BaseModel):
    """One named, typed field. Children only matter for nested fields."""

    model_config = ConfigDict(frozen=True)

    key: str = ''
    type: FieldType = DEFAULT_FIELD_TYPE
    children: Tuple['FieldNode', ...] = ()
    locked: bool = False

    @property
    def is_nested(self) -> bool:
        return self.type == NESTED


FieldNode.model_rebuild()

FieldTree = Tuple[FieldNode, ...]
Path = Tuple[int, ...]


def new_field() -> FieldNode:
    """Create the default field appended by add_field."""
    return FieldNode(key='', type=DEFAULT_FIELD_TYPE, locked=False)


def _as_path(path: Optional[Sequence[int]]) -> Path:
    return tuple(path) if path else ()


def _check_index(siblings: FieldTree, index: Any, path: Path, depth: int) -> None:
    if isinstance(index, bool) or not isinstance(index, int):
        raise InvalidPath(path, f"index {index!r} at depth {depth} is not an integer")
    if index < 0 or index >= len(siblings):
        raise InvalidPath(
            path,
            f"index {index} at depth {depth} is out of range ({len(siblings)} fields)"
        )


def _edit_siblings(
    siblings: FieldTree,
    parent_path: Path,
    edit: Callable[[FieldTree], FieldTree],
    full_path: Path,
    depth: int = 0
) -> FieldTree:
    """
    Apply ``edit`` to the sibling list addressed by ``parent_path``.

    Every node on the way down must be a nested field. Only the nodes along
    the path are rebuilt; all other subtrees are reused as-is.
    """
    if not parent_path:
        return edit(siblings)

    index = parent_path[0]
    _check_index(siblings, index, full_path, depth)
    node = siblings[index]
    if not node.is_nested:
        raise InvalidPath(
            full_path,
            f"field at depth {depth} is of type '{node.type}', not '{NESTED}'"
        )

    children = _edit_siblings(node.children, parent_path[1:], edit, full_path, depth + 1)
    return siblings[:index] + (node.model_copy(update={'children': children}),) + siblings[index + 1:]


def _split(path: Optional[Sequence[int]]) -> Tuple[Path, Path, int]:
    full_path = _as_path(path)
    if not full_path:
        raise InvalidPath(full_path, "empty path does not address a field")
    return full_path, full_path[:-1], full_path[-1]


def get_field(tree: FieldTree, path: Sequence[int]) -> FieldNode:
    """
    Return the field at ``path``.

    Raises:
        InvalidPath: If the path does not resolve
    """
    full_path = _split(path)[0]
    siblings = tuple(tree)
    node = None
    for depth, index in enumerate(full_path):
        if node is not None:
            if not node.is_nested:
                raise InvalidPath(
                    full_path,
                    f"field at depth {depth - 1} is of type '{node.type}', not '{NESTED}'"
                )
            siblings = node.children
        _check_index(siblings, index, full_path, depth)
        node = siblings[index]
    return node


def add_field(tree: FieldTree, path: Optional[Sequence[int]] = None) -> FieldTree:
    """
    Append a default field as the last child of the nested field at ``path``.

    Args:
        tree: Current field tree
        path: Path of a nested field; empty or None appends a root field

    Returns:
        New field tree

    Raises:
        InvalidPath: If ``path`` is out of range or addresses a non-nested field
    """
    full_path = _as_path(path)
    result = _edit_siblings(tuple(tree), full_path, lambda siblings: siblings + (new_field(),), full_path)
    logger.debug(f"add_field: appended field under {list(full_path) or 'root'}")
    return result


def update_field(tree: FieldTree, path: Sequence[int], data: Dict[str, Any]) -> FieldTree:
    """
    Merge ``data`` into the field at ``path``.

    Locked fields are not protected here; the editor disables their inputs.
    Switching a nested field to a primitive type keeps its children in the
    tree, so switching back restores them.

    Args:
        tree: Current field tree
        path: Path of the field to update
        data: Any subset of ``key``, ``type``, ``children`` and ``locked``

    Returns:
        New field tree

    Raises:
        InvalidPath: If the path does not resolve
        ValueError: If ``data`` contains unknown keys
    """
    unknown = set(data) - UPDATABLE_KEYS
    if unknown:
        raise ValueError(f"Unknown field attributes: {sorted(unknown)}")

    full_path, parent_path, index = _split(path)

    def replace(siblings: FieldTree) -> FieldTree:
        _check_index(siblings, index, full_path, len(parent_path))
        node = siblings[index]
        merged = {
            'key': node.key,
            'type': node.type,
            'children': node.children,
            'locked': node.locked,
            **data
        }
        return siblings[:index] + (FieldNode(**merged),) + siblings[index + 1:]

    result = _edit_siblings(tuple(tree), parent_path, replace, full_path)
    logger.debug(f"update_field: {list(full_path)} <- {sorted(data)}")
    return result


def remove_field(tree: FieldTree, path: Sequence[int]) -> FieldTree:
    """
    Remove the field at ``path``; later siblings shift down by one.

    Raises:
        InvalidPath: If the path does not resolve
    """
    full_path, parent_path, index = _split(path)

    def remove(siblings: FieldTree) -> FieldTree:
        _check_index(siblings, index, full_path, len(parent_path))
        return siblings[:index] + siblings[index + 1:]

    result = _edit_siblings(tuple(tree), parent_path, remove, full_path)
    logger.debug(f"remove_field: removed {list(full_path)}")
    return result


def toggle_lock(tree: FieldTree, path: Sequence[int]) -> FieldTree:
    """
    Flip the ``locked`` flag of the field at ``path``.

    Raises:
        InvalidPath: If the path does not resolve
    """
    node = get_field(tree, path)
    return update_field(tree, path, {'locked': not node.locked})


def move_field(tree: FieldTree, path: Sequence[int], offset: int) -> FieldTree:
    """
    Swap the field at ``path`` with the sibling ``offset`` positions away.

    Moving past either end of the sibling list returns the tree unchanged.

    Raises:
        InvalidPath: If the path does not resolve
    """
    full_path, parent_path, index = _split(path)
    target = index + offset

    def swap(siblings: FieldTree) -> FieldTree:
        _check_index(siblings, index, full_path, len(parent_path))
        if offset == 0 or target < 0 or target >= len(siblings):
            return siblings
        reordered = list(siblings)
        reordered[index], reordered[target] = reordered[target], reordered[index]
        return tuple(reordered)

    result = _edit_siblings(tuple(tree), parent_path, swap, full_path)
    logger.debug(f"move_field: {list(full_path)} by {offset}")
    return result


def duplicate_field(tree: FieldTree, path: Sequence[int]) -> FieldTree:
    """
    Insert an unlocked copy of the field at ``path`` right after it.

    The copy's key gets a ``_copy`` suffix; an empty key stays empty.

    Raises:
        InvalidPath: If the path does not resolve
    """
    full_path, parent_path, index = _split(path)

    def duplicate(siblings: FieldTree) -> FieldTree:
        _check_index(siblings, index, full_path, len(parent_path))
        original = siblings[index]
        copy = original.model_copy(update={
            'key': f"{original.key}_copy" if original.key else '',
            'locked': False
        })
        return siblings[:index + 1] + (copy,) + siblings[index + 1:]

    result = _edit_siblings(tuple(tree), parent_path, duplicate, full_path)
    logger.debug(f"duplicate_field: duplicated {list(full_path)}")
    return result


def iter_fields(tree: FieldTree, parent_path: Path = ()) -> Iterator[Tuple[Path, FieldNode]]:
    """
    Yield ``(path, field)`` pairs depth-first in document order.

    A field is yielded before its children. Children are only visited for
    nested fields.
    """
    for index, node in enumerate(tree):
        path = parent_path + (index,)
        yield path, node
        if node.is_nested:
            yield from iter_fields(node.children, path)


def count_fields(tree: FieldTree) -> int:
    """Count all reachable fields at every depth."""
    return sum(1 for _ in iter_fields(tree))
