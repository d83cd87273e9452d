"""
Schema store for the schema builder.

Keeps the collection of saved schemas under one key of a key-value backend.
The whole collection is read on every access and rewritten on every change;
at the expected scale of a few hundred entries a linear scan is enough.
"""

import json
import logging
import uuid
from copy import deepcopy
from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .exceptions import DuplicateTitle, NotFound, StorageCorrupted
from .storage import KeyValueStore

logger = logging.getLogger(__name__)

DEFAULT_COLLECTION_KEY = "savedSchemas"


class SchemaEntry(BaseModel):
    """A saved, named schema."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    schema_object: Dict[str, Any] = Field(default_factory=dict, alias='schema')

    def to_record(self) -> Dict[str, Any]:
        """Serialize to the persisted ``{id, title, schema}`` shape."""
        return self.model_dump(by_alias=True)


def _new_id() -> str:
    return str(uuid.uuid4())


class SchemaStore:
    """
    CRUD access to the saved schema collection.

    Args:
        backend: Key-value store holding the collection
        collection_key: Key the collection is stored under
        check_duplicates_on_update: Also reject updates whose new title is
            used by a different entry. Off by default, so only
            create checks titles.
        id_factory: Callable producing fresh entry ids
    """

    def __init__(
        self,
        backend: KeyValueStore,
        collection_key: str = DEFAULT_COLLECTION_KEY,
        check_duplicates_on_update: bool = False,
        id_factory: Optional[Callable[[], str]] = None
    ):
        self.backend = backend
        self.collection_key = collection_key
        self.check_duplicates_on_update = check_duplicates_on_update
        self._id_factory = id_factory or _new_id

    def _load(self) -> List[Any]:
        """
        Read the stored collection.

        Returns:
            One item per stored record, in storage order. Valid records are
            SchemaEntry objects; records that fail validation are kept as
            their raw JSON values so that saving writes them back unchanged.

        Raises:
            StorageCorrupted: If the payload is not a JSON list
        """
        raw = self.backend.get(self.collection_key)
        if raw is None:
            return []

        try:
            records = json.loads(raw.decode('utf-8'))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.error(f"Cannot decode collection '{self.collection_key}': {e}")
            raise StorageCorrupted(self.collection_key, e)

        if not isinstance(records, list):
            error = TypeError(f"expected a list, got {type(records).__name__}")
            logger.error(f"Collection '{self.collection_key}' has invalid root: {error}")
            raise StorageCorrupted(self.collection_key, error)

        items = []
        for position, record in enumerate(records):
            try:
                items.append(SchemaEntry.model_validate(record))
            except ValidationError as e:
                logger.warning(
                    f"Hiding invalid entry #{position} in '{self.collection_key}' (kept as stored): "
                    f"{e.error_count()} validation errors"
                )
                items.append(record)
        return items

    def _save(self, items: List[Any]) -> None:
        records = [item.to_record() if isinstance(item, SchemaEntry) else item for item in items]
        payload = json.dumps(records, ensure_ascii=False)
        self.backend.set(self.collection_key, payload.encode('utf-8'))

    @staticmethod
    def _entries(items: List[Any]) -> List[SchemaEntry]:
        return [item for item in items if isinstance(item, SchemaEntry)]

    def list_entries(self) -> List[SchemaEntry]:
        """Return all readable entries in storage order."""
        return self._entries(self._load())

    def get(self, entry_id: str) -> SchemaEntry:
        """
        Return the entry with ``entry_id``.

        Raises:
            NotFound: If no entry has that id
        """
        for entry in self.list_entries():
            if entry.id == entry_id:
                return entry
        raise NotFound(entry_id)

    def find_by_title(self, title: str) -> Optional[SchemaEntry]:
        """Return the entry whose title matches exactly, or None."""
        for entry in self.list_entries():
            if entry.title == title:
                return entry
        return None

    def create(self, title: str, schema: Dict[str, Any]) -> SchemaEntry:
        """
        Save a new schema under a fresh id.

        Args:
            title: Schema title, compared case-sensitively
            schema: Compiled schema object

        Returns:
            The new entry

        Raises:
            DuplicateTitle: If an entry with the same title exists
        """
        items = self._load()
        if any(entry.title == title for entry in self._entries(items)):
            logger.warning(f"Rejected duplicate schema title: {title!r}")
            raise DuplicateTitle(title)

        entry = SchemaEntry(id=self._id_factory(), title=title, schema=deepcopy(schema))
        items.append(entry)
        self._save(items)

        logger.info(f"Created schema {entry.id} ({title!r}, {len(schema)} top-level fields)")
        return entry

    def update(self, entry_id: str, title: str, schema: Dict[str, Any]) -> SchemaEntry:
        """
        Replace the title and schema of an existing entry, keeping its position.

        Raises:
            NotFound: If no entry has ``entry_id``
            DuplicateTitle: If ``check_duplicates_on_update`` is set and another
                entry already uses ``title``
        """
        items = self._load()

        for position, item in enumerate(items):
            if isinstance(item, SchemaEntry) and item.id == entry_id:
                break
        else:
            logger.warning(f"Cannot update missing schema {entry_id}")
            raise NotFound(entry_id)

        if self.check_duplicates_on_update and any(
            other.title == title and other.id != entry_id for other in self._entries(items)
        ):
            logger.warning(f"Rejected rename of {entry_id} to duplicate title {title!r}")
            raise DuplicateTitle(title)

        updated = SchemaEntry(id=entry_id, title=title, schema=deepcopy(schema))
        items[position] = updated
        self._save(items)

        logger.info(f"Updated schema {entry_id} ({title!r})")
        return updated

    def delete(self, entry_id: str) -> None:
        """Remove the entry with ``entry_id``; unknown ids are ignored."""
        items = self._load()
        remaining = [
            item for item in items
            if not (isinstance(item, SchemaEntry) and item.id == entry_id)
        ]

        if len(remaining) == len(items):
            logger.debug(f"delete: no schema with id {entry_id}")
            return

        self._save(remaining)
        logger.info(f"Deleted schema {entry_id}")
