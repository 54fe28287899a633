"""
Item store for the batch orchestrator.

Holds the authoritative ProcessedImageRecord for every item, keyed by item
id. Records are immutable; every change swaps in a merged copy, so values
handed to the processing core can never be modified behind its back.
"""

import logging
from dataclasses import replace
from typing import Any, Dict, Iterator, List, Optional

from IE_Libs.ImageEditingLib.image_models import ItemStatus, ProcessedImageRecord

logger = logging.getLogger(__name__)


class ItemStore:
    """
    Registry of processed image records keyed by item id.

    Example:
        >>> store = ItemStore()
        >>> store.add(ProcessedImageRecord(item_id="a", name="a.png"))
        >>> store.update("a", status=ItemStatus.READY).status
        <ItemStatus.READY: 'ready'>
    """

    def __init__(self):
        """Initialize an empty store."""
        self._records: Dict[str, ProcessedImageRecord] = {}

    def add(self, record: ProcessedImageRecord) -> None:
        """
        Add a new record.

        Raises:
            ValueError: If a record with the same id already exists
        """
        if record.item_id in self._records:
            raise ValueError(f"Item already exists: {record.item_id}")
        self._records[record.item_id] = record
        logger.debug(f"Added item {record.item_id} ({record.status.value})")

    def get(self, item_id: str) -> Optional[ProcessedImageRecord]:
        return self._records.get(item_id)

    def update(self, item_id: str, **changes: Any) -> Optional[ProcessedImageRecord]:
        """
        Merge changes into a record.

        Args:
            item_id: Item to update
            **changes: ProcessedImageRecord fields to replace

        Returns:
            The updated record, or None if the item no longer exists
        """
        current = self._records.get(item_id)
        if current is None:
            return None
        updated = replace(current, **changes)
        self._records[item_id] = updated
        if updated.status != current.status:
            logger.debug(
                f"Item {item_id}: {current.status.value} -> {updated.status.value}"
            )
        return updated

    def remove(self, item_id: str) -> bool:
        """Remove a record. Returns False if it was not present."""
        if self._records.pop(item_id, None) is None:
            return False
        logger.debug(f"Removed item {item_id}")
        return True

    def records(self) -> List[ProcessedImageRecord]:
        """All records, most recently added first."""
        return list(reversed(list(self._records.values())))

    def find_first(self, status: ItemStatus) -> Optional[ProcessedImageRecord]:
        """First record (newest first) with the given status."""
        for record in self.records():
            if record.status == status:
                return record
        return None

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[ProcessedImageRecord]:
        return iter(self.records())
