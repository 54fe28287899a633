"""
Batch orchestrator for Image Enhancer.

Drives each uploaded item through its lifecycle:

    reading -> ready -> normalizing -> complete
                                   `-> failed
    complete -> overlay_rendering -> complete
                                  `-> failed (normalized image kept)

Normalization runs one item at a time across the whole batch. Overlay
renders are debounced per item and single-flight: at most one render per
item is outstanding, and edits that arrive during a render trigger one
trailing re-render with the latest values. Results that arrive for removed
items, or for items whose overlay was switched off, are discarded.

Example:
    >>> orchestrator = BatchOrchestrator()
    >>> item_id = orchestrator.add_file("photo.jpg", photo_bytes)
    >>> await orchestrator.process_all()
    >>> orchestrator.set_overlay_active(item_id, True)
    >>> orchestrator.set_overlay_text(item_id, "Hello")
    >>> await orchestrator.wait_until_idle()
    >>> name, data = orchestrator.artifact(item_id)
"""

import asyncio
import logging
import uuid
from dataclasses import replace
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Set, Tuple

from IE_Libs.BatchLib.config import BatchConfig
from IE_Libs.BatchLib.debouncer import Debouncer
from IE_Libs.BatchLib.item_store import ItemStore
from IE_Libs.constants import OVERLAY_ERROR_PREFIX, SIZE_ERROR_ID_SUFFIX, SIZE_ERROR_MESSAGE
from IE_Libs.ImageEditingLib.errors import ImageEnhancerError
from IE_Libs.ImageEditingLib.frame_normalizer import normalize
from IE_Libs.ImageEditingLib.image_editing_ops import save_records, select_artifact
from IE_Libs.ImageEditingLib.image_models import (
    ItemStatus,
    ProcessedImageRecord,
    TextSettings,
)
from IE_Libs.ImageEditingLib.text_overlay import render_overlay

logger = logging.getLogger(__name__)

NormalizerFunction = Callable[[bytes, int, int, bool], bytes]
RendererFunction = Callable[[bytes, str, TextSettings, int, int], Tuple[bytes, str]]

# Settings the user may edit; `color` is derived from renders only
EDITABLE_TEXT_SETTINGS = {
    "is_active",
    "x_offset",
    "y_offset",
    "font_size",
    "font_family",
    "manual_color_override",
}

_RENDERABLE_STATUSES = {ItemStatus.COMPLETE, ItemStatus.OVERLAY_RENDERING, ItemStatus.FAILED}


def _error_message(error: Exception, fallback: str) -> str:
    return str(error) or fallback


class BatchOrchestrator:
    """
    Owns the item store and schedules core calls for every item.

    Args:
        config: Batch configuration (defaults to BatchConfig())
        normalizer: Frame normalizer callable (defaults to normalize)
        renderer: Text overlay renderer callable (defaults to render_overlay)
    """

    def __init__(
        self,
        config: Optional[BatchConfig] = None,
        normalizer: NormalizerFunction = normalize,
        renderer: RendererFunction = render_overlay,
    ):
        self.config = config or BatchConfig()
        self._normalizer = normalizer
        self._renderer = renderer
        self._store = ItemStore()
        self._debouncer = Debouncer(self.config.debounce_seconds)
        self._normalize_lock = asyncio.Lock()
        self._render_tasks: Dict[str, "asyncio.Task[None]"] = {}
        self._rerender_requested: Set[str] = set()
        self._batch_active = False

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def store(self) -> ItemStore:
        return self._store

    def get(self, item_id: str) -> Optional[ProcessedImageRecord]:
        return self._store.get(item_id)

    def records(self) -> List[ProcessedImageRecord]:
        return self._store.records()

    @property
    def is_batch_active(self) -> bool:
        return self._batch_active

    @property
    def is_processing_any(self) -> bool:
        return any(
            r.status in (ItemStatus.NORMALIZING, ItemStatus.OVERLAY_RENDERING)
            for r in self._store
        )

    def is_render_pending(self, item_id: str) -> bool:
        return self._debouncer.is_pending(item_id) or item_id in self._render_tasks

    # ------------------------------------------------------------------
    # File intake boundary
    # ------------------------------------------------------------------

    def add_file(
        self,
        name: str,
        data: Optional[bytes] = None,
        size: Optional[int] = None,
    ) -> str:
        """
        Register an uploaded file.

        Args:
            name: Original filename
            data: Encoded image bytes, or None while the file is still being read
            size: File size in bytes when data is not yet available

        Returns:
            The new item id. Oversized files get an id ending in '-size-error'
            and are recorded as failed without reaching the processing core.
        """
        item_id = f"{name}-{uuid.uuid4().hex[:12]}"
        file_size = len(data) if data is not None else size

        if file_size is not None and file_size > self.config.max_file_size:
            item_id = f"{item_id}{SIZE_ERROR_ID_SUFFIX}"
            self._store.add(ProcessedImageRecord(
                item_id=item_id,
                name=name,
                status=ItemStatus.FAILED,
                error_message=SIZE_ERROR_MESSAGE,
            ))
            logger.warning(f"Rejected {name}: {file_size} bytes exceeds size limit")
            return item_id

        if data is None:
            self._store.add(ProcessedImageRecord(item_id=item_id, name=name))
        else:
            self._store.add(ProcessedImageRecord(
                item_id=item_id,
                name=name,
                original_image=bytes(data),
                status=ItemStatus.READY,
            ))
        return item_id

    def complete_read(self, item_id: str, data: bytes) -> bool:
        """Attach file content to an item that was still being read."""
        record = self._store.get(item_id)
        if record is None or record.status != ItemStatus.READING:
            return False

        if len(data) > self.config.max_file_size:
            self._store.update(item_id, status=ItemStatus.FAILED, error_message=SIZE_ERROR_MESSAGE)
            return False

        if not data:
            self._store.update(
                item_id,
                status=ItemStatus.FAILED,
                error_message="Failed to read file content initially.",
            )
            return False

        self._store.update(item_id, original_image=bytes(data), status=ItemStatus.READY)
        return True

    def fail_read(self, item_id: str, message: str = "Error initially reading file.") -> bool:
        """Mark an item whose file could not be read."""
        record = self._store.get(item_id)
        if record is None or record.status != ItemStatus.READING:
            return False
        self._store.update(item_id, status=ItemStatus.FAILED, error_message=message)
        return True

    # ------------------------------------------------------------------
    # Edits
    # ------------------------------------------------------------------

    def set_smoothing(self, item_id: str, enabled: bool) -> bool:
        return self._store.update(item_id, smoothing_enabled=bool(enabled)) is not None

    def set_overlay_text(self, item_id: str, text: str) -> bool:
        updated = self._store.update(item_id, overlay_text=str(text))
        if updated is None:
            return False
        if self._can_render(updated):
            self._schedule_render(item_id)
        return True

    def set_text_setting(self, item_id: str, key: str, value: Any) -> bool:
        """
        Change one text setting.

        Offsets are clamped to half the target canvas and font size to 8-120
        before the value is stored.

        Raises:
            ValueError: If key is not a user-editable setting, or the value is invalid
        """
        if key not in EDITABLE_TEXT_SETTINGS:
            raise ValueError(
                f"Unknown or read-only text setting: {key}. "
                f"Editable settings: {', '.join(sorted(EDITABLE_TEXT_SETTINGS))}"
            )
        if key == "is_active":
            return self.set_overlay_active(item_id, bool(value))

        record = self._store.get(item_id)
        if record is None:
            return False

        settings = replace(record.text_settings, **{key: value}).clamped(
            self.config.target_width, self.config.target_height
        )
        updated = self._store.update(item_id, text_settings=settings)
        if self._can_render(updated):
            self._schedule_render(item_id)
        return True

    def set_overlay_active(self, item_id: str, active: bool) -> bool:
        record = self._store.get(item_id)
        if record is None:
            return False

        settings = replace(record.text_settings, is_active=bool(active))
        if active:
            updated = self._store.update(item_id, text_settings=settings)
            if self._can_render(updated):
                self._schedule_render(item_id)
        else:
            self._debouncer.cancel(item_id)
            self._rerender_requested.discard(item_id)
            self._store.update(item_id, text_settings=settings, final_image=None)
        return True

    def remove_item(self, item_id: str) -> bool:
        """
        Remove an item.

        Cancels its pending render; results of calls already in flight for
        it are discarded when they arrive.
        """
        self._debouncer.cancel(item_id)
        self._rerender_requested.discard(item_id)
        removed = self._store.remove(item_id)
        if removed and self._batch_active and not self._has_batch_work():
            self._batch_active = False
        return removed

    # ------------------------------------------------------------------
    # Normalization
    # ------------------------------------------------------------------

    async def normalize_item(self, item_id: str) -> bool:
        """
        Normalize one ready item.

        Returns False without doing anything if the item is not ready or
        another normalization is already running.
        """
        if self._normalize_lock.locked():
            logger.debug(f"Normalization busy, not starting {item_id}")
            return False
        return await self._normalize(item_id)

    async def process_all(self) -> int:
        """
        Normalize every ready item, one at a time.

        Returns:
            Number of items normalized successfully
        """
        if self._batch_active:
            return 0

        self._batch_active = True
        attempted: Set[str] = set()
        processed = 0
        logger.info("Batch processing started")
        try:
            while self._batch_active:
                record = self._next_ready(attempted)
                if record is None:
                    break
                attempted.add(record.item_id)
                if await self._normalize(record.item_id):
                    processed += 1
        finally:
            self._batch_active = False
        logger.info(f"Batch processing finished: {processed} item(s) normalized")
        return processed

    def _next_ready(self, exclude: Set[str]) -> Optional[ProcessedImageRecord]:
        for record in self._store:
            if (
                record.status == ItemStatus.READY
                and record.original_image is not None
                and record.item_id not in exclude
            ):
                return record
        return None

    def _has_batch_work(self) -> bool:
        return any(
            r.status in (ItemStatus.READY, ItemStatus.NORMALIZING, ItemStatus.OVERLAY_RENDERING)
            for r in self._store
        )

    async def _normalize(self, item_id: str) -> bool:
        async with self._normalize_lock:
            record = self._store.get(item_id)
            if record is None or record.status != ItemStatus.READY or record.original_image is None:
                return False

            self._store.update(item_id, status=ItemStatus.NORMALIZING, error_message=None)
            try:
                normalized = await self._call(
                    self._normalizer,
                    record.original_image,
                    self.config.target_width,
                    self.config.target_height,
                    record.smoothing_enabled,
                )
            except Exception as e:
                if not isinstance(e, ImageEnhancerError):
                    logger.exception(f"Unexpected normalization failure for {item_id}")
                message = _error_message(e, "Client processing failed")
                if self._store.update(item_id, status=ItemStatus.FAILED, error_message=message):
                    logger.warning(f"Normalization failed for {item_id}: {message}")
                return False

            updated = self._store.update(
                item_id, normalized_image=normalized, status=ItemStatus.COMPLETE
            )

        if updated is None:
            logger.debug(f"Discarded normalization result for removed item {item_id}")
            return False

        if updated.text_settings.is_active and updated.overlay_text:
            self._schedule_render(item_id)
        return True

    # ------------------------------------------------------------------
    # Overlay rendering
    # ------------------------------------------------------------------

    @staticmethod
    def _can_render(record: Optional[ProcessedImageRecord]) -> bool:
        return (
            record is not None
            and record.normalized_image is not None
            and record.text_settings.is_active
            and record.status in _RENDERABLE_STATUSES
        )

    def _schedule_render(self, item_id: str) -> None:
        self._debouncer.schedule(item_id, lambda: self._start_render(item_id))

    def _start_render(self, item_id: str) -> None:
        if item_id in self._render_tasks:
            self._rerender_requested.add(item_id)
            return
        if not self._can_render(self._store.get(item_id)):
            return

        task = asyncio.get_running_loop().create_task(self._render_item(item_id))
        self._render_tasks[item_id] = task
        task.add_done_callback(lambda t, key=item_id: self._on_render_done(key, t))

    def _on_render_done(self, item_id: str, task: "asyncio.Task[None]") -> None:
        if self._render_tasks.get(item_id) is task:
            del self._render_tasks[item_id]
        if item_id in self._rerender_requested:
            self._rerender_requested.discard(item_id)
            self._start_render(item_id)

    async def _render_item(self, item_id: str) -> None:
        record = self._store.get(item_id)
        if not self._can_render(record):
            return

        self._store.update(item_id, status=ItemStatus.OVERLAY_RENDERING, error_message=None)
        try:
            final_image, chosen_color = await self._call(
                self._renderer,
                record.normalized_image,
                record.overlay_text,
                record.text_settings,
                self.config.target_width,
                self.config.target_height,
            )
        except Exception as e:
            if not isinstance(e, ImageEnhancerError):
                logger.exception(f"Unexpected overlay failure for {item_id}")
            if self._discard_stale_render(item_id):
                return
            message = OVERLAY_ERROR_PREFIX + _error_message(e, "Text rendering failed")
            if self._store.update(item_id, status=ItemStatus.FAILED, error_message=message):
                logger.warning(f"Overlay failed for {item_id}: {message}")
            return

        if self._discard_stale_render(item_id):
            return

        current = self._store.get(item_id)
        self._store.update(
            item_id,
            final_image=final_image,
            text_settings=replace(current.text_settings, color=chosen_color),
            status=ItemStatus.COMPLETE,
        )

    def _discard_stale_render(self, item_id: str) -> bool:
        """Drop a render outcome for a removed or deactivated item."""
        current = self._store.get(item_id)
        if current is None:
            logger.debug(f"Discarded overlay result for removed item {item_id}")
            return True
        if not current.text_settings.is_active:
            logger.debug(f"Discarded overlay result for deactivated item {item_id}")
            self._store.update(item_id, status=ItemStatus.COMPLETE, error_message=None)
            return True
        return False

    async def _call(self, func: Callable[..., Any], *args: Any) -> Any:
        if self.config.use_threading:
            loop = asyncio.get_running_loop()
            return await loop.run_in_executor(None, func, *args)
        # Yield once so the call suspends like a decode boundary would
        await asyncio.sleep(0)
        return func(*args)

    async def wait_until_idle(self) -> None:
        """Wait until no overlay render is pending or running."""
        while len(self._debouncer) or self._render_tasks:
            if self._render_tasks:
                await asyncio.gather(*list(self._render_tasks.values()), return_exceptions=True)
            else:
                await asyncio.sleep(max(self.config.debounce_seconds / 4, 0.005))

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def artifact(self, item_id: str) -> Optional[Tuple[str, bytes]]:
        """Downloadable (filename, png_bytes) for a completed item, or None."""
        record = self._store.get(item_id)
        if record is None:
            return None
        return select_artifact(record)

    def export_all(self, output_dir: Path) -> int:
        """Save every completed item to output_dir. Returns the number saved."""
        return save_records(self._store.records(), Path(output_dir))

    async def aclose(self) -> None:
        """Cancel pending renders and wait for in-flight ones to stop."""
        self._debouncer.cancel_all()
        self._rerender_requested.clear()
        tasks = list(self._render_tasks.values())
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._render_tasks.clear()
