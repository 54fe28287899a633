"""
Export operations for Image Enhancer.

Functions:
    build_output_filename: Download name for a processed image
    select_artifact: Pick the image bytes a record should be exported as
    save_records: Batch save completed records to disk
"""

import logging
from pathlib import Path
from typing import Iterable, Optional, Tuple

from IE_Libs.constants import OUTPUT_EXTENSION, PROCESSED_SUFFIX, TEXT_OVERLAY_SUFFIX
from IE_Libs.ImageEditingLib.image_models import ItemStatus, ProcessedImageRecord

logger = logging.getLogger(__name__)


def build_output_filename(original_name: str, with_text: bool) -> str:
    """
    Build the download filename for a processed image.

    The stem is everything before the last '.', or the whole name when that
    would be empty ("photo.jpg" -> "photo", ".hidden" -> ".hidden").

    Args:
        original_name: Name of the uploaded file
        with_text: True when the exported image carries the text overlay

    Returns:
        e.g. "photo_processed.png" or "photo_text_overlay.png"
    """
    dot = original_name.rfind(".")
    stem = original_name[:dot] if dot > 0 else original_name
    suffix = TEXT_OVERLAY_SUFFIX if with_text else PROCESSED_SUFFIX
    return f"{stem}{suffix}{OUTPUT_EXTENSION}"


def select_artifact(record: ProcessedImageRecord) -> Optional[Tuple[str, bytes]]:
    """
    Return (filename, png_bytes) for a completed record, or None.

    The text overlay image is preferred when the overlay is active and has
    been rendered; otherwise the normalized image is used.
    """
    if record.status != ItemStatus.COMPLETE:
        return None

    if record.has_overlay_output:
        return build_output_filename(record.name, with_text=True), record.final_image

    if record.normalized_image is not None:
        return build_output_filename(record.name, with_text=False), record.normalized_image

    return None


def save_records(records: Iterable[ProcessedImageRecord], output_dir: Path) -> int:
    """
    Save every completed record to disk.

    Args:
        records: Records to consider; incomplete ones are skipped
        output_dir: Directory path where images should be saved

    Returns:
        The number of images saved

    Raises:
        OSError: If directory cannot be accessed or files cannot be written
    """
    output_dir = Path(output_dir)
    if not output_dir.exists():
        raise OSError(f"Output directory does not exist: {output_dir}")

    if not output_dir.is_dir():
        raise OSError(f"Output path is not a directory: {output_dir}")

    saved_count = 0
    for record in records:
        artifact = select_artifact(record)
        if artifact is None:
            continue
        filename, data = artifact
        (output_dir / filename).write_bytes(data)
        saved_count += 1

    logger.info(f"Saved {saved_count} processed image(s) to {output_dir}")
    return saved_count
