"""
Unit tests for image_editing_ops module.

Tests the export helpers: download filenames, artifact selection and
batch saving of completed records.
"""

from dataclasses import replace

import pytest

from IE_Libs.ImageEditingLib.image_editing_ops import (
    build_output_filename,
    save_records,
    select_artifact,
)
from IE_Libs.ImageEditingLib.image_models import (
    ItemStatus,
    ProcessedImageRecord,
    TextSettings,
)


@pytest.fixture
def complete_record():
    return ProcessedImageRecord(
        item_id="photo-1",
        name="photo.jpg",
        original_image=b"original",
        normalized_image=b"normalized",
        status=ItemStatus.COMPLETE,
    )


class TestBuildOutputFilename:
    """Tests for build_output_filename function."""

    def test_processed_suffix(self):
        assert build_output_filename("photo.jpg", with_text=False) == "photo_processed.png"

    def test_text_overlay_suffix(self):
        assert build_output_filename("photo.jpg", with_text=True) == "photo_text_overlay.png"

    def test_only_last_extension_removed(self):
        assert build_output_filename("my.holiday.webp", False) == "my.holiday_processed.png"

    def test_name_without_extension(self):
        assert build_output_filename("scan", False) == "scan_processed.png"

    def test_dotfile_keeps_whole_name(self):
        assert build_output_filename(".hidden", True) == ".hidden_text_overlay.png"


class TestSelectArtifact:
    """Tests for select_artifact function."""

    def test_normalized_image_when_overlay_inactive(self, complete_record):
        assert select_artifact(complete_record) == ("photo_processed.png", b"normalized")

    def test_overlay_image_when_active_and_rendered(self, complete_record):
        record = replace(
            complete_record,
            final_image=b"final",
            text_settings=TextSettings(is_active=True),
        )

        assert select_artifact(record) == ("photo_text_overlay.png", b"final")

    def test_active_overlay_without_render_uses_normalized(self, complete_record):
        record = replace(complete_record, text_settings=TextSettings(is_active=True))

        assert select_artifact(record) == ("photo_processed.png", b"normalized")

    def test_stale_overlay_ignored_when_inactive(self, complete_record):
        record = replace(complete_record, final_image=b"final")

        assert select_artifact(record)[1] == b"normalized"

    @pytest.mark.parametrize("status", [
        ItemStatus.READING,
        ItemStatus.READY,
        ItemStatus.NORMALIZING,
        ItemStatus.OVERLAY_RENDERING,
        ItemStatus.FAILED,
    ])
    def test_incomplete_records_have_no_artifact(self, complete_record, status):
        assert select_artifact(replace(complete_record, status=status)) is None


class TestSaveRecords:
    """Tests for save_records function."""

    def test_saves_completed_records(self, output_dir, complete_record):
        overlay = replace(
            complete_record,
            item_id="card-1",
            name="card.png",
            final_image=b"final",
            text_settings=TextSettings(is_active=True),
        )
        pending = replace(complete_record, item_id="x", name="x.png", status=ItemStatus.READY)

        count = save_records([complete_record, overlay, pending], output_dir)

        assert count == 2
        assert (output_dir / "photo_processed.png").read_bytes() == b"normalized"
        assert (output_dir / "card_text_overlay.png").read_bytes() == b"final"
        assert not (output_dir / "x_processed.png").exists()

    def test_empty_records(self, output_dir):
        assert save_records([], output_dir) == 0

    def test_raises_if_directory_missing(self, tmp_path, complete_record):
        with pytest.raises(OSError, match="does not exist"):
            save_records([complete_record], tmp_path / "missing")

    def test_raises_if_path_is_file(self, tmp_path, complete_record):
        target = tmp_path / "file.txt"
        target.write_text("x")

        with pytest.raises(OSError, match="not a directory"):
            save_records([complete_record], target)
