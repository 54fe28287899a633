"""
Batch processing demonstration.

Normalizes every image in a folder to a 600x800 grayscale frame, adds a
two-line caption with automatic contrast and writes the results next to
the sources in a "processed" sub-folder.

Usage:
    python examples/batch_demo.py path/to/images "Caption line 1\\nline 2"
"""

import asyncio
import logging
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from IE_Libs.BatchLib import BatchOrchestrator
from IE_Libs.constants import SUPPORTED_STANDARD_IMAGES


async def run(folder: Path, caption: str) -> None:
    orchestrator = BatchOrchestrator()

    item_ids = []
    for path in sorted(folder.iterdir()):
        if path.suffix.lower() in SUPPORTED_STANDARD_IMAGES:
            item_ids.append(orchestrator.add_file(path.name, path.read_bytes()))

    if not item_ids:
        print(f"No images found in {folder}")
        return

    for item_id in item_ids:
        orchestrator.set_smoothing(item_id, True)
        orchestrator.set_overlay_text(item_id, caption)
        orchestrator.set_text_setting(item_id, "y_offset", 300)
        orchestrator.set_overlay_active(item_id, True)

    processed = await orchestrator.process_all()
    await orchestrator.wait_until_idle()
    print(f"Normalized {processed} of {len(item_ids)} image(s)")

    for record in orchestrator.records():
        if record.error_message:
            print(f"  {record.name}: {record.error_message}")
        else:
            print(f"  {record.name}: text color {record.text_settings.color}")

    output_dir = folder / "processed"
    output_dir.mkdir(exist_ok=True)
    saved = orchestrator.export_all(output_dir)
    print(f"Saved {saved} file(s) to {output_dir}")
    await orchestrator.aclose()


def main() -> int:
    if len(sys.argv) < 2:
        print(__doc__)
        return 1
    folder = Path(sys.argv[1])
    caption = sys.argv[2].replace("\\n", "\n") if len(sys.argv) > 2 else "Image\nEnhancer"
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    asyncio.run(run(folder, caption))
    return 0


if __name__ == "__main__":
    sys.exit(main())
