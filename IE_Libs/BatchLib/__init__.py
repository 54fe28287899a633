"""
BatchLib - Per-item orchestration of the processing core

This module keeps the per-item records, debounces overlay renders and runs
batch normalization one item at a time.
"""

from IE_Libs.BatchLib.config import BatchConfig
from IE_Libs.BatchLib.debouncer import Debouncer
from IE_Libs.BatchLib.item_store import ItemStore
from IE_Libs.BatchLib.orchestrator import EDITABLE_TEXT_SETTINGS, BatchOrchestrator

__all__ = [
    "BatchConfig",
    "Debouncer",
    "ItemStore",
    "BatchOrchestrator",
    "EDITABLE_TEXT_SETTINGS",
]
