"""
Pytest configuration and shared fixtures for Image Enhancer tests.

This module provides shared test fixtures and configuration
used across multiple test modules.
"""

import pytest


@pytest.fixture
def output_dir(tmp_path):
    """
    Provide a temporary directory for exported images.

    Args:
        tmp_path: Pytest's built-in temporary directory fixture

    Returns:
        Path object pointing to a temporary directory
    """
    target = tmp_path / "exports"
    target.mkdir()
    return target
