"""
Tests for BatchConfig.
"""

import pytest

from IE_Libs.BatchLib.config import BatchConfig


class TestBatchConfig:

    def test_defaults(self):
        config = BatchConfig()

        assert (config.target_width, config.target_height) == (600, 800)
        assert config.max_file_size == 5 * 1024 * 1024
        assert config.debounce_seconds == pytest.approx(0.3)
        assert config.use_threading is True

    @pytest.mark.parametrize("kwargs", [
        {"target_width": 0},
        {"target_height": -5},
        {"max_file_size": 0},
        {"debounce_seconds": -0.1},
    ])
    def test_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            BatchConfig(**kwargs)

    def test_dict_round_trip(self):
        config = BatchConfig(target_width=300, target_height=400, use_threading=False)

        assert BatchConfig.from_dict(config.to_dict()) == config

    def test_from_dict_ignores_unknown_keys(self):
        config = BatchConfig.from_dict({"target_width": 90, "theme": "dark"})

        assert config.target_width == 90
        assert config.target_height == 800
