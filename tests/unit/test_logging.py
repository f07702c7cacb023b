"""Tests for logging processors."""

from stockledger.config.logging import app_context_processor, round_floats
from stockledger.config.settings import get_settings


class TestProcessors:
    def test_round_floats_trims_fold_noise(self):
        event = {"event": "insufficient_stock", "available": 49.999999999, "requested": 60, "material_id": "m1"}

        result = round_floats(None, "warning", event)

        assert result["available"] == 50.0
        assert result["requested"] == 60
        assert result["material_id"] == "m1"

    def test_app_context_added_without_overriding(self):
        add_app_context = app_context_processor()

        result = add_app_context(None, "info", {"event": "x", "environment": "custom"})

        assert result["app"] == get_settings().app_name
        assert result["version"] == get_settings().app_version
        assert result["environment"] == "custom"
